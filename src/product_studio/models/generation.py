"""Generation contract models.

Request/response shapes exchanged with the generation service, and the
outcome the orchestrator reports back to its caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .product import ContentOutline, ProductStructure


class GenerationIntent(str, Enum):
    """Logical generation scopes. Each has its own busy flag."""

    outline = "outline"
    structure = "structure"
    chapter_content = "chapter-content"
    all_chapters = "all-chapters"


class IntentStatus(str, Enum):
    """Per-intent orchestrator status."""

    idle = "idle"
    running = "running"
    error = "error"


class GenerationRequest(BaseModel):
    """One outbound generation request."""

    intent: GenerationIntent
    context: dict[str, Any] = Field(default_factory=dict)


class GenerationStats(BaseModel):
    chaptersGenerated: int = 0
    totalWordCount: int = 0
    estimatedPages: int = 0


class GenerationResponse(BaseModel):
    """Successful generation payload. Which fields are set depends on the intent."""

    model_config = ConfigDict(extra="ignore")

    outline: Optional[ContentOutline] = None
    structure: Optional[ProductStructure] = None
    stats: Optional[GenerationStats] = None


class GenerationOutcomeStatus(str, Enum):
    completed = "completed"  # Merged into the content model
    rejected = "rejected"    # Same intent already in flight
    skipped = "skipped"      # Precondition not met, nothing sent
    failed = "failed"        # Service failed, model untouched


class GenerationOutcome(BaseModel):
    """What the orchestrator reports for one user intent."""

    intent: GenerationIntent
    status: GenerationOutcomeStatus
    message: Optional[str] = None
    stats: Optional[GenerationStats] = None

    @property
    def ok(self) -> bool:
        return self.status == GenerationOutcomeStatus.completed


class ChapterContentContext(BaseModel):
    """Context required by a ``chapter-content`` request."""

    chapterId: str
    chapterTitle: str
    chapterDescription: str = ""
    keyPoints: list[str] = Field(default_factory=list)
