"""Export models: formats, artifacts and outcomes."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ExportFormat(str, Enum):
    """Supported export formats."""

    html = "html"
    markdown = "markdown"
    doc = "doc"
    pdf = "pdf"


class Delivery(str, Enum):
    """How the artifact reaches the user."""

    download = "download"  # Saved as a file
    print = "print"        # Opened in a viewing context for print/PDF capture


FORMAT_EXTENSIONS: dict[ExportFormat, str] = {
    ExportFormat.html: "html",
    ExportFormat.markdown: "md",
    ExportFormat.doc: "docx",
    ExportFormat.pdf: "pdf",
}

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class ExportArtifact(BaseModel):
    """A complete rendered payload ready for the download boundary."""

    model_config = ConfigDict(frozen=True)

    format: ExportFormat
    content: bytes
    media_type: str
    filename: str
    delivery: Delivery = Delivery.download


class ExportOutcome(BaseModel):
    """Result of running the renderer chain. ``artifact`` is None on failure."""

    format: ExportFormat
    artifact: Optional[ExportArtifact] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.artifact is not None
