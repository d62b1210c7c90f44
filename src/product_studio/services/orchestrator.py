"""Generation orchestrator.

Issues generation requests and merges their results into the content model.
Each intent has its own status; at most one request per intent is in flight.
The busy flag is set before the first ``await``, so a second call for the
same intent on the same event loop is rejected deterministically.

Different intents may run concurrently. When ``chapter-content`` and
``all-chapters`` both touch a chapter, the merge that lands last wins.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from product_studio.errors import GenerationServiceError
from product_studio.models import (
    Chapter,
    ChapterContent,
    ChapterContentContext,
    ExportChecklist,
    GenerationIntent,
    GenerationOutcome,
    GenerationOutcomeStatus,
    GenerationRequest,
    GenerationResponse,
    IntentStatus,
)
from product_studio.services import checklist as checklist_gate
from product_studio.services.content_model import ContentModel
from product_studio.services.generation_service import GenerationService

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Runs generation intents against one content model.

    Usage:
        orchestrator = GenerationOrchestrator(model, service, checklist)
        outcome = await orchestrator.generate(GenerationIntent.outline)
        if not outcome.ok:
            ...
    """

    def __init__(
        self,
        model: ContentModel,
        service: GenerationService,
        checklist: Optional[ExportChecklist] = None,
    ):
        self.model = model
        self.service = service
        self.checklist = checklist
        self._status: dict[GenerationIntent, IntentStatus] = {
            intent: IntentStatus.idle for intent in GenerationIntent
        }
        self._last_error: dict[GenerationIntent, str] = {}

    def status(self, intent: GenerationIntent) -> IntentStatus:
        return self._status[intent]

    def statuses(self) -> dict[GenerationIntent, IntentStatus]:
        return dict(self._status)

    def last_error(self, intent: GenerationIntent) -> Optional[str]:
        return self._last_error.get(intent)

    def is_running(self, intent: GenerationIntent) -> bool:
        return self._status[intent] == IntentStatus.running

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    async def generate(
        self,
        intent: GenerationIntent,
        context: Optional[dict] = None,
    ) -> GenerationOutcome:
        """Run one intent end to end. Never raises for service failures."""
        if self.is_running(intent):
            logger.info(f"Rejected {intent.value}: already in flight")
            return GenerationOutcome(
                intent=intent,
                status=GenerationOutcomeStatus.rejected,
                message=f"{intent.value} generation is already running",
            )

        skip_reason = self._precondition_failure(intent, context or {})
        if skip_reason is not None:
            logger.info(f"Skipped {intent.value}: {skip_reason}")
            return GenerationOutcome(
                intent=intent, status=GenerationOutcomeStatus.skipped, message=skip_reason
            )

        self._status[intent] = IntentStatus.running
        request = GenerationRequest(intent=intent, context=context or {})
        try:
            response = await self.service.generate(self.model.product, request)
            self._merge(intent, request, response)
            self._status[intent] = IntentStatus.idle
        except GenerationServiceError as e:
            self._status[intent] = IntentStatus.error
            self._last_error[intent] = e.message
            logger.warning(f"Generation {intent.value} failed: {e.message}")
            return GenerationOutcome(
                intent=intent, status=GenerationOutcomeStatus.failed, message=e.message
            )
        finally:
            # Unexpected exceptions still release the busy flag
            if self._status[intent] == IntentStatus.running:
                self._status[intent] = IntentStatus.error

        self._last_error.pop(intent, None)
        self._feed_checklist(intent)
        return GenerationOutcome(
            intent=intent, status=GenerationOutcomeStatus.completed, stats=response.stats
        )

    # -------------------------------------------------------------------------
    # Preconditions
    # -------------------------------------------------------------------------

    def _precondition_failure(self, intent: GenerationIntent, context: dict) -> Optional[str]:
        if intent in (GenerationIntent.outline, GenerationIntent.structure):
            return None

        if not self.model.chapters():
            return "No chapters found. Generate outline first."

        if intent == GenerationIntent.chapter_content:
            chapter_id = context.get("chapterId")
            if not chapter_id or not context.get("chapterTitle"):
                return "Chapter details required"
            try:
                ChapterContentContext.model_validate(context)
            except ValidationError:
                return "Chapter details are invalid"
            if self.model.outline.find_chapter(chapter_id) is None:
                return f"Chapter {chapter_id} is not in the current outline"
        return None

    # -------------------------------------------------------------------------
    # Merge
    # -------------------------------------------------------------------------

    def _merge(
        self,
        intent: GenerationIntent,
        request: GenerationRequest,
        response: GenerationResponse,
    ) -> None:
        if intent == GenerationIntent.outline:
            if response.outline is None:
                raise GenerationServiceError(intent.value, "response has no outline")
            self.model.apply_outline(response.outline)

        elif intent == GenerationIntent.structure:
            if response.structure is None:
                raise GenerationServiceError(intent.value, "response has no structure")
            self.model.apply_structure(response.structure)

        elif intent == GenerationIntent.chapter_content:
            context = ChapterContentContext.model_validate(request.context)
            generated = response.outline.find_chapter(context.chapterId) if response.outline else None
            if generated is None or not generated.content:
                raise GenerationServiceError(intent.value, "response has no content for the chapter")
            self.model.apply_chapter_content(context.chapterId, _content_of(generated))

        elif intent == GenerationIntent.all_chapters:
            if response.outline is None:
                raise GenerationServiceError(intent.value, "response has no outline")
            for chapter in response.outline.chapters:
                if chapter.content:
                    self.model.apply_chapter_content(chapter.id, _content_of(chapter))
            stats = response.stats
            word_count = stats.totalWordCount if stats else response.outline.estimated_word_count
            pages = stats.estimatedPages if stats else response.outline.estimated_total_pages
            if word_count is not None and pages is not None:
                self.model.apply_outline_estimates(word_count, pages)

    def _feed_checklist(self, intent: GenerationIntent) -> None:
        if self.checklist is None:
            return
        if intent in (GenerationIntent.chapter_content, GenerationIntent.all_chapters):
            checklist_gate.record_content(self.checklist, self.model)
        elif intent == GenerationIntent.structure:
            checklist_gate.record_structure(self.checklist, self.model)


def _content_of(chapter: Chapter) -> ChapterContent:
    """The generated-content fields of a chapter."""
    return ChapterContent(
        content=chapter.content,
        wordCount=chapter.wordCount or 500,
        readingTimeMinutes=chapter.readingTimeMinutes or 3,
        keyTakeaways=list(chapter.keyTakeaways or []),
    )
