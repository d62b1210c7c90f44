"""LLM-backed generation service.

Builds the prompt for an intent, calls the LLM client and parses the JSON
out of the reply. Models routinely wrap JSON in code fences, add prose
around it or put raw newlines inside string values, so parsing is tolerant.

The service never touches the content model. For ``chapter-content`` and
``all-chapters`` it returns a copy of the current outline with the generated
fields filled in; the orchestrator decides what to merge.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from product_studio.errors import GenerationServiceError
from product_studio.llm import LLMClient, LLMError, LLMRequest, get_client
from product_studio.models import (
    Chapter,
    ChapterContent,
    ChapterContentContext,
    ContentOutline,
    GenerationIntent,
    GenerationRequest,
    GenerationResponse,
    GenerationStats,
    Product,
    ProductStructure,
)
from product_studio.services import prompts

logger = logging.getLogger(__name__)

WORDS_PER_PAGE = 250

FALLBACK_WORD_COUNT = 100
FALLBACK_READING_MINUTES = 1

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_OBJECT = re.compile(r"\{[\s\S]*\}")
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


class GenerationService(Protocol):
    async def generate(self, product: Product, request: GenerationRequest) -> GenerationResponse: ...


# ==============================================================================
# JSON extraction
# ==============================================================================


def _escape_control_chars_in_strings(text: str) -> str:
    """Escape raw control characters that appear inside JSON string literals."""
    out: list[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            elif ord(char) < 0x20 or char == "\x7f":
                out.append(_CONTROL_ESCAPES.get(char, ""))
                continue
        elif char == '"':
            in_string = True
        out.append(char)
    return "".join(out)


def extract_json(text: str) -> dict[str, Any]:
    """Parse the outermost JSON object out of an LLM reply.

    Raises:
        ValueError: If no parseable object is found.
    """
    cleaned = _FENCE.sub("", text or "")
    match = _OBJECT.search(cleaned)
    if match is None:
        raise ValueError("No JSON object found in response")
    candidate = match.group(0)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        try:
            data = json.loads(_escape_control_chars_in_strings(candidate))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in response: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data


# ==============================================================================
# Payload normalization
# ==============================================================================


def normalize_outline(data: dict[str, Any]) -> ContentOutline:
    """Build an outline from generated JSON, renumbering chapters by position."""
    if isinstance(data.get("outline"), dict):
        data = data["outline"]
    data = dict(data)
    chapters = []
    for position, raw in enumerate(data.get("chapters") or [], start=1):
        if not isinstance(raw, dict):
            continue
        chapter = dict(raw)
        chapter["number"] = position
        chapter.setdefault("id", f"ch{position}")
        chapter["id"] = str(chapter["id"])
        chapters.append(chapter)
    data["chapters"] = chapters
    data.setdefault("title", "Untitled")
    return ContentOutline.model_validate(data)


def chapter_content_from(data: dict[str, Any]) -> ChapterContent:
    """Generated chapter fields with defaults for anything the model left out."""
    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        raise ValueError("Response has no chapter content")
    takeaways = data.get("keyTakeaways") or []
    return ChapterContent(
        content=content,
        wordCount=_positive_int(data.get("wordCount")) or 500,
        readingTimeMinutes=_positive_int(data.get("readingTimeMinutes")) or 3,
        keyTakeaways=[str(item) for item in takeaways if item] if isinstance(takeaways, list) else [],
    )


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def fallback_chapter_content(chapter: Chapter) -> ChapterContent:
    """Placeholder content for a chapter whose generation failed in a batch run."""
    description = chapter.description or "This chapter covers important concepts."
    if chapter.keyPoints:
        points = "\n".join(f"- {point}" for point in chapter.keyPoints)
    else:
        points = "- Main concepts and ideas"
    content = (
        f"## {chapter.title}\n\n{description}\n\n**Key Points:**\n{points}\n\n"
        "*Content will be expanded. Click regenerate to try again.*"
    )
    return ChapterContent(
        content=content,
        wordCount=FALLBACK_WORD_COUNT,
        readingTimeMinutes=FALLBACK_READING_MINUTES,
        keyTakeaways=chapter.keyPoints[:3] or ["Key concept from this chapter"],
    )


def with_chapter_content(chapter: Chapter, content: ChapterContent) -> Chapter:
    return chapter.model_copy(
        update={
            "content": content.content,
            "wordCount": content.wordCount,
            "readingTimeMinutes": content.readingTimeMinutes,
            "keyTakeaways": list(content.keyTakeaways),
        }
    )


# ==============================================================================
# Service
# ==============================================================================


class LLMGenerationService:
    """Generation service backed by the LLM client.

    Usage:
        service = LLMGenerationService()
        response = await service.generate(product, GenerationRequest(intent=GenerationIntent.outline))
    """

    def __init__(self, client: Optional[LLMClient] = None):
        self._client = client

    @property
    def client(self) -> LLMClient:
        return self._client or get_client()

    async def generate(self, product: Product, request: GenerationRequest) -> GenerationResponse:
        """Run one generation.

        Raises:
            GenerationServiceError: On LLM failure or an unusable reply.
        """
        intent = request.intent
        logger.info(f"Generating {intent.value} for product {product.id}")

        if intent == GenerationIntent.outline:
            data = await self._complete_json(intent, prompts.build_outline_prompt(product))
            return GenerationResponse(outline=self._parse(intent, normalize_outline, data))

        if intent == GenerationIntent.structure:
            data = await self._complete_json(intent, prompts.build_structure_prompt(product))
            return GenerationResponse(structure=self._parse(intent, ProductStructure.from_generated, data))

        if intent == GenerationIntent.chapter_content:
            return await self._generate_chapter_content(product, request)

        if intent == GenerationIntent.all_chapters:
            return await self._generate_all_chapters(product)

        raise GenerationServiceError(str(intent), "Invalid generation type")

    async def _complete(self, prompt: str) -> str:
        response = await self.client.generate(
            LLMRequest.from_prompt(prompt, system=prompts.SYSTEM_PROMPT, json_mode=True)
        )
        return response.text

    async def _complete_json(self, intent: GenerationIntent, prompt: str) -> dict[str, Any]:
        try:
            text = await self._complete(prompt)
        except LLMError as e:
            raise GenerationServiceError(intent.value, str(e)) from e
        try:
            return extract_json(text)
        except ValueError as e:
            logger.error(f"Unparseable {intent.value} response: {text[:500]!r}")
            raise GenerationServiceError(intent.value, f"Failed to parse {intent.value} response: {e}") from e

    @staticmethod
    def _parse(intent: GenerationIntent, parser, data: dict[str, Any]):
        try:
            return parser(data)
        except (ValidationError, ValueError) as e:
            raise GenerationServiceError(intent.value, f"Generated {intent.value} is invalid: {e}") from e

    async def _generate_chapter_content(
        self, product: Product, request: GenerationRequest
    ) -> GenerationResponse:
        intent = GenerationIntent.chapter_content
        try:
            context = ChapterContentContext.model_validate(request.context)
        except ValidationError as e:
            raise GenerationServiceError(intent.value, "Chapter details required") from e

        data = await self._complete_json(intent, prompts.build_chapter_content_prompt(product, context))
        try:
            content = chapter_content_from(data)
        except ValueError as e:
            raise GenerationServiceError(
                intent.value, "Failed to parse chapter content. The AI response was not valid JSON."
            ) from e

        outline = product.analysis.outline
        if outline is None:
            raise GenerationServiceError(intent.value, "No outline to attach chapter content to")
        chapters = [
            with_chapter_content(chapter, content) if chapter.id == context.chapterId else chapter
            for chapter in outline.chapters
        ]
        return GenerationResponse(outline=outline.model_copy(update={"chapters": chapters}))

    async def _generate_all_chapters(self, product: Product) -> GenerationResponse:
        intent = GenerationIntent.all_chapters
        outline = product.analysis.outline
        if outline is None or not outline.chapters:
            raise GenerationServiceError(intent.value, "No chapters found. Generate outline first.")

        total = len(outline.chapters)
        chapters: list[Chapter] = []
        for chapter in outline.chapters:
            prompt = prompts.build_batch_chapter_prompt(product, chapter, total)
            try:
                content = chapter_content_from(extract_json(await self._complete(prompt)))
            except (LLMError, ValueError) as e:
                # Keep going: one bad chapter must not sink the whole run
                logger.error(f"Error generating chapter {chapter.id}: {e}")
                content = fallback_chapter_content(chapter)
            chapters.append(with_chapter_content(chapter, content))

        total_words = sum(chapter.wordCount or 0 for chapter in chapters)
        pages = math.ceil(total_words / WORDS_PER_PAGE)
        updated = outline.model_copy(
            update={
                "chapters": chapters,
                "estimated_word_count": total_words,
                "estimated_total_pages": pages,
            }
        )
        stats = GenerationStats(
            chaptersGenerated=len(chapters),
            totalWordCount=total_words,
            estimatedPages=pages,
        )
        logger.info(f"Generated {len(chapters)} chapters ({total_words} words) for {product.id}")
        return GenerationResponse(outline=updated, stats=stats)
