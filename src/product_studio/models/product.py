"""Pydantic models for products and their content tree.

A product is a tagged variant over a closed set of shapes (content vs
software). The open-ended ``raw_analysis`` bag of the persisted record is
modelled as the typed ``ProductAnalysis`` so merges are type-checked.

Field names keep the wire names of the persisted record: camelCase for
outline and asset fields, snake_case for structure fields.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .assets import Asset


class ProductStatus(str, Enum):
    """Lifecycle status of a product record."""

    idea = "idea"
    building = "building"
    archived = "archived"
    completed = "completed"


class ProductKind(str, Enum):
    """Closed set of product shapes."""

    content = "content"
    software = "software"


SOFTWARE_PRODUCT_TYPES = frozenset({"saas", "software-tool", "mobile-app", "chrome-extension"})


def product_kind_for(product_type: str | None) -> ProductKind:
    """Map a product type id (e.g. 'ebook', 'saas') to its shape."""
    if product_type in SOFTWARE_PRODUCT_TYPES:
        return ProductKind.software
    return ProductKind.content


# =============================================================================
# Outline (chapter-based document tree)
# =============================================================================


class Section(BaseModel):
    """A sub-section inside a chapter."""

    id: str
    title: str
    content_type: str = "text"


class BonusContent(BaseModel):
    """A bonus item appended after the chapters."""

    title: str
    type: str = "guide"
    description: Optional[str] = None


class ChapterContent(BaseModel):
    """Generated-content fields of a chapter, as produced by one generation."""

    content: str
    wordCount: int = 500
    readingTimeMinutes: int = 3
    keyTakeaways: list[str] = Field(default_factory=list)


class Chapter(BaseModel):
    """A chapter of the outline.

    ``content``, ``wordCount``, ``readingTimeMinutes`` and ``keyTakeaways``
    are only ever written by a chapter-content merge.
    """

    id: str
    number: Annotated[int, Field(ge=1)]
    title: str
    description: str = ""
    keyPoints: list[str] = Field(default_factory=list)
    sections: Optional[list[Section]] = None
    estimatedPages: Optional[int] = None

    content: Optional[str] = None
    wordCount: Optional[int] = None
    readingTimeMinutes: Optional[int] = None
    keyTakeaways: Optional[list[str]] = None

    @property
    def is_complete(self) -> bool:
        """A chapter is complete once it has non-blank generated content."""
        return bool(self.content and self.content.strip())


class ContentOutline(BaseModel):
    """Chapter-based outline for text-heavy products."""

    title: str
    subtitle: Optional[str] = None
    chapters: list[Chapter] = Field(default_factory=list)
    bonus_content: Optional[list[BonusContent]] = None
    estimated_total_pages: Optional[int] = None
    estimated_word_count: Optional[int] = None

    @model_validator(mode="after")
    def validate_chapter_numbers(self) -> "ContentOutline":
        """Chapter numbers must be 1-based, contiguous and match position."""
        for position, chapter in enumerate(self.chapters, start=1):
            if chapter.number != position:
                raise ValueError(
                    f"Chapter '{chapter.id}' has number {chapter.number}, expected {position}"
                )
        return self

    def find_chapter(self, chapter_id: str) -> Optional[Chapter]:
        """Return the chapter with this id, or None."""
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None


# =============================================================================
# Structure (part/module tree for course- or software-shaped products)
# =============================================================================


class ContentItemType(str, Enum):
    video = "video"
    text = "text"
    exercise = "exercise"
    quiz = "quiz"
    download = "download"


class ContentItem(BaseModel):
    """A typed content reference inside a module."""

    id: str
    type: ContentItemType = ContentItemType.text
    title: str
    description: str = ""


class Module(BaseModel):
    id: str
    title: str
    learning_objectives: Optional[list[str]] = None
    duration_minutes: Optional[int] = None
    content_items: list[ContentItem] = Field(default_factory=list)


class Part(BaseModel):
    id: str
    title: str
    description: str = ""
    modules: list[Module] = Field(default_factory=list)


class Deliverable(BaseModel):
    name: str
    format: str = ""
    description: str = ""


class ProductStructure(BaseModel):
    """Part/module tree plus delivery metadata."""

    type: str = "ebook"
    parts: list[Part] = Field(default_factory=list)
    total_modules: Optional[int] = None
    estimated_completion_time: Optional[str] = None
    difficulty_progression: Optional[str] = None
    deliverables: Optional[list[Deliverable]] = None
    tech_requirements: Optional[list[str]] = None

    @classmethod
    def from_generated(cls, payload: dict[str, Any]) -> "ProductStructure":
        """Flatten the generator's ``{product_structure, deliverables, tech_requirements}`` shape.

        A payload that is already flat is accepted as-is.
        """
        nested = payload.get("product_structure")
        if not isinstance(nested, dict):
            return cls.model_validate(payload)
        data = dict(nested)
        if "deliverables" in payload:
            data["deliverables"] = payload["deliverables"]
        if "tech_requirements" in payload:
            data["tech_requirements"] = payload["tech_requirements"]
        return cls.model_validate(data)


# =============================================================================
# Product aggregate
# =============================================================================


class ProductAnalysis(BaseModel):
    """Typed replacement of the record's ``raw_analysis`` bag."""

    outline: Optional[ContentOutline] = None
    structure: Optional[ProductStructure] = None
    assets: list[Asset] = Field(default_factory=list)
    targetAudience: Optional[str] = None
    problemSolved: Optional[str] = None
    generatedFeatures: Optional[list[str]] = None


class ProductBase(BaseModel):
    """Fields shared by every product shape."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    tagline: str = ""
    description: str = ""
    notes: str = ""
    product_type: str = "ebook"
    status: ProductStatus = ProductStatus.idea
    price_point: Optional[str] = None
    analysis: ProductAnalysis = Field(default_factory=ProductAnalysis, alias="raw_analysis")


class ContentProduct(ProductBase):
    """Ebooks, guides, courses, templates and other text-heavy products."""

    kind: Literal["content"] = "content"


class SoftwareProduct(ProductBase):
    """SaaS, tools, apps and extensions."""

    kind: Literal["software"] = "software"


Product = Annotated[Union[ContentProduct, SoftwareProduct], Field(discriminator="kind")]

_product_adapter: TypeAdapter[Product] = TypeAdapter(Product)


def parse_product(data: dict[str, Any]) -> Product:
    """Build the right product variant from a record or request body.

    ``kind`` is derived from ``product_type`` when the data does not carry it.
    """
    data = dict(data)
    if "kind" not in data:
        data["kind"] = product_kind_for(data.get("product_type")).value
    return _product_adapter.validate_python(data)


# Request schemas
class CreateProductRequest(BaseModel):
    """Request body for creating a product."""

    name: Annotated[str, Field(min_length=1)]
    product_type: str = "ebook"
    tagline: str = ""
    description: str = ""
    price_point: Optional[str] = None
    targetAudience: Optional[str] = None
    problemSolved: Optional[str] = None


class UpdateProductRequest(BaseModel):
    """Editable display fields of a product."""

    name: Annotated[str, Field(min_length=1)]
    tagline: str = ""
    description: str = ""
    notes: str = ""
    price_point: Optional[str] = None
