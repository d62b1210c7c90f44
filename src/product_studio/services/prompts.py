"""Prompt templates for product content generation.

One builder per generation intent:
1. Outline - chapter-based outline
2. Structure - part/module tree with deliverables
3. Chapter content - full text of one chapter
4. All chapters - shorter per-chapter text for a whole-book run
"""

from __future__ import annotations

import json
from typing import Optional

from product_studio.models import Chapter, ChapterContentContext, Product

SYSTEM_PROMPT = (
    "You are an expert digital product creator. "
    "Always respond with a single valid JSON object and nothing else."
)

JSON_LINE_BREAK_RULE = (
    "IMPORTANT: Your response must be valid JSON. Use \\n for line breaks. "
    "Do not use actual newlines inside strings."
)


def _product_details(product: Product, include_problem: bool = True) -> str:
    analysis = product.analysis
    lines = [
        f"Name: {product.name}",
        f"Tagline: {product.tagline or 'Not specified'}",
        f"Description: {product.description or 'Not specified'}",
        f"Product Type: {product.product_type or 'ebook'}",
        f"Target Audience: {analysis.targetAudience or 'General audience'}",
    ]
    if include_problem:
        lines.append(f"Problem Solved: {analysis.problemSolved or 'Not specified'}")
    features = analysis.generatedFeatures
    lines.append(f"Core Features: {', '.join(features) if features else 'Not specified'}")
    return "\n".join(lines)


# ==============================================================================
# Outline
# ==============================================================================

OUTLINE_SCHEMA_EXAMPLE = {
    "title": "Main title",
    "subtitle": "Optional subtitle",
    "chapters": [
        {
            "id": "ch1",
            "number": 1,
            "title": "Chapter Title",
            "description": "Brief description of what this chapter covers",
            "keyPoints": ["Key point 1", "Key point 2", "Key point 3"],
            "estimatedPages": 10,
            "sections": [
                {
                    "id": "s1",
                    "title": "Section title",
                    "content_type": "text|exercise|checklist|case_study|template",
                }
            ],
        }
    ],
    "bonus_content": [{"title": "Bonus item title", "type": "checklist|template|worksheet|guide"}],
    "estimated_total_pages": 100,
    "estimated_word_count": 25000,
}


def build_outline_prompt(product: Product) -> str:
    """Prompt for a full content outline."""
    product_type = product.product_type or "digital product"
    return f"""You are an expert content creator and product strategist. Generate a comprehensive content outline for a {product_type}.

PRODUCT DETAILS:
{_product_details(product)}

Generate a detailed content outline with chapters/modules. For an ebook, include chapters. For a course, include modules. For templates, include template variations.

Respond ONLY with valid JSON (no markdown, no explanation):
{json.dumps(OUTLINE_SCHEMA_EXAMPLE, indent=2)}"""


# ==============================================================================
# Structure
# ==============================================================================

STRUCTURE_SCHEMA_EXAMPLE = {
    "product_structure": {
        "type": "ebook|course|template|saas",
        "parts": [
            {
                "id": "part1",
                "title": "Part Title",
                "description": "What this part covers",
                "modules": [
                    {
                        "id": "mod1",
                        "title": "Module/Chapter Title",
                        "learning_objectives": ["Objective 1", "Objective 2"],
                        "duration_minutes": 30,
                        "content_items": [
                            {
                                "id": "item1",
                                "type": "video|text|exercise|quiz|download",
                                "title": "Item title",
                                "description": "Brief description",
                            }
                        ],
                    }
                ],
            }
        ],
        "total_modules": 10,
        "estimated_completion_time": "4-6 hours",
        "difficulty_progression": "beginner to intermediate",
    },
    "deliverables": [
        {"name": "Main Product", "format": "PDF|Video|Template|App", "description": "Description"}
    ],
    "tech_requirements": ["Requirement 1", "Requirement 2"],
}


def build_structure_prompt(product: Product) -> str:
    """Prompt for the part/module structure, given any existing outline."""
    product_type = product.product_type or "digital product"
    outline = product.analysis.outline
    existing = outline.model_dump_json(exclude_none=True) if outline else "None"
    return f"""You are an expert product architect. Generate a detailed structure for a {product_type}.

PRODUCT DETAILS:
{_product_details(product, include_problem=False)}
Existing Outline: {existing}

Create a comprehensive product structure with:
- For ebooks: Parts, chapters, sections
- For courses: Modules, lessons, exercises
- For templates: Categories, template types, variations
- For SaaS: Features, user flows, screens

Respond ONLY with valid JSON (no markdown, no explanation):
{json.dumps(STRUCTURE_SCHEMA_EXAMPLE, indent=2)}"""


# ==============================================================================
# Chapter content
# ==============================================================================


def _outline_context(product: Product) -> str:
    outline = product.analysis.outline
    if outline is None or not outline.chapters:
        return ""
    listing = "\n".join(f"Chapter {c.number}: {c.title}" for c in outline.chapters)
    return f"BOOK OUTLINE CONTEXT:\n{listing}"


def build_chapter_content_prompt(product: Product, context: ChapterContentContext) -> str:
    """Prompt for the full text of one chapter (600-1000 words)."""
    key_points = ", ".join(context.keyPoints) if context.keyPoints else "Not specified"
    return f"""You are an expert {product.product_type or 'ebook'} writer. Write the FULL content for the following chapter.

PRODUCT: {product.name}
TARGET AUDIENCE: {product.analysis.targetAudience or 'General audience'}

CHAPTER TO WRITE:
Title: {context.chapterTitle}
Description: {context.chapterDescription or 'Not provided'}
Key Points to Cover: {key_points}

{_outline_context(product)}

Write engaging, practical content (600-1000 words) that:
1. Has a strong opening hook
2. Covers each key point with actionable advice
3. Includes examples and practical tips
4. Uses simple formatting for readability (## headings, **bold**, - bullet lists)
5. Ends with key takeaways

{JSON_LINE_BREAK_RULE}

Respond with this exact JSON structure:
{{"content": "Your chapter content here with \\n for line breaks", "wordCount": 800, "readingTimeMinutes": 4, "keyTakeaways": ["Takeaway 1", "Takeaway 2", "Takeaway 3"]}}"""


def build_batch_chapter_prompt(product: Product, chapter: Chapter, total_chapters: Optional[int] = None) -> str:
    """Shorter per-chapter prompt used by an all-chapters run (400-600 words)."""
    key_points = ", ".join(chapter.keyPoints) if chapter.keyPoints else "Cover the main topic"
    position = f" of {total_chapters}" if total_chapters else ""
    return f"""You are an expert {product.product_type or 'ebook'} writer. Write VALUE-PACKED content for this chapter.

PRODUCT: {product.name}
TARGET AUDIENCE: {product.analysis.targetAudience or 'General audience'}

CHAPTER {chapter.number}{position}: {chapter.title}
Description: {chapter.description or 'Not provided'}
Key Points: {key_points}

Write practical, actionable content (400-600 words) with:
- Strong opening (1-2 sentences)
- 3-5 main points with explanations
- Real examples or tips
- Quick summary/takeaways

{JSON_LINE_BREAK_RULE}

Respond with exactly this JSON format on a single line:
{{"content": "Chapter title and content here with \\n for line breaks", "wordCount": 500, "readingTimeMinutes": 3, "keyTakeaways": ["Takeaway 1", "Takeaway 2"]}}"""
