"""Checklist gate for export readiness.

``is_export_ready`` is a pure function over the five flags. The ``record_*``
helpers are the upstream events that raise individual flags. They are a
one-way ratchet: a flag that is True stays True for the rest of the session,
so regenerating one piece never revokes an earlier confirmation of another.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Optional

from product_studio import config
from product_studio.models import Asset, AssetStatus, ExportChecklist
from product_studio.services.content_model import ContentModel

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"\d+(?:[.,]\d+)?")


def is_export_ready(checklist: ExportChecklist) -> bool:
    """All five flags must be set."""
    return (
        checklist.contentComplete
        and checklist.structureComplete
        and checklist.assetsReady
        and checklist.pricingSet
        and checklist.previewReviewed
    )


def new_checklist(pricing_enabled: Optional[bool] = None) -> ExportChecklist:
    """Fresh checklist for a session.

    With pricing disabled system-wide the pricing flag is permanently set.
    """
    if pricing_enabled is None:
        pricing_enabled = config.pricing_enabled()
    return ExportChecklist(pricingSet=not pricing_enabled)


def _ratchet(checklist: ExportChecklist, flag: str, condition: bool) -> bool:
    """Set ``flag`` if ``condition`` holds. Never clears it."""
    if condition and not getattr(checklist, flag):
        setattr(checklist, flag, True)
        logger.debug(f"Checklist flag {flag} set")
    return getattr(checklist, flag)


def record_content(checklist: ExportChecklist, model: ContentModel) -> bool:
    """Content generation finished: complete once every chapter has content."""
    return _ratchet(checklist, "contentComplete", model.all_chapters_complete())


def record_structure(checklist: ExportChecklist, model: ContentModel) -> bool:
    """Structure generation finished."""
    return _ratchet(checklist, "structureComplete", model.has_structure())


def record_assets(checklist: ExportChecklist, assets: Iterable[Asset]) -> bool:
    """At least one asset is durably saved."""
    ready = any(asset.status == AssetStatus.saved for asset in assets)
    return _ratchet(checklist, "assetsReady", ready)


def is_price_set(price_point: Optional[str]) -> bool:
    """A price point counts when it contains a positive number, e.g. '$12'."""
    if not price_point or not price_point.strip():
        return False
    match = _NUMBER_PATTERN.search(price_point)
    if match is None:
        return False
    return float(match.group(0).replace(",", ".")) > 0


def record_pricing(
    checklist: ExportChecklist,
    price_point: Optional[str],
    pricing_enabled: Optional[bool] = None,
) -> bool:
    """Price set, or pricing disabled system-wide."""
    if pricing_enabled is None:
        pricing_enabled = config.pricing_enabled()
    return _ratchet(checklist, "pricingSet", (not pricing_enabled) or is_price_set(price_point))


def record_preview_reviewed(checklist: ExportChecklist) -> bool:
    """Explicit "I reviewed the preview" acknowledgement."""
    return _ratchet(checklist, "previewReviewed", True)
