"""Unit tests for the checklist gate."""

import pytest

from product_studio.models import Asset, AssetStatus, ChapterContent, ExportChecklist
from product_studio.services import checklist as checklist_gate
from product_studio.services.content_model import ContentModel


def test_ready_only_when_all_flags_set():
    checklist = ExportChecklist(
        contentComplete=True,
        structureComplete=True,
        assetsReady=True,
        pricingSet=True,
        previewReviewed=False,
    )
    assert checklist_gate.is_export_ready(checklist) is False
    checklist.previewReviewed = True
    assert checklist_gate.is_export_ready(checklist) is True


def test_pricing_disabled_starts_satisfied():
    assert checklist_gate.new_checklist(pricing_enabled=False).pricingSet is True
    assert checklist_gate.new_checklist(pricing_enabled=True).pricingSet is False


@pytest.mark.parametrize(
    "price,expected",
    [("$12", True), ("12.50 USD", True), ("€9,99", True), ("$0", False), ("free", False), ("", False), (None, False)],
)
def test_is_price_set(price, expected):
    assert checklist_gate.is_price_set(price) is expected


def test_record_pricing():
    checklist = checklist_gate.new_checklist(pricing_enabled=True)
    assert checklist_gate.record_pricing(checklist, "free", pricing_enabled=True) is False
    assert checklist_gate.record_pricing(checklist, "$19", pricing_enabled=True) is True


def test_content_flag_needs_every_chapter(make_product, make_outline):
    model = ContentModel(make_product(outline=make_outline(["c1", "c2"])))
    checklist = ExportChecklist()

    model.apply_chapter_content("c1", ChapterContent(content="X"))
    assert checklist_gate.record_content(checklist, model) is False

    model.apply_chapter_content("c2", ChapterContent(content="Y"))
    assert checklist_gate.record_content(checklist, model) is True


def test_flags_are_a_one_way_ratchet(make_product, make_outline):
    model = ContentModel(make_product(outline=make_outline(["c1"], {"c1": "done"})))
    checklist = ExportChecklist()
    checklist_gate.record_content(checklist, model)

    # A regenerated outline has no content yet, but the flag stays set
    model.apply_outline(make_outline(["n1", "n2"]))
    assert checklist_gate.record_content(checklist, model) is True
    assert checklist.contentComplete is True


def test_assets_flag_needs_a_saved_asset():
    checklist = ExportChecklist()
    local = Asset(id="a1", name="x", status=AssetStatus.uploaded)
    saved = Asset(id="a2", dbId="db-2", name="y", status=AssetStatus.saved)

    assert checklist_gate.record_assets(checklist, [local]) is False
    assert checklist_gate.record_assets(checklist, [local, saved]) is True
    assert checklist_gate.record_assets(checklist, []) is True


def test_structure_and_preview(make_product, make_structure):
    model = ContentModel(make_product(structure=make_structure()))
    checklist = ExportChecklist()
    assert checklist_gate.record_structure(checklist, model) is True
    assert checklist_gate.record_preview_reviewed(checklist) is True
