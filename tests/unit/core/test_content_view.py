"""Unit tests for core/content_view.py (read path with config fallback)"""

import logging

from modcontent.core.content_view import get_module_content
from modcontent.core.models import SectionStatus, SectionWrite


def _store(content_store, status, blocks):
    content_store.upsert(SectionWrite(
        module_slug="acme", section_key="end-vision", status=status, blocks=blocks,
    ))


def test_unknown_module_is_none(content_store, registry):
    assert get_module_content(content_store, registry, "nope") is None


def test_falls_back_to_configured_blocks(content_store, registry):
    """Sections with nothing published render the registry's fallback content."""
    content = get_module_content(content_store, registry, "acme")
    section = content.sections["end-vision"]
    assert section.published.source == "config"
    assert section.published.blocks == [{"type": "bullets", "items": ["Configured vision"]}]
    assert section.draft is None
    assert content.sections["progress"].published.blocks == []


def test_published_row_wins(orchestrator, content_store, registry):
    orchestrator.save_draft("acme", "end-vision", [{"type": "prose", "content": "Live"}])
    orchestrator.publish("acme", "end-vision")
    section = get_module_content(content_store, registry, "acme").sections["end-vision"]
    assert section.published.source == "db"
    assert section.published.blocks == [{"type": "prose", "content": "Live"}]
    assert section.published.published_at is not None


def test_published_empty_list_is_not_replaced(orchestrator, content_store, registry):
    """A deliberately emptied published section stays empty."""
    orchestrator.save_draft("acme", "end-vision", [])
    orchestrator.publish("acme", "end-vision")
    section = get_module_content(content_store, registry, "acme").sections["end-vision"]
    assert section.published.source == "db"
    assert section.published.blocks == []


def test_legacy_elements_are_dropped_on_read(content_store, registry):
    _store(content_store, SectionStatus.published, [
        {"type": "kpis", "items": []},
        {"type": "prose", "content": "Kept"},
    ])
    section = get_module_content(content_store, registry, "acme").sections["end-vision"]
    assert section.published.blocks == [{"type": "prose", "content": "Kept"}]


def test_include_draft(orchestrator, content_store, registry):
    orchestrator.save_draft("acme", "end-vision", [{"type": "prose", "content": "WIP"}])
    without = get_module_content(content_store, registry, "acme")
    with_draft = get_module_content(content_store, registry, "acme", include_draft=True)
    assert without.sections["end-vision"].draft is None
    assert with_draft.sections["end-vision"].draft.blocks == [{"type": "prose", "content": "WIP"}]
    assert with_draft.sections["end-vision"].published.source == "config"


def test_store_failure_falls_back(content_store, registry):
    content_store.fail_reads = True
    section = get_module_content(content_store, registry, "acme", include_draft=True).sections["end-vision"]
    assert section.published.source == "config"
    assert section.draft is None


def test_dropped_legacy_blocks_are_logged(content_store, registry, caplog):
    _store(content_store, SectionStatus.published, [
        {"type": "timeline", "items": []},
        {"type": "carousel"},
        {"type": "prose", "content": "Kept"},
    ])
    with caplog.at_level(logging.INFO, logger="modcontent.core.content_view"):
        get_module_content(content_store, registry, "acme")
    assert "Dropped 2 of 3 stored block(s) for acme/end-vision (published) (1 legacy)" in caplog.text
