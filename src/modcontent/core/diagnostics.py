"""Setup diagnostics: non-destructive sample seeding and row counts"""

from typing import Union

from pydantic import BaseModel

from modcontent.core.errors import StoreReadError, ValidationError
from modcontent.core.models import SectionStatus
from modcontent.core.orchestrator import ContentOrchestrator
from modcontent.core.results import Failure, SeedResult
from modcontent.crud.repo import StoreError


def sample_blocks() -> list[dict]:
    return [
        {
            "type": "bullets",
            "title": "What this is",
            "description": "Created by setup diagnostics (non-destructive).",
            "items": [
                "This content is safe to delete or overwrite.",
                "Use it to validate save/history/restore workflows end-to-end.",
            ],
        },
    ]


def seed_sample_content(orchestrator: ContentOrchestrator, module_slug: str, section_key: str) -> Union[SeedResult, Failure]:
    """Save sample blocks as a draft unless a draft or published row already exists."""
    registry = orchestrator.registry
    if not registry.is_known_module(module_slug):
        return Failure.from_error(ValidationError("Unknown module slug."))
    if not registry.is_known_section_key(section_key):
        return Failure.from_error(ValidationError("Invalid section key."))

    try:
        existing = [
            orchestrator.content.get(module_slug, section_key, status)
            for status in SectionStatus
        ]
    except StoreError as e:
        return Failure.from_error(StoreReadError(str(e)))
    if any(row is not None for row in existing):
        return SeedResult(message="Content already exists; skipped (not overwritten).", skipped=True)

    saved = orchestrator.save_draft(module_slug, section_key, sample_blocks())
    if not saved.ok:
        return saved
    return SeedResult(message="Sample content created.", updated_at=saved.updated_at)


class Counts(BaseModel):
    module_sections: int
    audit_events: int


def collect_counts(orchestrator: ContentOrchestrator) -> Union[Counts, Failure]:
    try:
        return Counts(
            module_sections=orchestrator.content.count(),
            audit_events=orchestrator.audit.count(),
        )
    except StoreError as e:
        return Failure.from_error(StoreReadError(str(e)))
