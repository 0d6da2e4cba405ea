"""Read path: resolve a module's published (and optionally draft) content for rendering"""

import logging
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel

from modcontent.core.blocks import dump_blocks, is_legacy_block, parse_blocks
from modcontent.core.models import SectionStatus
from modcontent.core.registry import ModuleRegistry
from modcontent.crud.repo import ContentStore, StoreError


logger = logging.getLogger(__name__)


class PublishedView(BaseModel):
    blocks: list[dict[str, Any]]
    source: Literal["db", "config"]
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None


class DraftView(BaseModel):
    blocks: list[dict[str, Any]]
    updated_at: datetime


class SectionView(BaseModel):
    label: str
    published: PublishedView
    draft: Optional[DraftView] = None


class ModuleContent(BaseModel):
    slug: str
    title: str
    description: str
    sections: dict[str, SectionView]


def _render(raw: Any, where: str) -> list[dict[str, Any]]:
    """Tolerant-parse stored blocks and note how many were dropped."""
    blocks = parse_blocks(raw)
    if isinstance(raw, list) and len(blocks) < len(raw):
        legacy = sum(1 for item in raw if is_legacy_block(item))
        logger.info(
            "Dropped %d of %d stored block(s) for %s (%d legacy)",
            len(raw) - len(blocks), len(raw), where, legacy,
        )
    return dump_blocks(blocks)


def get_module_content(
    content: ContentStore,
    registry: ModuleRegistry,
    slug: str,
    include_draft: bool = False,
    ) -> ModuleContent | None:
    """Resolve every section of a module; None if the module is unknown.

    Stored blocks are tolerant-parsed so rows written under an older block
    schema still render. A section with no published row, or a store that
    cannot be read, falls back to the registry's default blocks.
    """
    module = registry.get_module(slug)
    if module is None:
        return None

    sections: dict[str, SectionView] = {}
    for key, config in module.sections.items():
        fallback = PublishedView(blocks=dump_blocks(parse_blocks(config.blocks)), source="config")
        try:
            published = content.get(slug, key, SectionStatus.published)
            draft = content.get(slug, key, SectionStatus.draft) if include_draft else None
        except StoreError as e:
            logger.warning("Falling back to configured content for %s/%s: %s", slug, key, e)
            published, draft = None, None

        view = SectionView(label=config.label, published=fallback)
        if published is not None:
            view.published = PublishedView(
                blocks=_render(published.blocks, f"{slug}/{key} (published)"),
                source="db",
                updated_at=published.updated_at,
                published_at=published.published_at,
            )
        if draft is not None:
            view.draft = DraftView(blocks=_render(draft.blocks, f"{slug}/{key} (draft)"), updated_at=draft.updated_at)
        sections[key] = view

    return ModuleContent(slug=module.slug, title=module.title, description=module.description, sections=sections)
