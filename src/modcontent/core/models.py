"""Domain records exchanged between the orchestrator and the stores"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SectionStatus(str, Enum):
    """Lifecycle state of a section document"""
    draft = "draft"
    published = "published"


class AuditAction(str, Enum):
    save_draft = "save_draft"
    publish = "publish"
    restore = "restore"


class Actor(BaseModel):
    """The editor performing a mutation."""
    id: str
    email: Optional[str] = None


class SectionWrite(BaseModel):
    """Values an upsert sets on a (module_slug, section_key, status) row."""
    module_slug: str
    section_key: str
    status: SectionStatus
    blocks: Any = Field(description="Raw JSON list; a compensating write may carry blocks from an older schema")
    published_at: Optional[datetime] = None


class Section(SectionWrite):
    """A stored section row; blocks are the raw JSON as persisted."""
    model_config = ConfigDict(from_attributes=True)

    updated_at: datetime

    def as_write(self) -> SectionWrite:
        """The upsert that puts this exact row value back (used for compensation)."""
        return SectionWrite(
            module_slug=self.module_slug,
            section_key=self.section_key,
            status=self.status,
            blocks=self.blocks,
            published_at=self.published_at,
        )


class AuditEventWrite(BaseModel):
    module_slug: str
    section_key: str
    status: SectionStatus
    action: AuditAction
    blocks: list[dict[str, Any]]
    actor_id: str
    actor_email: Optional[str] = None


class AuditEvent(AuditEventWrite):
    """Immutable record of one content mutation with a full blocks snapshot."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    blocks: Any
    created_at: datetime
