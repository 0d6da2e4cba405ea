"""Uniform success/failure results returned by every orchestrator operation"""

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel

from modcontent.core.errors import ContentError, ErrorKind
from modcontent.core.models import AuditEvent


class Failure(BaseModel):
    ok: Literal[False] = False
    kind: ErrorKind
    error: str

    @classmethod
    def from_error(cls, err: ContentError) -> "Failure":
        return cls(kind=err.kind, error=err.message)


class DraftResult(BaseModel):
    """Result of save_draft, copy_published_to_draft and restore_from_audit."""
    ok: Literal[True] = True
    blocks: list[dict[str, Any]]
    updated_at: datetime
    audit_event: AuditEvent


class PublishResult(BaseModel):
    ok: Literal[True] = True
    blocks: list[dict[str, Any]]
    updated_at: datetime
    published_at: datetime
    audit_event: AuditEvent


class AuditListResult(BaseModel):
    ok: Literal[True] = True
    events: list[AuditEvent]


DraftOutcome = Union[DraftResult, Failure]
PublishOutcome = Union[PublishResult, Failure]
AuditListOutcome = Union[AuditListResult, Failure]


class SeedResult(BaseModel):
    """Outcome of a diagnostics seed; skipped=True when content already existed."""
    ok: Literal[True] = True
    message: str
    skipped: bool = False
    updated_at: Optional[datetime] = None
