from __future__ import annotations
from abc import ABC, abstractmethod
from uuid import UUID

from modcontent.core.models import AuditEvent, AuditEventWrite, Section, SectionStatus, SectionWrite


class StoreError(Exception):
    """A store call failed; the write (if any) did not happen."""


class ContentStore(ABC):
    """Keyed access to section rows; each call is atomic on its own."""

    @abstractmethod
    def get(self, module_slug: str, section_key: str, status: SectionStatus) -> Section | None:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, write: SectionWrite) -> Section:
        """Insert or overwrite the row for write's key; the store assigns updated_at."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, module_slug: str, section_key: str, status: SectionStatus) -> None:
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError


class AuditStore(ABC):
    """Append-only audit trail; rows are never updated or deleted."""

    @abstractmethod
    def insert(self, write: AuditEventWrite) -> AuditEvent:
        raise NotImplementedError

    @abstractmethod
    def get(self, audit_id: UUID) -> AuditEvent | None:
        raise NotImplementedError

    @abstractmethod
    def list_for_section(self, module_slug: str, section_key: str, limit: int) -> list[AuditEvent]:
        """Most recent first."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError
