from copy import deepcopy
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from modcontent.core.models import AuditEvent, AuditEventWrite, Section, SectionStatus, SectionWrite
from modcontent.crud.clock import next_timestamp
from modcontent.crud.repo import AuditStore, ContentStore

SectionKey = tuple[str, str, SectionStatus]


@dataclass
class MemoryContentStore(ContentStore):
    _rows: dict[SectionKey, Section] = field(default_factory=dict)

    def get(self, module_slug: str, section_key: str, status: SectionStatus) -> Section | None:
        row = self._rows.get((module_slug, section_key, SectionStatus(status)))
        return row.model_copy(deep=True) if row else None

    def upsert(self, write: SectionWrite) -> Section:
        key = (write.module_slug, write.section_key, write.status)
        previous = self._rows.get(key)
        row = Section(
            **write.model_dump(exclude={"blocks"}),
            blocks=deepcopy(write.blocks),
            updated_at=next_timestamp(previous.updated_at if previous else None),
        )
        self._rows[key] = row
        return row.model_copy(deep=True)

    def delete(self, module_slug: str, section_key: str, status: SectionStatus) -> None:
        self._rows.pop((module_slug, section_key, SectionStatus(status)), None)

    def count(self) -> int:
        return len(self._rows)


@dataclass
class MemoryAuditStore(AuditStore):
    _events: list[AuditEvent] = field(default_factory=list)

    def insert(self, write: AuditEventWrite) -> AuditEvent:
        last = self._events[-1].created_at if self._events else None
        event = AuditEvent(
            **write.model_dump(exclude={"blocks"}),
            blocks=deepcopy(write.blocks),
            id=uuid4(),
            created_at=next_timestamp(last),
        )
        self._events.append(event)
        return event.model_copy(deep=True)

    def get(self, audit_id: UUID) -> AuditEvent | None:
        for event in self._events:
            if event.id == audit_id:
                return event.model_copy(deep=True)
        return None

    def list_for_section(self, module_slug: str, section_key: str, limit: int) -> list[AuditEvent]:
        matching = [
            e for e in reversed(self._events)
            if e.module_slug == module_slug and e.section_key == section_key
        ]
        return [e.model_copy(deep=True) for e in matching[:limit]]

    def count(self) -> int:
        return len(self._events)
