from __future__ import annotations
from copy import deepcopy
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from modcontent.core.models import AuditEvent, AuditEventWrite, Section, SectionStatus, SectionWrite
from modcontent.crud.clock import next_timestamp
from modcontent.crud.repo import AuditStore, ContentStore, StoreError
from modcontent.crud.tables import AuditEventRow, SectionRow


def _row_to_section(r: SectionRow) -> Section:
    return Section(
        module_slug=r.module_slug,
        section_key=r.section_key,
        status=SectionStatus(r.status),
        blocks=deepcopy(r.blocks),
        published_at=r.published_at,
        updated_at=r.updated_at,
    )


def _row_to_event(r: AuditEventRow) -> AuditEvent:
    event = AuditEvent.model_validate(r)
    return event.model_copy(update={"blocks": deepcopy(r.blocks)})


class SQLContentStore(ContentStore):
    def __init__(self, session: Session):
        self.session = session

    def _find(self, module_slug: str, section_key: str, status: SectionStatus) -> SectionRow | None:
        return self.session.exec(
            select(SectionRow)
            .where(SectionRow.module_slug == module_slug)
            .where(SectionRow.section_key == section_key)
            .where(SectionRow.status == SectionStatus(status).value)
        ).one_or_none()

    def get(self, module_slug: str, section_key: str, status: SectionStatus) -> Section | None:
        try:
            row = self._find(module_slug, section_key, status)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to read section {module_slug}/{section_key}: {e}") from e
        return _row_to_section(row) if row else None

    def upsert(self, write: SectionWrite) -> Section:
        try:
            row = self._find(write.module_slug, write.section_key, write.status)
            if row is None:
                row = SectionRow(
                    module_slug=write.module_slug,
                    section_key=write.section_key,
                    status=write.status.value,
                )
            row.blocks = write.blocks
            row.published_at = write.published_at
            row.updated_at = next_timestamp(row.updated_at if row.id is not None else None)
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to save section {write.module_slug}/{write.section_key}: {e}") from e
        return _row_to_section(row)

    def delete(self, module_slug: str, section_key: str, status: SectionStatus) -> None:
        try:
            row = self._find(module_slug, section_key, status)
            if row is not None:
                self.session.delete(row)
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to delete section {module_slug}/{section_key}: {e}") from e

    def count(self) -> int:
        try:
            return self.session.exec(select(func.count()).select_from(SectionRow)).one()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to count sections: {e}") from e


class SQLAuditStore(AuditStore):
    def __init__(self, session: Session):
        self.session = session

    def insert(self, write: AuditEventWrite) -> AuditEvent:
        try:
            last = self.session.exec(select(func.max(AuditEventRow.created_at))).one()
            row = AuditEventRow(
                module_slug=write.module_slug,
                section_key=write.section_key,
                status=write.status.value,
                action=write.action.value,
                blocks=write.blocks,
                actor_id=write.actor_id,
                actor_email=write.actor_email,
                created_at=next_timestamp(last),
            )
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to write audit event: {e}") from e
        return _row_to_event(row)

    def get(self, audit_id: UUID) -> AuditEvent | None:
        try:
            row = self.session.exec(select(AuditEventRow).where(AuditEventRow.id == audit_id)).one_or_none()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to read audit event {audit_id}: {e}") from e
        return _row_to_event(row) if row else None

    def list_for_section(self, module_slug: str, section_key: str, limit: int) -> list[AuditEvent]:
        try:
            rows = self.session.exec(
                select(AuditEventRow)
                .where(AuditEventRow.module_slug == module_slug)
                .where(AuditEventRow.section_key == section_key)
                .order_by(AuditEventRow.created_at.desc(), AuditEventRow.seq.desc())
                .limit(limit)
            ).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to list audit events: {e}") from e
        return [_row_to_event(r) for r in rows]

    def count(self) -> int:
        try:
            return self.session.exec(select(func.count()).select_from(AuditEventRow)).one()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to count audit events: {e}") from e
