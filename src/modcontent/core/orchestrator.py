"""Draft/publish/restore mutations that keep every section write matched by an audit event.

The content and audit stores share no transaction, so each mutation runs as a
short saga:

1. check module slug and section key against the registry
2. obtain the payload blocks (strict-validated input, or a stored row/event
   re-parsed with the all-survived check)
3. snapshot the row about to be overwritten
4. upsert the target row
5. insert the audit event; if that fails, put the snapshot back (or delete
   the row when there was none) and report the audit failure

A section value is therefore never left in the store without its audit event,
except when the process dies between steps 4 and 5.
"""

import logging
import math
from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional, TypeVar
from uuid import UUID

from modcontent.core.blocks import ContentBlock, dump_blocks, parse_stored_blocks, validate_blocks_for_write
from modcontent.core.collaborators import CacheInvalidator, IdentityProvider, NullInvalidator
from modcontent.core.errors import (
    AuditWriteError, ContentError, ContentWriteError, NotFoundError, StoreReadError, ValidationError,
)
from modcontent.core.models import Actor, AuditAction, AuditEvent, AuditEventWrite, Section, SectionStatus, SectionWrite
from modcontent.core.registry import ModuleRegistry
from modcontent.core.results import (
    AuditListOutcome, AuditListResult, DraftOutcome, DraftResult, Failure, PublishOutcome, PublishResult,
)
from modcontent.crud.repo import AuditStore, ContentStore, StoreError


logger = logging.getLogger(__name__)

DEFAULT_AUDIT_LIMIT = 20
MAX_AUDIT_LIMIT = 50

T = TypeVar("T")


def clamp_limit(limit: Any) -> int:
    """Floor limit and clamp it to [1, MAX_AUDIT_LIMIT]; infinities clamp, NaN and non-numbers get the default."""
    try:
        value = math.floor(limit)
    except OverflowError:
        value = MAX_AUDIT_LIMIT if limit > 0 else 1
    except (TypeError, ValueError):
        value = DEFAULT_AUDIT_LIMIT
    return max(1, min(MAX_AUDIT_LIMIT, value))


def invalidation_paths(module_slug: str) -> list[str]:
    return ["/admin", "/", f"/m/{module_slug}"]


class ContentOrchestrator:
    """Runs the four audited section mutations plus the audit listing.

    Every public method returns a result model and never raises for store or
    validation problems; failures come back as Failure(kind, error).
    """

    def __init__(
        self,
        content: ContentStore,
        audit: AuditStore,
        registry: ModuleRegistry,
        identity: IdentityProvider,
        cache: Optional[CacheInvalidator] = None,
        clock: Callable[[], datetime] = datetime.now,
        ):
        self.content = content
        self.audit = audit
        self.registry = registry
        self.identity = identity
        self.cache = cache or NullInvalidator()
        self.clock = clock

    # --- operations ---

    def save_draft(self, module_slug: str, section_key: str, raw_blocks: Any, actor: Actor = None) -> DraftOutcome:
        """Strict-validate raw_blocks and write them as the section's draft."""
        try:
            self._check_identifiers(module_slug, section_key)
            blocks = validate_blocks_for_write(raw_blocks)
            if blocks is None:
                raise ValidationError("Blocks failed validation. Fix invalid blocks before saving.")
            section, event = self._commit(
                module_slug, section_key, SectionStatus.draft, blocks, None,
                AuditAction.save_draft, actor,
            )
        except ContentError as e:
            return self._failure("save_draft", e)
        return DraftResult(blocks=section.blocks, updated_at=section.updated_at, audit_event=event)

    def publish(self, module_slug: str, section_key: str, actor: Actor = None) -> PublishOutcome:
        """Copy the current draft into the published row with published_at = now."""
        try:
            self._check_identifiers(module_slug, section_key)
            draft = self._read(
                lambda: self.content.get(module_slug, section_key, SectionStatus.draft),
                "Failed to read draft",
            )
            if draft is None:
                raise NotFoundError("No draft to publish.")
            blocks = self._stored_blocks(draft.blocks, "Draft content failed validation.")
            section, event = self._commit(
                module_slug, section_key, SectionStatus.published, blocks, self.clock(),
                AuditAction.publish, actor,
            )
        except ContentError as e:
            return self._failure("publish", e)
        return PublishResult(
            blocks=section.blocks,
            updated_at=section.updated_at,
            published_at=section.published_at,
            audit_event=event,
        )

    def copy_published_to_draft(self, module_slug: str, section_key: str, actor: Actor = None) -> DraftOutcome:
        """Overwrite the draft with the currently published content."""
        try:
            self._check_identifiers(module_slug, section_key)
            published = self._read(
                lambda: self.content.get(module_slug, section_key, SectionStatus.published),
                "Failed to read published content",
            )
            if published is None:
                raise NotFoundError("Nothing has been published for this section yet.")
            blocks = self._stored_blocks(published.blocks, "Published content failed validation.")
            section, event = self._commit(
                module_slug, section_key, SectionStatus.draft, blocks, None,
                AuditAction.restore, actor,
            )
        except ContentError as e:
            return self._failure("copy_published_to_draft", e)
        return DraftResult(blocks=section.blocks, updated_at=section.updated_at, audit_event=event)

    def restore_from_audit(self, audit_id: UUID | str, actor: Actor = None) -> DraftOutcome:
        """Overwrite the draft of the event's section with a past event's blocks snapshot."""
        try:
            source = self._find_event(audit_id)
            if not self.registry.is_known_module(source.module_slug):
                raise NotFoundError("Audit event refers to an unknown module.")
            if not self.registry.is_known_section_key(source.section_key):
                raise NotFoundError("Audit event refers to an unknown section key.")
            blocks = self._stored_blocks(source.blocks, "Audit snapshot failed validation.")
            section, event = self._commit(
                source.module_slug, source.section_key, SectionStatus.draft, blocks, None,
                AuditAction.restore, actor,
            )
        except ContentError as e:
            return self._failure("restore_from_audit", e)
        return DraftResult(blocks=section.blocks, updated_at=section.updated_at, audit_event=event)

    def list_audit_events(self, module_slug: str, section_key: str, limit: Any = DEFAULT_AUDIT_LIMIT) -> AuditListOutcome:
        """Most recent events first, limit clamped to [1, 50]."""
        try:
            self._check_identifiers(module_slug, section_key)
            events = self._read(
                lambda: self.audit.list_for_section(module_slug, section_key, clamp_limit(limit)),
                "Audit log is not available",
            )
        except ContentError as e:
            return self._failure("list_audit_events", e)
        return AuditListResult(events=events)

    # --- saga steps ---

    def _check_identifiers(self, module_slug: str, section_key: str) -> None:
        if not self.registry.is_known_module(module_slug):
            raise ValidationError("Unknown module slug.")
        if not self.registry.is_known_section_key(section_key):
            raise ValidationError("Invalid section key.")

    def _read(self, fn: Callable[[], T], what: str) -> T:
        try:
            return fn()
        except StoreError as e:
            raise StoreReadError(f"{what}: {e}") from e

    def _stored_blocks(self, raw: Any, message: str) -> list[ContentBlock]:
        blocks = parse_stored_blocks(raw)
        if blocks is None:
            raise ValidationError(message)
        return blocks

    def _find_event(self, audit_id: UUID | str) -> AuditEvent:
        try:
            event_id = audit_id if isinstance(audit_id, UUID) else UUID(str(audit_id))
        except ValueError:
            raise NotFoundError("Audit event not found.") from None
        event = self._read(lambda: self.audit.get(event_id), "Failed to read audit event")
        if event is None:
            raise NotFoundError("Audit event not found.")
        return event

    def _commit(
        self,
        module_slug: str,
        section_key: str,
        status: SectionStatus,
        blocks: list[ContentBlock],
        published_at: Optional[datetime],
        action: AuditAction,
        actor: Optional[Actor],
        ) -> tuple[Section, AuditEvent]:
        """Snapshot, upsert, audit; compensate the upsert if the audit insert fails."""
        actor = actor or self.identity.current_actor()
        payload = dump_blocks(blocks)

        snapshot = self._read(
            lambda: self.content.get(module_slug, section_key, status),
            "Failed to read current section",
        )

        write = SectionWrite(
            module_slug=module_slug, section_key=section_key, status=status,
            blocks=payload, published_at=published_at,
        )
        try:
            section = self.content.upsert(write)
        except StoreError as e:
            raise ContentWriteError(str(e) or "Failed to save changes.") from e

        try:
            event = self.audit.insert(AuditEventWrite(
                module_slug=module_slug, section_key=section_key, status=status,
                action=action, blocks=payload, actor_id=actor.id, actor_email=actor.email,
            ))
        except StoreError as e:
            restored = self._compensate(write, snapshot)
            message = str(e) or "Failed to write audit event."
            if not restored:
                message += " Rolling back the section write also failed."
            raise AuditWriteError(message) from e

        logger.info(
            "%s %s/%s (%s) by %s -> audit %s",
            action.value, module_slug, section_key, status.value, actor.id, event.id,
        )
        self._invalidate(module_slug)
        return section, event

    def _compensate(self, write: SectionWrite, snapshot: Section | None) -> bool:
        """Return the target row to its pre-call value; False if that write failed too."""
        logger.warning(
            "Audit insert failed for %s/%s (%s); compensating section write",
            write.module_slug, write.section_key, write.status.value,
        )
        try:
            if snapshot is not None:
                self.content.upsert(snapshot.as_write())
            else:
                self.content.delete(write.module_slug, write.section_key, write.status)
        except StoreError:
            logger.error(
                "Compensation failed for %s/%s (%s); section holds an unaudited value",
                write.module_slug, write.section_key, write.status.value, exc_info=True,
            )
            return False
        return True

    def _invalidate(self, module_slug: str) -> None:
        try:
            self.cache.invalidate(invalidation_paths(module_slug))
        except Exception:
            logger.warning("Cache invalidation failed for module %s", module_slug, exc_info=True)

    def _failure(self, operation: str, err: ContentError) -> Failure:
        level = logging.INFO if isinstance(err, (ValidationError, NotFoundError)) else logging.WARNING
        logger.log(level, "%s failed (%s): %s", operation, err.kind.value, err.message)
        return Failure.from_error(err)
