"""Classified failures raised inside the orchestrator and returned to callers as Failure results"""

from enum import Enum


class ErrorKind(str, Enum):
    validation = "validation"
    not_found = "not_found"
    read = "read"
    content_write = "content_write"
    audit_write = "audit_write"


class ContentError(Exception):
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ContentError):
    """Unknown module/section or malformed blocks; nothing was written."""
    kind = ErrorKind.validation


class NotFoundError(ContentError):
    """Payload source row or audit event does not exist."""
    kind = ErrorKind.not_found


class StoreReadError(ContentError):
    """A read needed before any write failed; nothing was written."""
    kind = ErrorKind.read


class ContentWriteError(ContentError):
    """The section upsert failed; nothing to compensate."""
    kind = ErrorKind.content_write


class AuditWriteError(ContentError):
    """The audit insert failed after the section upsert; the section was compensated."""
    kind = ErrorKind.audit_write
