"""Database table definitions for module sections and their audit trail"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, JSON, String, UniqueConstraint
from sqlmodel import Field, SQLModel


class SectionRow(SQLModel, table=True):
    """One draft-or-published content document for a module section"""
    __tablename__ = "module_sections"
    __table_args__ = (
        UniqueConstraint("module_slug", "section_key", "status", name="uq_module_section_status"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    module_slug: str = Field(..., sa_column=Column(String(128), nullable=False, index=True))
    section_key: str = Field(..., sa_column=Column(String(64), nullable=False))
    status: str = Field(..., sa_column=Column(String(16), nullable=False))
    blocks: Any = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    published_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class AuditEventRow(SQLModel, table=True):
    """Immutable snapshot of a section after one mutation"""
    __tablename__ = "module_section_audit"
    seq: Optional[int] = Field(default=None, primary_key=True, description="Insertion order tie-breaker")
    id: UUID = Field(default_factory=uuid4, unique=True, index=True, nullable=False)
    module_slug: str = Field(..., sa_column=Column(String(128), nullable=False, index=True))
    section_key: str = Field(..., sa_column=Column(String(64), nullable=False))
    status: str = Field(..., sa_column=Column(String(16), nullable=False))
    action: str = Field(..., sa_column=Column(String(32), nullable=False))
    blocks: Any = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    actor_id: str = Field(..., sa_column=Column(String(64), nullable=False))
    actor_email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False, index=True))
