"""Shared fixtures for core unit tests: memory stores with fault injection, registry, orchestrator"""

from dataclasses import dataclass

import pytest

from modcontent.core.collaborators import StaticIdentity
from modcontent.core.models import Actor
from modcontent.core.orchestrator import ContentOrchestrator
from modcontent.core.registry import StaticRegistry, make_module
from modcontent.crud.memory_repo import MemoryAuditStore, MemoryContentStore
from modcontent.crud.repo import StoreError


@dataclass
class FlakyContentStore(MemoryContentStore):
    """MemoryContentStore whose calls can be made to fail on demand."""
    fail_reads: bool = False
    fail_upserts: bool = False
    fail_deletes: bool = False
    upsert_calls: int = 0

    def get(self, module_slug, section_key, status):
        if self.fail_reads:
            raise StoreError("content store unavailable")
        return super().get(module_slug, section_key, status)

    def upsert(self, write):
        self.upsert_calls += 1
        if self.fail_upserts:
            raise StoreError("content write rejected")
        return super().upsert(write)

    def delete(self, module_slug, section_key, status):
        if self.fail_deletes:
            raise StoreError("content delete rejected")
        return super().delete(module_slug, section_key, status)


@dataclass
class FlakyAuditStore(MemoryAuditStore):
    fail_inserts: bool = False
    fail_reads: bool = False

    def insert(self, write):
        if self.fail_inserts:
            raise StoreError("audit table missing")
        return super().insert(write)

    def get(self, audit_id):
        if self.fail_reads:
            raise StoreError("audit store unavailable")
        return super().get(audit_id)

    def list_for_section(self, module_slug, section_key, limit):
        if self.fail_reads:
            raise StoreError("audit store unavailable")
        return super().list_for_section(module_slug, section_key, limit)


class RecordingCache:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[list[str]] = []

    def invalidate(self, paths):
        self.calls.append(list(paths))
        if self.fail:
            raise RuntimeError("cache backend down")


@pytest.fixture(name="registry")
def registry_fixture():
    """Registry with an 'acme' module (fallback bullets) and an 'other' module."""
    return StaticRegistry([
        make_module("acme", "Acme", "Test module", end_vision=["Configured vision"]),
        make_module("other", "Other"),
    ])


@pytest.fixture(name="actor")
def actor_fixture():
    return Actor(id="user-1", email="editor@example.com")


@pytest.fixture(name="content_store")
def content_store_fixture():
    return FlakyContentStore()


@pytest.fixture(name="audit_store")
def audit_store_fixture():
    return FlakyAuditStore()


@pytest.fixture(name="cache")
def cache_fixture():
    return RecordingCache()


@pytest.fixture(name="orchestrator")
def orchestrator_fixture(content_store, audit_store, registry, actor, cache):
    return ContentOrchestrator(
        content=content_store,
        audit=audit_store,
        registry=registry,
        identity=StaticIdentity(actor),
        cache=cache,
    )
