"""Identity and cache-invalidation collaborators consumed by the orchestrator"""

import logging
from typing import Protocol

from modcontent.core.models import Actor


logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def current_actor(self) -> Actor: ...


class StaticIdentity:
    """Always reports the same actor (CLI sessions, tests)."""

    def __init__(self, actor: Actor):
        self.actor = actor

    def current_actor(self) -> Actor:
        return self.actor


class CacheInvalidator(Protocol):
    def invalidate(self, paths: list[str]) -> None: ...


class NullInvalidator:
    def invalidate(self, paths: list[str]) -> None:
        return None


class LoggingInvalidator:
    """Records invalidated paths in the log; stands in where no page cache exists."""

    def invalidate(self, paths: list[str]) -> None:
        logger.info("Invalidating cached paths: %s", ", ".join(paths))
