"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for feed, storage and notification
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from core.models import Candidate, PersistedRecord, PersistResult, RawCandidate


class FeedPort(Protocol):
    """Discovery feed operations required by the scheduler."""

    async def fetch(self, limit: int) -> List[RawCandidate]:
        ...


class StoragePort(Protocol):
    """Storage operations required by the core pipeline."""

    def put(self, candidate: Candidate) -> PersistResult:
        ...

    def get(self, address: str) -> Optional[PersistedRecord]:
        ...

    def count_by_creator(self, creator: str) -> int:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the core pipeline."""

    async def notify(self, message: str) -> bool:
        ...
