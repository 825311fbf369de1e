"""Core candidate processing pipeline.

This module is integration-agnostic. It only relies on ports for storage and
notifications, enabling other feeds or adapters without changes here.

Each record goes through a strict order:
1) Normalize the raw record (drop it silently when unusable)
2) Blacklist check
3) Security hook
4) Heuristic filters
5) Per-creator cap
6) Insert-or-ignore into the store
7) Analysis hook
8) Alert, only for coins stored for the first time
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from core.alerts import format_candidate_alert
from core.blacklist import is_blacklisted
from core.config import BlacklistConfig, FilterConfig
from core.errors import PersistenceError
from core.filters import rejection_reasons
from core.hooks import CandidateHook, log_analysis, log_security_check
from core.models import (
    ZERO_ADDRESS,
    Candidate,
    PersistResult,
    ProcessOutcome,
    RawCandidate,
    RecordResult,
)
from core.normalizer import normalize_candidate
from core.ports import NotifierPort, StoragePort

LOGGER = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CandidateProcessor:
    """Orchestrates filtering, persistence, hooks, and alerts for one record."""

    def __init__(
        self,
        storage: StoragePort,
        notifier: NotifierPort,
        filters: FilterConfig,
        blacklists: BlacklistConfig,
        security_hook: CandidateHook = log_security_check,
        analysis_hook: CandidateHook = log_analysis,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._storage = storage
        self._notifier = notifier
        self._filters = filters
        self._blacklists = blacklists
        self._security_hook = security_hook
        self._analysis_hook = analysis_hook
        self._clock = clock

    async def handle(self, raw: RawCandidate) -> RecordResult:
        """Run one raw record through the pipeline and report where it stopped."""

        now = self._clock()
        candidate = normalize_candidate(raw, now=now)
        if candidate is None:
            LOGGER.debug("Dropped feed record without address or token: %r", raw.address)
            return RecordResult(ProcessOutcome.DROPPED)

        # Blacklist wins over everything, including otherwise perfect metrics.
        if is_blacklisted(candidate, self._blacklists):
            return RecordResult(ProcessOutcome.BLACKLISTED, candidate.address)

        await self._security_hook(candidate)

        reasons = rejection_reasons(candidate, self._filters, now)
        if reasons:
            LOGGER.debug("Rejected %s: %s", candidate.address, "; ".join(reasons))
            return RecordResult(ProcessOutcome.REJECTED, candidate.address)

        if self._creator_cap_reached(candidate):
            LOGGER.info(
                "Creator %s reached the cap of %s coins, skipping %s",
                candidate.creator,
                self._filters.max_coins_per_creator,
                candidate.address,
            )
            return RecordResult(ProcessOutcome.CREATOR_CAPPED, candidate.address)

        # Nothing was stored on failure, so the next cycle retries on its own.
        try:
            result = self._storage.put(candidate)
        except PersistenceError:
            LOGGER.exception("Failed to persist %s", candidate.address)
            return RecordResult(ProcessOutcome.FAILED, candidate.address)

        await self._analysis_hook(candidate)

        if result is PersistResult.IGNORED:
            LOGGER.debug("Already stored %s", candidate.address)
            return RecordResult(ProcessOutcome.DUPLICATE, candidate.address)

        LOGGER.info("Stored %s (%s)", candidate.symbol, candidate.address)
        alerted = await self._notifier.notify(format_candidate_alert(candidate))
        return RecordResult(ProcessOutcome.PERSISTED, candidate.address, alerted=alerted)

    def _creator_cap_reached(self, candidate: Candidate) -> bool:
        cap = self._filters.max_coins_per_creator
        if cap <= 0 or candidate.creator == ZERO_ADDRESS:
            return False
        if self._storage.count_by_creator(candidate.creator) < cap:
            return False
        # A coin that is already stored is a re-observation, not a new coin.
        return self._storage.get(candidate.address) is None
