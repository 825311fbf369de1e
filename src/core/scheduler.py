"""Fixed-interval polling loop.

One cycle runs at a time: fetch, process every record in feed order, then
sleep for the configured interval. The cycle period is therefore processing
time plus the interval, with no overlap, catch-up, or backoff.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from core.errors import FetchError
from core.models import CycleReport, ProcessOutcome, RecordResult
from core.ports import FeedPort
from core.processor import CandidateProcessor

LOGGER = logging.getLogger(__name__)


class PollScheduler:
    """Drives the feed -> processor loop and isolates per-cycle failures."""

    def __init__(
        self,
        feed: FeedPort,
        processor: CandidateProcessor,
        poll_interval: float,
        fetch_limit: int,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._feed = feed
        self._processor = processor
        self._poll_interval = poll_interval
        self._fetch_limit = fetch_limit
        self._sleep = sleep

    async def run_cycle(self) -> CycleReport:
        """Fetch once and process the batch sequentially."""

        report = CycleReport()
        try:
            records = await self._feed.fetch(self._fetch_limit)
        except FetchError as exc:
            LOGGER.error("Fetch failed, skipping cycle: %s", exc)
            report.fetch_error = str(exc)
            return report

        report.fetched = len(records)
        for raw in records:
            try:
                result = await self._processor.handle(raw)
            except Exception:
                # One bad record must not cost the rest of the batch.
                LOGGER.exception("Error while processing %r", raw.address)
                result = RecordResult(ProcessOutcome.FAILED, raw.address)
            report.record(result)

        LOGGER.info(
            "Cycle complete: fetched=%s, stored=%s, duplicates=%s, rejected=%s, "
            "blacklisted=%s, capped=%s, dropped=%s, failed=%s, alerts=%s",
            report.fetched,
            report.count(ProcessOutcome.PERSISTED),
            report.count(ProcessOutcome.DUPLICATE),
            report.count(ProcessOutcome.REJECTED),
            report.count(ProcessOutcome.BLACKLISTED),
            report.count(ProcessOutcome.CREATOR_CAPPED),
            report.count(ProcessOutcome.DROPPED),
            report.count(ProcessOutcome.FAILED),
            report.alerts_sent,
        )
        return report

    async def run_forever(self, max_cycles: Optional[int] = None) -> Optional[CycleReport]:
        """Run cycles until cancelled, or until ``max_cycles`` have completed.

        The first cycle starts immediately. Returns the last cycle's report
        when the loop ends on its own.
        """

        cycles = 0
        report: Optional[CycleReport] = None
        while True:
            report = await self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                return report
            await self._sleep(self._poll_interval)
