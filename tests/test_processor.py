from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from adapters.sqlite_storage import SQLiteStorage
from core.config import BlacklistConfig, FilterConfig
from core.errors import PersistenceError
from core.models import Candidate, PersistedRecord, PersistResult, ProcessOutcome, RawCandidate
from core.processor import CandidateProcessor
from core.scheduler import PollScheduler

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
FILTERS = FilterConfig(
    min_liquidity=5.0,
    max_creator_fee=10.0,
    min_holders=25,
    min_age_minutes=10,
    max_coins_per_creator=3,
)


def _raw(address: Optional[str] = "0xA", **overrides) -> RawCandidate:
    payload = {
        "contractAddress": address,
        "token": {"name": "Alpha", "symbol": "ALP"},
        "creator": "0xC",
        "migrationTime": (NOW - timedelta(hours=1)).isoformat(),
        "initialLiquidity": 10.0,
        "feePercentage": 2.0,
        "holderCount": 30,
    }
    payload.update(overrides)
    return RawCandidate.from_payload(payload)


class FakeStorage:
    def __init__(self, fail_for: "set[str] | None" = None) -> None:
        self.rows: dict[str, Candidate] = {}
        self._fail_for = fail_for or set()

    def put(self, candidate: Candidate) -> PersistResult:
        if candidate.address in self._fail_for:
            raise PersistenceError("disk full")
        if candidate.address in self.rows:
            return PersistResult.IGNORED
        self.rows[candidate.address] = candidate
        return PersistResult.INSERTED

    def get(self, address: str) -> Optional[PersistedRecord]:
        candidate = self.rows.get(address)
        if candidate is None:
            return None
        return PersistedRecord(
            id=1,
            address=candidate.address,
            name=candidate.name,
            symbol=candidate.symbol,
            creator=candidate.creator,
            migrated_at=candidate.migrated_at,
            initial_liquidity=candidate.initial_liquidity,
            creator_fee=candidate.creator_fee,
            holders=candidate.holders,
            created_at=NOW,
        )

    def count_by_creator(self, creator: str) -> int:
        return sum(1 for candidate in self.rows.values() if candidate.creator == creator)


class FakeNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def notify(self, message: str) -> bool:
        self.messages.append(message)
        return True


class FakeFeed:
    def __init__(self, batch: list[RawCandidate]) -> None:
        self._batch = batch

    async def fetch(self, limit: int) -> list[RawCandidate]:
        return list(self._batch)


def _processor(storage, notifier, blacklists: Optional[BlacklistConfig] = None, **hooks) -> CandidateProcessor:
    return CandidateProcessor(
        storage=storage,
        notifier=notifier,
        filters=FILTERS,
        blacklists=blacklists or BlacklistConfig(),
        clock=lambda: NOW,
        **hooks,
    )


def test_end_to_end_persists_once_and_alerts_once(tmp_path) -> None:
    storage = SQLiteStorage(str(tmp_path / "coins.db"))
    storage.init_db()
    notifier = FakeNotifier()
    scheduler = PollScheduler(
        feed=FakeFeed([_raw("0xA")]),
        processor=_processor(storage, notifier),
        poll_interval=60,
        fetch_limit=10,
    )

    first = asyncio.run(scheduler.run_cycle())
    second = asyncio.run(scheduler.run_cycle())

    assert first.count(ProcessOutcome.PERSISTED) == 1
    assert first.last_persisted == "0xA"
    assert first.alerts_sent == 1
    assert second.count(ProcessOutcome.DUPLICATE) == 1
    assert second.last_persisted is None
    assert len(storage.list_recent()) == 1
    assert len(notifier.messages) == 1
    assert "ALP" in notifier.messages[0]
    assert "0xA" in notifier.messages[0]


def test_blacklist_beats_perfect_metrics() -> None:
    storage = FakeStorage()
    notifier = FakeNotifier()
    blacklists = BlacklistConfig(creator_addresses=frozenset({"0xC"}))
    processor = _processor(storage, notifier, blacklists)

    result = asyncio.run(processor.handle(_raw("0xA", initialLiquidity=1_000_000.0, holderCount=10_000)))

    assert result.outcome is ProcessOutcome.BLACKLISTED
    assert storage.rows == {}
    assert notifier.messages == []


def test_dropped_records_never_reach_blacklist(monkeypatch) -> None:
    seen: list[str] = []

    def fake_is_blacklisted(candidate, blacklists):
        seen.append(candidate.address)
        return False

    monkeypatch.setattr("core.processor.is_blacklisted", fake_is_blacklisted)
    processor = _processor(FakeStorage(), FakeNotifier())

    no_address = asyncio.run(processor.handle(_raw(None)))
    no_token = asyncio.run(processor.handle(_raw("0xB", token=None)))

    assert no_address.outcome is ProcessOutcome.DROPPED
    assert no_token.outcome is ProcessOutcome.DROPPED
    assert seen == []


def test_hooks_run_once_in_order() -> None:
    calls: list[tuple[str, str]] = []

    async def security(candidate: Candidate) -> None:
        calls.append(("security", candidate.address))

    async def analysis(candidate: Candidate) -> None:
        calls.append(("analysis", candidate.address))

    processor = _processor(FakeStorage(), FakeNotifier(), security_hook=security, analysis_hook=analysis)

    asyncio.run(processor.handle(_raw("0xA")))
    asyncio.run(processor.handle(_raw("0xB", initialLiquidity=0.5)))

    # 0xB is rejected by the filter, so only the security hook saw it.
    assert calls == [("security", "0xA"), ("analysis", "0xA"), ("security", "0xB")]


def test_persistence_failure_skips_alert_but_not_siblings() -> None:
    storage = FakeStorage(fail_for={"0xBAD"})
    notifier = FakeNotifier()
    scheduler = PollScheduler(
        feed=FakeFeed([_raw("0xBAD"), _raw("0xGOOD")]),
        processor=_processor(storage, notifier),
        poll_interval=60,
        fetch_limit=10,
    )

    report = asyncio.run(scheduler.run_cycle())

    assert report.count(ProcessOutcome.FAILED) == 1
    assert report.count(ProcessOutcome.PERSISTED) == 1
    assert list(storage.rows) == ["0xGOOD"]
    assert len(notifier.messages) == 1


def test_unknown_migration_time_is_not_accepted() -> None:
    processor = _processor(FakeStorage(), FakeNotifier())
    result = asyncio.run(processor.handle(_raw("0xA", migrationTime="not a date")))
    assert result.outcome is ProcessOutcome.REJECTED


@pytest.mark.parametrize("cap, expected", [(2, ProcessOutcome.CREATOR_CAPPED), (0, ProcessOutcome.PERSISTED)])
def test_creator_cap(cap: int, expected: ProcessOutcome) -> None:
    storage = FakeStorage()
    processor = CandidateProcessor(
        storage=storage,
        notifier=FakeNotifier(),
        filters=FilterConfig(min_liquidity=5.0, max_creator_fee=10.0, min_holders=25,
                             min_age_minutes=10, max_coins_per_creator=cap),
        blacklists=BlacklistConfig(),
        clock=lambda: NOW,
    )
    asyncio.run(processor.handle(_raw("0x1")))
    asyncio.run(processor.handle(_raw("0x2")))

    third = asyncio.run(processor.handle(_raw("0x3")))
    again = asyncio.run(processor.handle(_raw("0x1")))

    assert third.outcome is expected
    # Re-observing a stored coin is never capped.
    assert again.outcome is ProcessOutcome.DUPLICATE


def test_unknown_creator_is_exempt_from_cap() -> None:
    storage = FakeStorage()
    processor = CandidateProcessor(
        storage=storage,
        notifier=FakeNotifier(),
        filters=FilterConfig(max_coins_per_creator=1, min_age_minutes=10),
        blacklists=BlacklistConfig(),
        clock=lambda: NOW,
    )
    outcomes = [asyncio.run(processor.handle(_raw(f"0x{i}", creator=None))).outcome for i in range(3)]
    assert outcomes == [ProcessOutcome.PERSISTED] * 3
