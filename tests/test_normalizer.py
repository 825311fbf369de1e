from __future__ import annotations

from datetime import datetime, timedelta, timezone

from core.models import ZERO_ADDRESS, RawCandidate, RawToken
from core.normalizer import normalize_candidate, parse_migration_time

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_from_payload_reads_feed_keys() -> None:
    raw = RawCandidate.from_payload(
        {
            "contractAddress": "0xA",
            "token": {"name": "Alpha", "symbol": "ALP"},
            "creator": "0xC",
            "migrationTime": "2024-05-01T11:00:00Z",
            "initialLiquidity": 10,
            "feePercentage": "2.5",
            "holderCount": 30.0,
        }
    )
    assert raw.address == "0xA"
    assert raw.token == RawToken(name="Alpha", symbol="ALP")
    assert raw.creator == "0xC"
    assert raw.initial_liquidity == 10.0
    assert raw.creator_fee == 2.5
    assert raw.holder_count == 30


def test_from_payload_treats_malformed_fields_as_absent() -> None:
    raw = RawCandidate.from_payload(
        {
            "contractAddress": 123,
            "token": "not-an-object",
            "initialLiquidity": True,
            "feePercentage": "lots",
            "holderCount": float("nan"),
        }
    )
    assert raw.address is None
    assert raw.token is None
    assert raw.initial_liquidity is None
    assert raw.creator_fee is None
    assert raw.holder_count is None


def test_missing_optional_fields_use_defaults() -> None:
    raw = RawCandidate(address="0xA", token=RawToken(), migration_time="2024-05-01T11:00:00Z")
    candidate = normalize_candidate(raw, now=NOW)

    assert candidate is not None
    assert candidate.name == "Unknown"
    assert candidate.symbol == "UNK"
    assert candidate.creator == ZERO_ADDRESS
    assert candidate.initial_liquidity == 0.0
    assert candidate.creator_fee == 0.0
    assert candidate.holders == 0
    assert candidate.migrated_at == NOW - timedelta(hours=1)
    assert candidate.migrated_at_known


def test_records_without_address_or_token_are_dropped() -> None:
    assert normalize_candidate(RawCandidate(token=RawToken(name="x")), now=NOW) is None
    assert normalize_candidate(RawCandidate(address="   ", token=RawToken()), now=NOW) is None
    assert normalize_candidate(RawCandidate(address="0xA"), now=NOW) is None


def test_unparseable_timestamp_falls_back_to_now_and_is_flagged() -> None:
    raw = RawCandidate(address="0xA", token=RawToken(), migration_time="yesterday-ish")
    candidate = normalize_candidate(raw, now=NOW)

    assert candidate is not None
    assert candidate.migrated_at == NOW
    assert not candidate.migrated_at_known


def test_parse_migration_time_variants() -> None:
    expected = datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)
    assert parse_migration_time("2024-05-01T11:00:00Z") == expected
    assert parse_migration_time("2024-05-01T13:00:00+02:00") == expected
    # Naive timestamps are taken as UTC.
    assert parse_migration_time("2024-05-01T11:00:00") == expected
    assert parse_migration_time("") is None
    assert parse_migration_time(None) is None
