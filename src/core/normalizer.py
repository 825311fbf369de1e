"""Turn untrusted feed records into canonical candidates (core domain)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from core.models import ZERO_ADDRESS, Candidate, RawCandidate


def parse_migration_time(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    A trailing ``Z`` is accepted and naive values are taken as UTC. Returns
    None when the value is absent or unparseable.
    """

    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_candidate(raw: RawCandidate, now: Optional[datetime] = None) -> Optional[Candidate]:
    """Return a Candidate, or None when the record is unusable.

    Records without an address or without a token object are dropped
    silently. Every other missing field falls back to its default.
    """

    address = (raw.address or "").strip()
    if not address or raw.token is None:
        return None

    migrated_at = parse_migration_time(raw.migration_time)
    migrated_at_known = migrated_at is not None
    if migrated_at is None:
        migrated_at = now or datetime.now(timezone.utc)

    return Candidate(
        address=address,
        name=raw.token.name or "Unknown",
        symbol=raw.token.symbol or "UNK",
        creator=(raw.creator or "").strip() or ZERO_ADDRESS,
        migrated_at=migrated_at,
        migrated_at_known=migrated_at_known,
        initial_liquidity=raw.initial_liquidity if raw.initial_liquidity is not None else 0.0,
        creator_fee=raw.creator_fee if raw.creator_fee is not None else 0.0,
        holders=raw.holder_count if raw.holder_count is not None else 0,
    )
