"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to the feed's JSON shape or to SQLite rows.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

ZERO_ADDRESS = "0x" + "0" * 40


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_float(value: Any) -> Optional[float]:
    # bool is an int subclass; a JSON true is not a liquidity figure.
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return int(number) if number is not None else None


@dataclass(frozen=True)
class RawToken:
    """Token descriptor embedded in a feed record."""

    name: Optional[str] = None
    symbol: Optional[str] = None


@dataclass(frozen=True)
class RawCandidate:
    """Untrusted feed record. Every field may be absent."""

    address: Optional[str] = None
    token: Optional[RawToken] = None
    creator: Optional[str] = None
    migration_time: Optional[str] = None
    initial_liquidity: Optional[float] = None
    creator_fee: Optional[float] = None
    holder_count: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RawCandidate":
        """Decode one feed object, turning wrongly typed fields into absent ones."""

        token_payload = payload.get("token")
        token = None
        if isinstance(token_payload, Mapping):
            token = RawToken(
                name=_as_str(token_payload.get("name")),
                symbol=_as_str(token_payload.get("symbol")),
            )
        return cls(
            address=_as_str(payload.get("contractAddress")),
            token=token,
            creator=_as_str(payload.get("creator")),
            migration_time=_as_str(payload.get("migrationTime")),
            initial_liquidity=_as_float(payload.get("initialLiquidity")),
            creator_fee=_as_float(payload.get("feePercentage")),
            holder_count=_as_int(payload.get("holderCount")),
        )


@dataclass(frozen=True)
class Candidate:
    """Canonical, normalized representation of one feed record."""

    address: str
    migrated_at: datetime
    name: str = "Unknown"
    symbol: str = "UNK"
    creator: str = ZERO_ADDRESS
    migrated_at_known: bool = True
    initial_liquidity: float = 0.0
    creator_fee: float = 0.0
    holders: int = 0


@dataclass(frozen=True)
class PersistedRecord:
    """Durable form of an accepted candidate."""

    id: int
    address: str
    name: str
    symbol: str
    creator: str
    migrated_at: Optional[datetime]
    initial_liquidity: float
    creator_fee: float
    holders: int
    created_at: Optional[datetime]


class PersistResult(Enum):
    INSERTED = "inserted"
    IGNORED = "ignored"


class ProcessOutcome(Enum):
    """Terminal state of one record's trip through the pipeline."""

    DROPPED = "dropped"
    BLACKLISTED = "blacklisted"
    REJECTED = "rejected"
    CREATOR_CAPPED = "creator_capped"
    PERSISTED = "persisted"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordResult:
    """What happened to one record; address is None for dropped records."""

    outcome: ProcessOutcome
    address: Optional[str] = None
    alerted: bool = False


@dataclass
class CycleReport:
    """Summary of one poll cycle."""

    fetched: int = 0
    outcomes: dict[ProcessOutcome, int] = field(default_factory=dict)
    alerts_sent: int = 0
    fetch_error: Optional[str] = None
    last_persisted: Optional[str] = None

    def record(self, result: RecordResult) -> None:
        self.outcomes[result.outcome] = self.outcomes.get(result.outcome, 0) + 1
        if result.alerted:
            self.alerts_sent += 1
        if result.outcome is ProcessOutcome.PERSISTED:
            self.last_persisted = result.address

    def count(self, outcome: ProcessOutcome) -> int:
        return self.outcomes.get(outcome, 0)
