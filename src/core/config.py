"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

DEFAULT_API_BASE = "https://api.pump.fun"


@dataclass(frozen=True)
class FeedConfig:
    """Discovery feed access and polling cadence."""

    api_key: str
    api_base: str = DEFAULT_API_BASE
    poll_interval: float = 60.0
    fetch_limit: int = 10
    timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be greater than zero")
        if self.fetch_limit <= 0:
            raise ValueError("fetch_limit must be greater than zero")
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than zero")


@dataclass(frozen=True)
class FilterConfig:
    """Heuristic thresholds applied to every non-blacklisted candidate."""

    min_liquidity: float = 5.0
    max_creator_fee: float = 10.0
    min_holders: int = 25
    min_age_minutes: float = 10.0
    # 0 disables the per-creator cap.
    max_coins_per_creator: int = 3

    def __post_init__(self) -> None:
        for name in (
            "min_liquidity",
            "max_creator_fee",
            "min_holders",
            "min_age_minutes",
            "max_coins_per_creator",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    @property
    def min_age(self) -> timedelta:
        return timedelta(minutes=self.min_age_minutes)


@dataclass(frozen=True)
class BlacklistConfig:
    """Denylisted coin and creator addresses, matched case-sensitively."""

    coin_addresses: frozenset[str] = field(default_factory=frozenset)
    creator_addresses: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class NotificationConfig:
    """Telegram Bot API credentials consumed by the notifier adapter."""

    bot_token: Optional[str] = None
    chat_id: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)


@dataclass(frozen=True)
class MonitorConfig:
    """Everything the monitor needs, shared read-only for the process lifetime."""

    feed: FeedConfig
    filters: FilterConfig
    blacklists: BlacklistConfig
    notifications: NotificationConfig
    db_path: str
