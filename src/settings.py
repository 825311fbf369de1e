"""Configuration loading for pumpscout.

All user-editable settings (feed, filters, blacklists, notifications,
logging) live in a single JSON file for quick edits without touching Python.
Secrets stay out of that file: they are read from the environment, with a
local .env loaded through python-dotenv.
"""

from __future__ import annotations

import json
import math
import os
from typing import Any, Iterable, Optional, Union

from dotenv import load_dotenv

from core.config import (
    DEFAULT_API_BASE,
    BlacklistConfig,
    FeedConfig,
    FilterConfig,
    MonitorConfig,
    NotificationConfig,
)
from core.errors import ConfigError
from core.models import ZERO_ADDRESS

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Where to look for config.json unless --config says otherwise.
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")

# Where to store the SQLite database when the config does not say.
DB_PATH = os.path.join(PROJECT_ROOT, "pumpscout.db")

# Rotating log file, used when logging.file.enabled is set without a path.
LOG_PATH = os.path.join(PROJECT_ROOT, "logs", "pumpscout.log")

# Environment variables holding secrets.
API_KEY_ENV = "PUMPFUN_API_KEY"
BOT_TOKEN_ENV = "BOT_API"

CONFIG_TEMPLATE: dict[str, Any] = {
    "api": {
        "api_base": DEFAULT_API_BASE,
        "poll_interval": 60,
        "fetch_limit": 10,
    },
    "filters": {
        "min_liquidity": 5.0,
        "max_creator_fee": 10.0,
        "min_holders": 25,
        "block_new_coins_minutes": 10,
        "max_coins_per_creator": 3,
    },
    "blacklists": {
        "coin_addresses": ZERO_ADDRESS,
        "dev_addresses": ZERO_ADDRESS,
    },
    "telegram": {
        "channel_id": "",
    },
    "storage": {
        "db_path": "pumpscout.db",
    },
    "logging": {
        "enabled": True,
        "level": "INFO",
        "console": True,
        "file": {
            "enabled": False,
            "path": "logs/pumpscout.log",
            "max_bytes": 5 * 1024 * 1024,
            "backup_count": 5,
        },
        "redact": {
            "enabled": True,
            "patterns": [API_KEY_ENV, BOT_TOKEN_ENV],
        },
    },
}


def write_config_template(path: str = CONFIG_PATH) -> None:
    """Write the example config.json to ``path``."""

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(json.dumps(CONFIG_TEMPLATE, indent=2, ensure_ascii=True) + "\n")


def load_raw_config(path: str = CONFIG_PATH) -> dict:
    """Load config.json, writing a template first when it does not exist."""

    if not os.path.exists(path):
        write_config_template(path)
        raise ConfigError(f"Config file not found. An example was written to {path}; edit it and restart.")

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def parse_address_list(value: Union[str, Iterable[str], None]) -> frozenset[str]:
    """Accept a comma-separated string or a list; trim and drop empty entries."""

    if value is None:
        return frozenset()
    items = value.split(",") if isinstance(value, str) else value
    return frozenset(str(item).strip() for item in items if str(item).strip())


def get_section(raw: dict, name: str) -> dict:
    """Return one top-level section of config.json; absent means empty."""

    section = raw.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section {name!r} must be a JSON object, got {section!r}")
    return section


def _number(section: dict, key: str, default: Any, cast: type) -> Any:
    raw = section.get(key, default)
    try:
        value = cast(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc
    # json.load accepts NaN and Infinity, which would slip past every bound.
    if not math.isfinite(value):
        raise ConfigError(f"{key} must be a finite number, got {raw!r}")
    return value


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_monitor_config(raw: dict, env: Optional[dict] = None) -> MonitorConfig:
    """Validate the raw JSON plus secrets and return the core config.

    ``env`` defaults to the process environment after loading .env.
    """

    if env is None:
        load_dotenv()
        env = dict(os.environ)

    api_key = _optional_str(env.get(API_KEY_ENV))
    # Fail fast on missing credentials to avoid a loop of 401s.
    if not api_key:
        raise ConfigError(f"Missing {API_KEY_ENV} in environment")

    api = get_section(raw, "api")
    filters = get_section(raw, "filters")
    blacklists = get_section(raw, "blacklists")
    telegram = get_section(raw, "telegram")
    storage = get_section(raw, "storage")

    db_path = storage.get("db_path") or DB_PATH
    if not isinstance(db_path, str):
        raise ConfigError(f"db_path must be a string, got {db_path!r}")
    if not os.path.isabs(db_path):
        db_path = os.path.join(PROJECT_ROOT, db_path)

    try:
        return MonitorConfig(
            feed=FeedConfig(
                api_key=api_key,
                api_base=api.get("api_base", DEFAULT_API_BASE),
                poll_interval=_number(api, "poll_interval", 60, float),
                fetch_limit=_number(api, "fetch_limit", 10, int),
            ),
            filters=FilterConfig(
                min_liquidity=_number(filters, "min_liquidity", 5.0, float),
                max_creator_fee=_number(filters, "max_creator_fee", 10.0, float),
                min_holders=_number(filters, "min_holders", 25, int),
                min_age_minutes=_number(filters, "block_new_coins_minutes", 10, float),
                max_coins_per_creator=_number(filters, "max_coins_per_creator", 3, int),
            ),
            blacklists=BlacklistConfig(
                coin_addresses=parse_address_list(blacklists.get("coin_addresses")),
                creator_addresses=parse_address_list(blacklists.get("dev_addresses")),
            ),
            notifications=NotificationConfig(
                bot_token=_optional_str(env.get(BOT_TOKEN_ENV)),
                chat_id=_optional_str(telegram.get("channel_id")),
            ),
            db_path=db_path,
        )
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
