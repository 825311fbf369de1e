"""Application entry point for the pumpscout monitor."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

from art import tprint

import settings
from adapters.pumpfun_feed import PumpFunFeedClient
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_bot_notifier import TelegramBotNotifier
from client import build_session
from core.config import MonitorConfig
from core.errors import ConfigError, PersistenceError
from core.processor import CandidateProcessor
from core.scheduler import PollScheduler

NAME = "PUMPSCOUT"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _SecretMaskingFormatter(logging.Formatter):
    """Replace the feed API key and bot token with ``***`` in every line."""

    def __init__(self, secrets: Iterable[Optional[str]]) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
        # Longest first, so a secret that contains another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _secrets_to_mask(logging_cfg: dict, config: MonitorConfig) -> list[str]:
    redact = logging_cfg.get("redact") or {}
    if not redact.get("enabled", True):
        return []
    known = {
        settings.API_KEY_ENV: config.feed.api_key,
        settings.BOT_TOKEN_ENV: config.notifications.bot_token,
    }
    # Extra names listed in config.json are looked up in the environment.
    names = redact.get("patterns", list(known))
    return [known.get(name) or os.getenv(name, "") for name in names]


def _log_file_handler(file_cfg: dict) -> Optional[RotatingFileHandler]:
    if not file_cfg.get("enabled", False):
        return None
    path = file_cfg.get("path") or settings.LOG_PATH
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def _configure_logging(logging_cfg: dict, config: MonitorConfig) -> None:
    """Attach console and rotating-file handlers that never print secrets."""

    if not logging_cfg.get("enabled", False):
        return

    level = logging.getLevelName(str(logging_cfg.get("level", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = []
    if logging_cfg.get("console", True):
        handlers.append(logging.StreamHandler())
    file_handler = _log_file_handler(logging_cfg.get("file") or {})
    if file_handler is not None:
        handlers.append(file_handler)
    if not handlers:
        return

    formatter = _SecretMaskingFormatter(_secrets_to_mask(logging_cfg, config))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)


def _load(config_path: str) -> MonitorConfig:
    raw = settings.load_raw_config(config_path)
    config = settings.build_monitor_config(raw)
    _configure_logging(settings.get_section(raw, "logging"), config)
    return config


async def _monitor(config: MonitorConfig, storage: SQLiteStorage, once: bool) -> None:
    async with build_session() as session:
        feed = PumpFunFeedClient(
            session,
            api_key=config.feed.api_key,
            api_base=config.feed.api_base,
            timeout=config.feed.timeout,
        )
        notifier = TelegramBotNotifier(
            session,
            bot_token=config.notifications.bot_token,
            chat_id=config.notifications.chat_id,
        )
        processor = CandidateProcessor(
            storage=storage,
            notifier=notifier,
            filters=config.filters,
            blacklists=config.blacklists,
        )
        scheduler = PollScheduler(
            feed=feed,
            processor=processor,
            poll_interval=config.feed.poll_interval,
            fetch_limit=config.feed.fetch_limit,
        )
        await scheduler.run_forever(max_cycles=1 if once else None)


def _run(config_path: str, once: bool) -> None:
    _print_banner()
    config = _load(config_path)
    logger = logging.getLogger(__name__)

    logger.info("Starting pumpscout")

    storage = SQLiteStorage(config.db_path)
    storage.init_db()

    if not config.notifications.enabled:
        logger.warning("Telegram bot token or channel id missing; alerts will be skipped")
    logger.info(
        "Polling %s every %ss (limit %s)",
        config.feed.api_base,
        config.feed.poll_interval,
        config.feed.fetch_limit,
    )

    try:
        asyncio.run(_monitor(config, storage, once))
    except KeyboardInterrupt:
        logger.info("Stopped by user")


def _init(config_path: str, force: bool) -> None:
    if os.path.exists(config_path) and not force:
        print(f"{config_path} already exists. Use --force to overwrite it.")
        return
    settings.write_config_template(config_path)
    print(f"Wrote example config to {config_path}")
    print(f"Set {settings.API_KEY_ENV} (and optionally {settings.BOT_TOKEN_ENV}) in your environment or .env")


def _recent(config_path: str, limit: int) -> None:
    config = _load(config_path)
    storage = SQLiteStorage(config.db_path)
    storage.init_db()
    records = storage.list_recent(limit)

    if not records:
        print("No coins stored yet.")
        return

    for index, record in enumerate(records, start=1):
        created = record.created_at.strftime("%Y-%m-%d %H:%M:%S") if record.created_at else "-"
        print(
            f"{index}. {record.symbol} | {record.name} | {record.address} | "
            f"{record.initial_liquidity:.2f} | {created}"
        )


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="pumpscout")
    parser.add_argument("--config", default=settings.CONFIG_PATH, help="Path to config.json")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Start the monitor")
    run_parser.add_argument("--once", action="store_true", help="Run a single poll cycle and exit")
    init_parser = subparsers.add_parser("init", help="Write an example config.json")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing config")
    recent_parser = subparsers.add_parser("recent", help="Show the most recently stored coins")
    recent_parser.add_argument("--limit", type=int, default=20)

    args = parser.parse_args(argv)
    try:
        if args.command == "init":
            _init(args.config, args.force)
            return
        if args.command == "recent":
            _recent(args.config, args.limit)
            return
        _run(args.config, getattr(args, "once", False))
    except (ConfigError, PersistenceError) as exc:
        print(f"pumpscout: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
