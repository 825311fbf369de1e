"""SQLite storage adapter.

Implements the core StoragePort using a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from core.errors import PersistenceError
from core.models import Candidate, PersistedRecord, PersistResult

_COLUMNS = """
    id,
    contract_address,
    name,
    symbol,
    creator_wallet,
    migration_time,
    initial_liquidity,
    creator_fee,
    holders,
    created_at
"""


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    # migration_time is stored as ISO-8601; created_at uses SQLite's
    # CURRENT_TIMESTAMP format ("YYYY-MM-DD HH:MM:SS", UTC).
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _row_to_record(row: sqlite3.Row) -> PersistedRecord:
    return PersistedRecord(
        id=int(row["id"]),
        address=row["contract_address"],
        name=row["name"],
        symbol=row["symbol"],
        creator=row["creator_wallet"],
        migrated_at=_parse_timestamp(row["migration_time"]),
        initial_liquidity=float(row["initial_liquidity"]),
        creator_fee=float(row["creator_fee"]),
        holders=int(row["holders"]),
        created_at=_parse_timestamp(row["created_at"]),
    )


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StoragePort contract.

    Every public method raises PersistenceError instead of sqlite3 errors so
    callers never depend on the backend.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot open database {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist. Safe to call on every startup."""

        try:
            with self._connect() as conn:
                # coins holds one row per accepted coin. contract_address is
                # UNIQUE so repeated observations collapse into the first one.
                # Fields:
                # - id: auto-increment primary key
                # - contract_address: coin address as reported by the feed
                # - name / symbol: token descriptor, defaults applied
                # - creator_wallet: creator address, zero address when unknown
                # - migration_time: ISO-8601 instant the coin became tradeable
                # - initial_liquidity / creator_fee / holders: filter inputs
                # - created_at: set by SQLite when the row is inserted
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS coins (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        contract_address TEXT UNIQUE NOT NULL,
                        name TEXT,
                        symbol TEXT,
                        creator_wallet TEXT,
                        migration_time TEXT,
                        initial_liquidity REAL,
                        creator_fee REAL,
                        holders INTEGER,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                    """
                )
                # Backs the per-creator cap lookup.
                conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_coins_creator ON coins (creator_wallet)"
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to initialize database: {exc}") from exc

    def put(self, candidate: Candidate) -> PersistResult:
        """Insert a coin unless its address is already stored. Never overwrites."""

        try:
            with self._connect() as conn:
                cur = conn.execute(
                    """
                    INSERT OR IGNORE INTO coins (
                        contract_address,
                        name,
                        symbol,
                        creator_wallet,
                        migration_time,
                        initial_liquidity,
                        creator_fee,
                        holders
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        candidate.address,
                        candidate.name,
                        candidate.symbol,
                        candidate.creator,
                        candidate.migrated_at.isoformat(),
                        candidate.initial_liquidity,
                        candidate.creator_fee,
                        candidate.holders,
                    ),
                )
                inserted = cur.rowcount == 1
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to store {candidate.address}: {exc}") from exc
        return PersistResult.INSERTED if inserted else PersistResult.IGNORED

    def get(self, address: str) -> Optional[PersistedRecord]:
        """Return the stored coin for an address, if any."""

        try:
            with self._connect() as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM coins WHERE contract_address = ?",
                    (address,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to read {address}: {exc}") from exc
        return _row_to_record(row) if row else None

    def count_by_creator(self, creator: str) -> int:
        """Return how many distinct coins are stored for a creator."""

        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) AS total FROM coins WHERE creator_wallet = ?",
                    (creator,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to count coins for {creator}: {exc}") from exc
        return int(row["total"])

    def list_recent(self, limit: int = 20) -> List[PersistedRecord]:
        """Return the newest stored coins first."""

        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM coins ORDER BY id DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to list coins: {exc}") from exc
        return [_row_to_record(row) for row in rows]
