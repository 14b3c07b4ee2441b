"""SQLite cache for latest mortgage rate observations."""

import math
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pandas as pd

from mortgage_rates.models import CacheEntry, LatestObservation


def _store_number(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return float(value)


def _load_number(value: float | None, present: bool) -> float | None:
    if value is None and present:
        return math.nan
    return value


class DataCache:
    """SQLite-based cache of per-series results with explicit expiry."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS latest_observations (
                    series_id TEXT PRIMARY KEY,
                    rate REAL,
                    date TEXT,
                    prev REAL,
                    has_prev INTEGER NOT NULL DEFAULT 0,
                    fetched_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
            """)

    def get_entry(
        self, series_id: str, now: datetime | None = None
    ) -> CacheEntry | None:
        """
        Return the cached entry for a series, or None if missing or expired.

        NaN values are stored as NULL; they come back as NaN wherever the
        stored row shows an observation existed.
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM latest_observations WHERE series_id = ?",
                (series_id,),
            ).fetchone()
        if row is None:
            return None

        entry = CacheEntry(
            series_id=series_id,
            result=LatestObservation(
                rate=_load_number(row["rate"], row["date"] is not None),
                date=row["date"],
                prev=_load_number(row["prev"], bool(row["has_prev"])),
            ),
            fetched_at=datetime.fromisoformat(row["fetched_at"]),
            expires_at=datetime.fromisoformat(row["expires_at"]),
        )
        if entry.is_expired(now):
            return None
        return entry

    def store_entry(
        self,
        series_id: str,
        result: LatestObservation,
        fetched_at: datetime,
        ttl: int,
    ) -> CacheEntry:
        """
        Store or replace the result for a series.

        Args:
            series_id: FRED series ID
            result: Parsed latest observation
            fetched_at: When the data was fetched (timezone-aware)
            ttl: Seconds until the entry expires

        Returns:
            The stored entry
        """
        expires_at = fetched_at + timedelta(seconds=ttl)
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO latest_observations
                (series_id, rate, date, prev, has_prev, fetched_at, expires_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    series_id,
                    _store_number(result.rate),
                    result.date,
                    _store_number(result.prev),
                    int(result.prev is not None),
                    fetched_at.isoformat(),
                    expires_at.isoformat(),
                ),
            )
        return CacheEntry(series_id, result, fetched_at, expires_at)

    def invalidate(self, series_id: str | None = None) -> int:
        """Drop one series entry, or every entry when series_id is None."""
        with self._get_connection() as conn:
            if series_id is None:
                cur = conn.execute("DELETE FROM latest_observations")
            else:
                cur = conn.execute(
                    "DELETE FROM latest_observations WHERE series_id = ?",
                    (series_id,),
                )
        return cur.rowcount

    def status_frame(self) -> pd.DataFrame:
        """All cached entries as a DataFrame indexed by series_id."""
        with self._get_connection() as conn:
            df = pd.read_sql_query(
                "SELECT * FROM latest_observations ORDER BY series_id", conn
            )
        return df.set_index("series_id")

    def get_cache_status(self, now: datetime | None = None) -> dict[str, dict]:
        """Get status of cached data for each series."""
        now = now or datetime.now(timezone.utc)
        df = self.status_frame()

        return {
            series_id: {
                "rate": None if pd.isna(row["rate"]) else float(row["rate"]),
                "date": None if pd.isna(row["date"]) else row["date"],
                "prev": None if pd.isna(row["prev"]) else float(row["prev"]),
                "last_fetched": row["fetched_at"],
                "expires_at": row["expires_at"],
                "expired": now >= datetime.fromisoformat(row["expires_at"]),
            }
            for series_id, row in df.iterrows()
        }
