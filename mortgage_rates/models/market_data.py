"""Data models for mortgage rate observations."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone


def _available(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _json_number(value: float | None) -> float | None:
    return value if _available(value) else None


@dataclass(frozen=True)
class RawSeriesRow:
    """One split line of a FRED CSV payload."""

    date_token: str
    value_token: str


@dataclass(frozen=True)
class SeriesPoint:
    """Validated observation: real calendar date, finite value."""

    date: date
    value: float


@dataclass(frozen=True)
class LatestObservation:
    """Latest valid observation of a series plus the one before it.

    ``rate`` and ``prev`` may hold NaN when the upstream token was not
    numeric; treat that the same as a missing value.
    """

    rate: float | None = None
    date: str | None = None
    prev: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.date is None

    @property
    def delta(self) -> float | None:
        """Period-over-period change, rounded to 3 decimals."""
        if not (_available(self.rate) and _available(self.prev)):
            return None
        return round(self.rate - self.prev, 3)

    def to_dict(self) -> dict:
        return {
            "rate": _json_number(self.rate),
            "date": self.date,
            "prev": _json_number(self.prev),
        }


@dataclass
class CacheEntry:
    """Cached latest observation for one series."""

    series_id: str
    result: LatestObservation
    fetched_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


@dataclass
class MortgageRates:
    """Combined 30-year / 15-year response."""

    rate30: LatestObservation
    rate15: LatestObservation
    fetched_at: datetime

    def to_dict(self) -> dict:
        return {
            "rate30": self.rate30.to_dict(),
            "rate15": self.rate15.to_dict(),
            "fetchedAt": self.fetched_at.isoformat().replace("+00:00", "Z"),
        }
