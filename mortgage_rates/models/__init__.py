"""Data models."""

from .market_data import (
    CacheEntry,
    LatestObservation,
    MortgageRates,
    RawSeriesRow,
    SeriesPoint,
)

__all__ = [
    "CacheEntry",
    "LatestObservation",
    "MortgageRates",
    "RawSeriesRow",
    "SeriesPoint",
]
