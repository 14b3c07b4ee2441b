"""Tests for the SQLite result cache."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from mortgage_rates.data.cache import DataCache
from mortgage_rates.models import LatestObservation

FETCHED = datetime(2024, 1, 26, 8, 0, tzinfo=timezone.utc)
OBS = LatestObservation(rate=6.69, date="2024-01-25", prev=6.66)


@pytest.fixture
def cache(tmp_path):
    return DataCache(tmp_path / "test.db")


def test_store_and_get_fresh_entry(cache):
    stored = cache.store_entry("MORTGAGE30US", OBS, FETCHED, ttl=3600)
    assert stored.expires_at == FETCHED + timedelta(hours=1)

    entry = cache.get_entry("MORTGAGE30US", now=FETCHED + timedelta(minutes=30))
    assert entry.result == OBS
    assert entry.fetched_at == FETCHED
    assert entry.expires_at == FETCHED + timedelta(hours=1)


def test_expired_or_missing_entry_is_none(cache):
    cache.store_entry("MORTGAGE30US", OBS, FETCHED, ttl=3600)
    assert cache.get_entry("MORTGAGE30US", now=FETCHED + timedelta(hours=2)) is None
    assert cache.get_entry("MORTGAGE15US", now=FETCHED) is None


def test_zero_ttl_is_never_fresh(cache):
    cache.store_entry("MORTGAGE30US", OBS, FETCHED, ttl=0)
    assert cache.get_entry("MORTGAGE30US", now=FETCHED) is None


def test_store_replaces_previous_entry(cache):
    cache.store_entry("MORTGAGE30US", OBS, FETCHED, ttl=3600)
    newer = LatestObservation(rate=6.6, date="2024-02-01", prev=6.69)
    cache.store_entry("MORTGAGE30US", newer, FETCHED + timedelta(days=7), ttl=3600)

    entry = cache.get_entry("MORTGAGE30US", now=FETCHED + timedelta(days=7))
    assert entry.result == newer


def test_nan_and_empty_results_round_trip(cache):
    cache.store_entry(
        "A", LatestObservation(rate=math.nan, date="2024-01-25", prev=math.nan), FETCHED, 60
    )
    cache.store_entry("B", LatestObservation(rate=6.6, date="2024-01-25"), FETCHED, 60)
    cache.store_entry("C", LatestObservation(), FETCHED, 60)

    a = cache.get_entry("A", now=FETCHED).result
    assert math.isnan(a.rate)
    assert math.isnan(a.prev)
    assert a.date == "2024-01-25"
    assert a.to_dict() == {"rate": None, "date": "2024-01-25", "prev": None}

    assert cache.get_entry("B", now=FETCHED).result == LatestObservation(rate=6.6, date="2024-01-25")
    assert cache.get_entry("C", now=FETCHED).result == LatestObservation()


def test_invalidate(cache):
    cache.store_entry("MORTGAGE30US", OBS, FETCHED, ttl=3600)
    cache.store_entry("MORTGAGE15US", OBS, FETCHED, ttl=3600)

    assert cache.invalidate("MORTGAGE30US") == 1
    assert cache.get_entry("MORTGAGE30US", now=FETCHED) is None
    assert cache.get_entry("MORTGAGE15US", now=FETCHED) is not None
    assert cache.invalidate() == 1


def test_cache_status(cache):
    cache.store_entry("MORTGAGE30US", OBS, FETCHED, ttl=3600)
    cache.store_entry("MORTGAGE15US", LatestObservation(), FETCHED, ttl=3600)

    status = cache.get_cache_status(now=FETCHED + timedelta(hours=2))
    assert status["MORTGAGE30US"]["rate"] == 6.69
    assert status["MORTGAGE30US"]["date"] == "2024-01-25"
    assert status["MORTGAGE30US"]["expired"] is True
    assert status["MORTGAGE15US"]["rate"] is None
    assert status["MORTGAGE15US"]["date"] is None


def test_status_frame_empty(cache):
    assert cache.status_frame().empty
