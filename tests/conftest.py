"""Shared fixtures: settings on a temp cache dir and a fake FRED endpoint."""

import httpx
import pytest

from mortgage_rates.config import Settings
from mortgage_rates.data.fred_fetcher import FredFetcher

CSV_URL = "https://fred.example.test/graph/fredgraph.csv"

CSV_30 = (
    "DATE,MORTGAGE30US\n"
    "2024-01-04,6.62\n"
    "2024-01-11,6.66\n"
    "2024-01-18,.\n"
    "2024-01-25,6.69\n"
)

CSV_15 = (
    "DATE,MORTGAGE15US\n"
    "2024-01-04,5.89\n"
    "2024-01-11,5.87\n"
    "2024-01-18,5.62\n"
)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        fred_csv_url=CSV_URL,
        request_timeout=5.0,
        cache_ttl=3600,
        cache_dir=tmp_path / "cache",
    )


class FakeFred:
    """Serves canned CSV bodies per series id and records requests."""

    def __init__(self, bodies=None):
        self.bodies = {"MORTGAGE30US": CSV_30, "MORTGAGE15US": CSV_15}
        self.bodies.update(bodies or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.bodies.get(request.url.params.get("id"))
        if isinstance(body, Exception):
            raise body
        if isinstance(body, int):
            return httpx.Response(body, text="error")
        if body is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=body)

    def calls_for(self, series_id):
        return [r for r in self.requests if r.url.params.get("id") == series_id]


@pytest.fixture
def fake_fred():
    return FakeFred()


@pytest.fixture
def make_fetcher(settings, fake_fred):
    def factory(fred=None):
        transport = httpx.MockTransport(fred or fake_fred)
        return FredFetcher(settings, client=httpx.Client(transport=transport))

    return factory
