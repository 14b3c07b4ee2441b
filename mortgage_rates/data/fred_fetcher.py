"""FRED CSV fetcher with a time-bounded result cache."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import httpx

from mortgage_rates.config import Settings, MORTGAGE_SERIES, RATE_SLOTS
from mortgage_rates.data.cache import DataCache
from mortgage_rates.indicators.latest import parse_latest_observation
from mortgage_rates.models import LatestObservation, MortgageRates


logger = logging.getLogger(__name__)


class FredFetcher:
    """Fetches FRED series as CSV (no API key) with local caching."""

    def __init__(
        self,
        settings: Settings | None = None,
        cache: DataCache | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.settings.validate()
        self.cache = cache or DataCache(self.settings.db_path)
        self._client = client

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.settings.request_timeout)
        return self._client

    def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "FredFetcher":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def fetch_csv(self, series_id: str) -> str:
        """
        Download the raw CSV body for a series. Single attempt, no retry.

        ``request_timeout`` bounds the whole request, body included; httpx's
        own timeout only bounds each phase, so a slow trickle is cut off here.

        Raises:
            httpx.ReadTimeout: The deadline passed while reading the body
            httpx.HTTPStatusError: Upstream returned a non-2xx status
        """
        deadline = time.monotonic() + self.settings.request_timeout
        with self.client.stream(
            "GET",
            self.settings.fred_csv_url,
            params={"id": series_id},
            headers={
                "User-Agent": self.settings.user_agent,
                "Accept": "text/csv,text/plain,*/*",
            },
            timeout=self.settings.request_timeout,
        ) as response:
            response.raise_for_status()
            chunks = []
            for chunk in response.iter_bytes():
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(
                        f"{series_id} exceeded {self.settings.request_timeout}s",
                        request=response.request,
                    )
                chunks.append(chunk)

        return b"".join(chunks).decode(response.encoding or "utf-8")

    def fetch_series(self, series_id: str, force: bool = False) -> LatestObservation:
        """
        Latest observation for a series, served from cache while fresh.

        Args:
            series_id: FRED series ID
            force: If True, skip the cache and refetch

        Returns:
            Latest observation with its predecessor
        """
        if not force:
            entry = self.cache.get_entry(series_id)
            if entry is not None:
                logger.debug(f"Cache hit for {series_id} (expires {entry.expires_at})")
                return entry.result

        logger.info(f"Fetching {series_id}...")
        text = self.fetch_csv(series_id)
        fetched_at = datetime.now(timezone.utc)

        result = parse_latest_observation(text)
        if result.is_empty:
            logger.warning(f"  No valid observations for {series_id}")
        else:
            logger.info(f"  Latest {series_id}: {result.rate} on {result.date}")

        self.cache.store_entry(series_id, result, fetched_at, self.settings.cache_ttl)
        return result

    def fetch_mortgage_rates(self, force: bool = False) -> MortgageRates:
        """
        Fetch the 30-year and 15-year series concurrently.

        Raises whatever the first failing fetch raised; there is no partial
        result.
        """
        # Workers share one client; create it before they start.
        _ = self.client

        with ThreadPoolExecutor(max_workers=len(RATE_SLOTS)) as pool:
            futures = {
                slot: pool.submit(self.fetch_series, series_id, force)
                for slot, series_id in RATE_SLOTS.items()
            }
            results = {slot: future.result() for slot, future in futures.items()}

        return MortgageRates(
            rate30=results["rate30"],
            rate15=results["rate15"],
            fetched_at=datetime.now(timezone.utc),
        )

    def get_status(self) -> dict:
        """Get cache status for all configured series."""
        status = self.cache.get_cache_status()

        # Add missing series info
        for series_id, title in MORTGAGE_SERIES.items():
            info = status.setdefault(
                series_id,
                {
                    "rate": None,
                    "date": None,
                    "prev": None,
                    "last_fetched": None,
                    "expires_at": None,
                    "expired": True,
                },
            )
            info["title"] = title

        return status


def _format_rate(value: float | None) -> str:
    return f"{value:.2f}%" if value is not None else "N/A"


def main() -> None:
    """CLI entry point for fetching mortgage rates."""
    import argparse
    import json
    import sys

    from mortgage_rates.indicators.latest import series_frame

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Fetch FRED mortgage rates")
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore cached results and refetch",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show cache status and exit",
    )
    parser.add_argument(
        "--series",
        type=str,
        help="Fetch specific series only",
    )
    parser.add_argument(
        "--history",
        type=int,
        metavar="N",
        help="Print the last N observations of --series",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the combined response as JSON",
    )
    args = parser.parse_args()
    if args.history is not None and not args.series:
        parser.error("--history requires --series")

    try:
        with FredFetcher() as fetcher:
            if args.status:
                status = fetcher.get_status()
                print("\nCache Status:")
                print("-" * 70)
                for series_id, info in sorted(status.items()):
                    rate = _format_rate(info["rate"])
                    last = info["date"] or "N/A"
                    state = "expired" if info["expired"] else "fresh"
                    print(f"{series_id:14} | {rate:>7} | Last: {last:10} | {state:7} | {info['title']}")
                return

            if args.series:
                if args.series not in MORTGAGE_SERIES:
                    print(f"Unknown series: {args.series}")
                    print(f"Available: {', '.join(MORTGAGE_SERIES.keys())}")
                    sys.exit(1)
                if args.history:
                    df = series_frame(fetcher.fetch_csv(args.series))
                    print(df.tail(args.history).to_string())
                    return
                result = fetcher.fetch_series(args.series, force=args.refresh)
                delta = result.delta
                change = f"{delta:+.2f}" if delta is not None else "N/A"
                print(f"{args.series}: {_format_rate(result.to_dict()['rate'])} "
                      f"as of {result.date or 'N/A'} (change {change})")
                return

            rates = fetcher.fetch_mortgage_rates(force=args.refresh)
            if args.json:
                print(json.dumps(rates.to_dict(), indent=2))
                return

            print("\nUS Mortgage Rates:")
            for slot, series_id in RATE_SLOTS.items():
                point = getattr(rates, slot)
                delta = point.delta
                change = f"{delta:+.2f}" if delta is not None else "N/A"
                print(f"  {MORTGAGE_SERIES[series_id]}: "
                      f"{_format_rate(point.to_dict()['rate'])} "
                      f"as of {point.date or 'N/A'} (change {change})")

    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except httpx.HTTPStatusError as e:
        print(f"API error: {e.response.status_code} {e.response.reason_phrase}")
        sys.exit(1)
    except httpx.HTTPError as e:
        print(f"Request failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
