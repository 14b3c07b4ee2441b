"""
Flask application serving the latest US mortgage rates.

``create_app`` accepts a ``fetcher_factory`` so tests can swap in a fetcher
that never touches the network.
"""

import logging

import httpx
from flask import Flask, jsonify

from mortgage_rates.config import Settings, MORTGAGE_SERIES
from mortgage_rates.data.fred_fetcher import FredFetcher


logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to fetch mortgage rates"


def _error_response(exc: Exception):
    """Map an upstream failure to a JSON error and status code."""
    if isinstance(exc, httpx.TimeoutException):
        status = 504
        message = f"Upstream timed out: {exc}"
    elif isinstance(exc, httpx.HTTPStatusError):
        status = 502
        message = f"FRED HTTP {exc.response.status_code}"
    else:
        status = 502
        message = str(exc) or exc.__class__.__name__
    return jsonify({"error": ERROR_MESSAGE, "message": message}), status


def create_app(settings: Settings | None = None, fetcher_factory=None) -> Flask:
    """Create and configure the Flask app."""
    app = Flask(__name__)
    settings = settings or Settings()
    if fetcher_factory is None:
        def fetcher_factory():
            return FredFetcher(settings)

    @app.get("/api/mortgage-rates")
    def mortgage_rates():
        try:
            with fetcher_factory() as fetcher:
                rates = fetcher.fetch_mortgage_rates()
        except httpx.HTTPError as exc:
            logger.error(f"Mortgage rate fetch failed: {exc!r}")
            return _error_response(exc)

        response = jsonify(rates.to_dict())
        response.headers["Cache-Control"] = settings.cache_control()
        return response

    @app.get("/api/mortgage-rates/<series_id>")
    def mortgage_rate_series(series_id: str):
        series_id = series_id.upper()
        if series_id not in MORTGAGE_SERIES:
            return jsonify({
                "error": "Unknown series",
                "message": f"Available: {', '.join(MORTGAGE_SERIES)}",
            }), 404

        try:
            with fetcher_factory() as fetcher:
                result = fetcher.fetch_series(series_id)
        except httpx.HTTPError as exc:
            logger.error(f"{series_id} fetch failed: {exc!r}")
            return _error_response(exc)

        response = jsonify({
            "seriesId": series_id,
            "title": MORTGAGE_SERIES[series_id],
            **result.to_dict(),
            "delta": result.delta,
        })
        response.headers["Cache-Control"] = settings.cache_control()
        return response

    return app


def main() -> None:
    """Run the development server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    create_app().run(debug=False)


if __name__ == "__main__":
    main()
