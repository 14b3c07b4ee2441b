"""Series parsing and latest-observation extraction."""

from mortgage_rates.indicators.latest import (
    parse_latest_observation,
    series_frame,
    split_rows,
)

__all__ = ["parse_latest_observation", "series_frame", "split_rows"]
