"""Extract the latest observation (and the one before it) from FRED CSV text.

FRED's ``fredgraph.csv`` export is a header line followed by ``date,value``
rows in ascending date order. Gaps are written with a ``.`` value. Rows that
do not fit that shape are dropped, not raised, so a partially corrupt payload
still yields whatever valid data it contains.
"""

import logging
import math
import re
from datetime import date

import pandas as pd

from mortgage_rates.models import LatestObservation, RawSeriesRow, SeriesPoint


logger = logging.getLogger(__name__)

DELIMITER = ","
MISSING = "."

_DATA_ROW = re.compile(r"^\d{4}-\d{2}-\d{2}\s*,")


def _to_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return math.nan


def split_rows(
    text: str, delimiter: str = DELIMITER, missing: str = MISSING
) -> list[RawSeriesRow]:
    """
    Split CSV text into valid rows, in the order received.

    Line 0 is always treated as the header and discarded.

    Args:
        text: Raw response body
        delimiter: Column separator
        missing: Value token meaning "no observation"

    Returns:
        Rows with exactly two non-empty tokens and a non-missing value
    """
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")

    lines = [line.strip() for line in text.strip().split("\n")]
    if _DATA_ROW.match(lines[0]):
        logger.warning(f"Header line looks like data and will be skipped: {lines[0]!r}")

    rows = []
    for line in lines[1:]:
        cols = line.split(delimiter)
        if len(cols) != 2 or not cols[0] or not cols[1] or cols[1] == missing:
            logger.debug(f"Skipping row {line!r}")
            continue
        rows.append(RawSeriesRow(cols[0], cols[1]))
    return rows


def latest_from_rows(rows: list[RawSeriesRow]) -> LatestObservation:
    """Latest and previous values from already-filtered rows."""
    if not rows:
        return LatestObservation()

    last = rows[-1]
    prev = rows[-2] if len(rows) > 1 else None
    return LatestObservation(
        rate=_to_float(last.value_token),
        date=last.date_token,
        prev=_to_float(prev.value_token) if prev else None,
    )


def parse_latest_observation(
    text: str, delimiter: str = DELIMITER, missing: str = MISSING
) -> LatestObservation:
    """Parse CSV text into the latest observation with its predecessor."""
    return latest_from_rows(split_rows(text, delimiter, missing))


def to_points(rows: list[RawSeriesRow]) -> list[SeriesPoint]:
    """Convert rows to validated points, dropping bad dates and non-finite values."""
    points = []
    for row in rows:
        value = _to_float(row.value_token)
        if not math.isfinite(value):
            continue
        try:
            day = date.fromisoformat(row.date_token)
        except ValueError:
            continue
        points.append(SeriesPoint(day, value))
    return points


def series_frame(text: str) -> pd.DataFrame:
    """
    Valid observations as a DataFrame.

    Returns:
        DataFrame with DatetimeIndex ``date`` and a ``value`` column
    """
    points = to_points(split_rows(text))
    if not points:
        return pd.DataFrame(columns=["value"])

    df = pd.DataFrame([{"date": p.date, "value": p.value} for p in points])
    df["date"] = pd.to_datetime(df["date"])
    df.set_index("date", inplace=True)
    return df
