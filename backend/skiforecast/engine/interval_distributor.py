"""
Interval distributor for NWS quantitative time series.

Raw gridpoint series (snowfallAmount, quantitativePrecipitation) report one
amount per ISO 8601 interval, e.g. ``"2024-01-15T06:00:00+00:00/PT6H"`` with
a value in millimeters for the whole 6 hours. This module splits every entry
evenly across the hours it covers and returns a map keyed by hour-start
timestamp (milliseconds since epoch).

Forecast revisions can produce overlapping intervals; overlapping
contributions are summed.
"""

import logging
import re
from datetime import datetime
from typing import Iterable, Optional, Union

from dateutil import parser as dtparse
from pydantic import ValidationError

from skiforecast.models.forecast import IntervalEntry

logger = logging.getLogger(__name__)

MS_PER_HOUR = 3_600_000

_DURATION_RE = re.compile(r"PT(\d+)H")


def parse_duration_hours(duration: Optional[str]) -> int:
    """Parse an ISO 8601 duration such as "PT6H" into whole hours.

    Anything unparseable (missing, "P1D", "PT30M", zero hours) defaults to 1.
    """
    if not duration:
        return 1
    match = _DURATION_RE.search(duration)
    if not match:
        logger.warning("Unparseable interval duration %r, assuming 1 hour", duration)
        return 1
    hours = int(match.group(1))
    return hours if hours > 0 else 1


def hour_key(dt: datetime) -> int:
    """Milliseconds since epoch, truncated to the start of the hour."""
    ms = int(dt.timestamp() * 1000)
    return ms - ms % MS_PER_HOUR


def distribute_time_series(
    values: Optional[Iterable[Union[IntervalEntry, dict]]],
) -> dict[int, float]:
    """
    Distribute an interval series into per-hour amounts.

    Args:
        values: IntervalEntry models or raw NWS dicts with keys
            ``validTime`` ("<start>/<duration>") and ``value`` (mm or None).

    Returns:
        dict mapping hour-start timestamp (ms) to amount for that hour.
        Missing input yields an empty dict.
    """
    hourly: dict[int, float] = {}
    if not values:
        return hourly

    for raw in values:
        try:
            entry = raw if isinstance(raw, IntervalEntry) else IntervalEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed interval %r: %s", raw, e.errors()[0]["msg"])
            continue

        iso_start, _, duration = entry.valid_time.partition("/")
        try:
            start = dtparse.isoparse(iso_start)
        except ValueError:
            logger.warning("Skipping interval with bad start time %r", entry.valid_time)
            continue

        hours = parse_duration_hours(duration)
        per_hour = (entry.value or 0.0) / hours
        first = hour_key(start)

        for h in range(hours):
            key = first + h * MS_PER_HOUR
            hourly[key] = hourly.get(key, 0.0) + per_hour

    return hourly
