"""
Slot aggregator: hourly records → fixed 4-hour slot grid.

Slot 0 starts at the first record's hour rounded down to a 4-hour boundary
(00, 04, 08, 12, 16, 20 local). Exactly TOTAL_SLOTS slots are always built
for non-empty input; slots without records aggregate to None.

Aggregation per slot and metric, after dropping None values:
    - wind values: mean speed, most common direction
    - all numbers: sum or mean, per the metric's aggregate mode
    - anything else (condition text): most common value
"""

import logging
import numbers
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import numpy as np

from skiforecast.config import UnitSystem, HOURS_PER_SLOT, TOTAL_SLOTS
from skiforecast.engine.metrics import AGGREGATE_SUM, MetricDefinition, get_metrics
from skiforecast.models.forecast import (
    AggregatedSlotValue,
    ForecastGrid,
    HourlyRecord,
    TimeSlot,
    WindValue,
)

logger = logging.getLogger(__name__)

SLOT_DURATION = timedelta(hours=HOURS_PER_SLOT)

_DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


# --- Slot labels ---

def _hour_12(dt: datetime) -> str:
    ampm = "PM" if dt.hour >= 12 else "AM"
    return f"{dt.hour % 12 or 12}{ampm}"


def format_slot_label(dt: datetime) -> str:
    """e.g. "Mon 8AM"."""
    return f"{_DAY_NAMES[dt.weekday()]} {_hour_12(dt)}"


def format_time_label(dt: datetime) -> str:
    """e.g. "8AM"."""
    return _hour_12(dt)


def format_day_label(dt: datetime) -> str:
    """e.g. "Mon (1/7)"."""
    return f"{_DAY_NAMES[dt.weekday()]} ({dt.month}/{dt.day})"


# --- Reductions ---

def get_mode(values: list[Any]) -> Any:
    """
    Most common non-None value; ties go to the value seen first.

    Compares by equality rather than hashing so dicts and models work too.
    """
    filtered = [v for v in values if v is not None]
    if not filtered:
        return None

    counts: list[list] = []  # [value, count] in first-seen order
    for v in filtered:
        for entry in counts:
            if entry[0] == v:
                entry[1] += 1
                break
        else:
            counts.append([v, 1])

    mode, max_count = counts[0]
    for value, count in counts[1:]:
        if count > max_count:
            mode, max_count = value, count
    return mode


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_wind(value: Any) -> bool:
    return isinstance(value, WindValue) or (isinstance(value, dict) and "speed" in value)


def _aggregate_wind(values: list[Any]) -> WindValue:
    speeds = []
    directions = []
    for v in values:
        if isinstance(v, WindValue):
            speed, direction = v.speed, v.direction
        else:
            speed, direction = v.get("speed"), v.get("direction")
        if speed is not None:
            speeds.append(speed)
        if direction is not None:
            directions.append(direction)

    return WindValue(
        speed=float(np.mean(speeds)) if speeds else None,
        direction=get_mode(directions),
    )


def aggregate_values(values: list[Any], aggregate_mode: Optional[str] = None) -> Any:
    """
    Reduce one slot's extracted values to a single aggregate.

    Args:
        values: Raw values extracted from the slot's records (may contain None).
        aggregate_mode: "sum" to add numbers instead of averaging them.

    Returns:
        WindValue, float, the modal value, or None when nothing is present.
    """
    filtered = [v for v in values if v is not None]
    if not filtered:
        return None

    if _is_wind(filtered[0]):
        return _aggregate_wind(filtered)

    if all(_is_number(v) for v in filtered):
        if aggregate_mode == AGGREGATE_SUM:
            return float(np.sum(filtered))
        return float(np.mean(filtered))

    return get_mode(values)


# --- Slot grouping ---

def _resolve_tz(tz: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    if tz is None or isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone %r, using record offsets", tz)
        return None


def _slot_start(anchor: datetime, index: int) -> datetime:
    if anchor.tzinfo is None:
        return anchor + index * SLOT_DURATION
    # Step in absolute time, then express in the anchor's zone
    utc = anchor.astimezone(timezone.utc) + index * SLOT_DURATION
    return utc.astimezone(anchor.tzinfo)


def slot_anchor(
    records: list[HourlyRecord],
    tz: Union[str, tzinfo, None] = None,
) -> Optional[datetime]:
    """Start of slot 0: the first record's hour floored to a 4-hour boundary."""
    if not records:
        return None

    first = records[0].start_time
    zone = _resolve_tz(tz)
    if zone is not None and first.tzinfo is not None:
        first = first.astimezone(zone)

    start_hour = (first.hour // HOURS_PER_SLOT) * HOURS_PER_SLOT
    return first.replace(hour=start_hour, minute=0, second=0, microsecond=0)


def group_into_slots(
    records: list[HourlyRecord],
    tz: Union[str, tzinfo, None] = None,
    start: Optional[datetime] = None,
) -> list[TimeSlot]:
    """
    Bucket hourly records into TOTAL_SLOTS consecutive 4-hour slots.

    Args:
        records: Hourly records, ascending by start time.
        tz: Optional zone (IANA name or tzinfo) for slot alignment and labels.
            Defaults to the first record's own UTC offset.
        start: Optional shared slot-0 start, used to line several resorts up
            on one timeline. Records before it are dropped.

    Returns:
        TOTAL_SLOTS TimeSlots, or an empty list when there are no records.
    """
    if not records:
        return []

    anchor = slot_anchor(records, tz)
    if start is not None:
        if (start.tzinfo is None) != (anchor.tzinfo is None):
            logger.warning("Ignoring slot start %s: naive/aware mismatch with records", start)
        elif start.tzinfo is not None:
            anchor = start.astimezone(anchor.tzinfo)
        else:
            anchor = start

    buckets: list[list[HourlyRecord]] = [[] for _ in range(TOTAL_SLOTS)]
    for record in records:
        index = (record.start_time - anchor) // SLOT_DURATION
        if 0 <= index < TOTAL_SLOTS:
            buckets[index].append(record)

    slots = []
    for i in range(TOTAL_SLOTS):
        begins = _slot_start(anchor, i)
        slots.append(TimeSlot(
            start_time=begins,
            label=format_slot_label(begins),
            time_label=format_time_label(begins),
            day_label=format_day_label(begins),
            records=buckets[i],
        ))
    return slots


# --- Pipeline ---

def extract_metric_values(
    slots: list[TimeSlot],
    metric: MetricDefinition,
) -> list[AggregatedSlotValue]:
    """Aggregate and format one metric across all slots."""
    results = []
    for slot in slots:
        values = [metric.extract(record) for record in slot.records]
        aggregated = aggregate_values(values, metric.aggregate)
        results.append(AggregatedSlotValue(
            label=slot.label,
            value=aggregated,
            formatted_value=metric.format(aggregated),
        ))
    return results


def transform_forecast(
    records: list[HourlyRecord],
    metrics: list[MetricDefinition],
    tz: Union[str, tzinfo, None] = None,
    start: Optional[datetime] = None,
) -> ForecastGrid:
    """
    Run slot grouping and per-metric aggregation over merged hourly records.

    Args:
        records: Hourly records with snowfall/precip amounts already merged.
        metrics: Metric definitions, normally get_metrics(unit_system). The
            grid's unit system is taken from them.
        tz: Optional zone for slot alignment and labels.
        start: Optional shared slot-0 start (see group_into_slots).

    Returns:
        ForecastGrid with slot descriptors and metric id → per-slot values.
    """
    unit_system = metrics[0].unit_system if metrics else UnitSystem.IMPERIAL
    slots = group_into_slots(records, tz, start)
    metric_data = {metric.id: extract_metric_values(slots, metric) for metric in metrics}

    logger.debug(
        "Aggregated %d records into %d slots for %d metrics",
        len(records), len(slots), len(metrics),
    )
    return ForecastGrid(unit_system=unit_system, slots=slots, metric_data=metric_data)


def reformat_forecast(grid: ForecastGrid, unit_system: UnitSystem) -> ForecastGrid:
    """
    Re-render formatted values for another unit system.

    Slot membership and raw aggregates are reused as-is; only the display
    strings are recomputed. Metrics unknown to the registry keep their text.
    """
    metrics = {m.id: m for m in get_metrics(unit_system)}
    metric_data = {}
    for metric_id, values in grid.metric_data.items():
        metric = metrics.get(metric_id)
        if metric is None:
            metric_data[metric_id] = list(values)
            continue
        metric_data[metric_id] = [
            AggregatedSlotValue(
                label=v.label,
                value=v.value,
                formatted_value=metric.format(v.value),
            )
            for v in values
        ]
    return ForecastGrid(unit_system=unit_system, slots=grid.slots, metric_data=metric_data)
