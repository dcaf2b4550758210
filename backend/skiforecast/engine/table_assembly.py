"""
Assemble per-resort forecast grids into one comparison table.

Columns are the 30 time slots (grouped by day for the header), and each
metric gets a section with one row per resort. Cells carry the formatted
text, the raw aggregate and a CSS class for color coding. Classes are
computed from the stored imperial aggregates, so toggling units never
changes cell colors.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from skiforecast.config import UnitSystem, PLACEHOLDER, SLOTS_PER_DAY
from skiforecast.engine.aggregator import slot_anchor, transform_forecast
from skiforecast.engine.metrics import MetricDefinition, get_metrics
from skiforecast.models.forecast import ForecastGrid, TimeSlot, WindValue
from skiforecast.models.resort import ResortForecast
from skiforecast.models.table import (
    ComparisonTable,
    DayGroup,
    MetricSection,
    ResortError,
    ResortRow,
    SlotColumn,
    TableCell,
)

logger = logging.getLogger(__name__)


# --- Cell styling ---

def temperature_class(temp_f: Optional[float]) -> Optional[str]:
    if temp_f is None:
        return None
    if temp_f <= 20:
        return "temp-freezing"
    if temp_f <= 32:
        return "temp-cold"
    if temp_f <= 45:
        return "temp-cool"
    return "temp-mild"


def wind_class(speed_mph: Optional[float]) -> Optional[str]:
    if speed_mph is None:
        return None
    if speed_mph >= 40:
        return "wind-extreme"
    if speed_mph >= 25:
        return "wind-high"
    if speed_mph >= 15:
        return "wind-moderate"
    return "wind-light"


def conditions_class(conditions: Optional[str]) -> Optional[str]:
    if not conditions:
        return None
    lower = conditions.lower()
    if "snow" in lower:
        return "condition-snow"
    if "rain" in lower:
        return "condition-rain"
    if "cloud" in lower:
        return "condition-cloudy"
    if "sunny" in lower or "clear" in lower:
        return "condition-sunny"
    return None


def cell_class(metric_id: str, value: Any) -> Optional[str]:
    """CSS class for a cell, or None when the metric is not color coded."""
    if metric_id == "temperature":
        return temperature_class(value)
    if metric_id == "wind":
        if isinstance(value, WindValue):
            return wind_class(value.speed)
        if isinstance(value, dict):
            return wind_class(value.get("speed"))
        return None
    if metric_id == "conditions":
        return conditions_class(value if isinstance(value, str) else None)
    return None


# --- Layout ---

def is_day_start(index: int) -> bool:
    return index > 0 and index % SLOTS_PER_DAY == 0


def shared_start(forecasts: list[ResortForecast]) -> Optional[datetime]:
    """Earliest slot-0 start across resorts, used as the common column timeline."""
    anchors = [slot_anchor(f.periods, f.time_zone) for f in forecasts if f.periods]
    aware = [a for a in anchors if a.tzinfo is not None]
    candidates = aware or anchors
    return min(candidates) if candidates else None


def build_columns(slots: list[TimeSlot]) -> list[SlotColumn]:
    return [
        SlotColumn(
            start_time=slot.start_time,
            label=slot.label,
            time_label=slot.time_label,
            day_label=slot.day_label,
            day_start=is_day_start(i),
        )
        for i, slot in enumerate(slots)
    ]


def build_day_groups(slots: list[TimeSlot]) -> list[DayGroup]:
    """Group consecutive slots sharing a day label, in slot order."""
    groups: list[DayGroup] = []
    for slot in slots:
        if groups and groups[-1].day_label == slot.day_label:
            groups[-1].span += 1
        else:
            groups.append(DayGroup(day_label=slot.day_label, span=1))
    return groups


def build_resort_row(
    forecast: ResortForecast,
    grid: ForecastGrid,
    metric: MetricDefinition,
    n_columns: int = 0,
) -> ResortRow:
    """One resort's cells for a metric, padded with placeholders to n_columns."""
    cells = [
        TableCell(
            text=v.formatted_value,
            value=v.value,
            css_class=cell_class(metric.id, v.value),
            day_start=is_day_start(i),
        )
        for i, v in enumerate(grid.metric_data.get(metric.id, []))
    ]
    for i in range(len(cells), n_columns):
        cells.append(TableCell(text=PLACEHOLDER, day_start=is_day_start(i)))
    return ResortRow(
        resort_id=forecast.resort.id,
        resort_name=forecast.resort.name,
        forecast_url=forecast.resort.forecast_url,
        cells=cells,
    )


def build_comparison_table(
    forecasts: list[ResortForecast],
    unit_system: UnitSystem = UnitSystem.IMPERIAL,
    metrics: Optional[list[MetricDefinition]] = None,
) -> ComparisonTable:
    """
    Aggregate every successful resort forecast and lay out the combined table.

    Args:
        forecasts: Fetch results; those with ``error`` set are listed in
            ``errors`` and contribute no rows.
        unit_system: Display units for formatted cell text.
        metrics: Metric definitions; defaults to get_metrics(unit_system).
            When given, their unit system labels the table.

    Returns:
        ComparisonTable. Every resort is slotted from the earliest slot-0
        start among them, so cell i of each row covers column i's window.
    """
    if metrics is None:
        metrics = get_metrics(unit_system)
    elif metrics:
        unit_system = metrics[0].unit_system

    errors: list[ResortError] = []
    loaded: list[ResortForecast] = []
    for forecast in forecasts:
        if forecast.error:
            errors.append(ResortError(
                resort_id=forecast.resort.id,
                resort_name=forecast.resort.name,
                message=forecast.error,
            ))
        else:
            loaded.append(forecast)

    start = shared_start(loaded)
    grids = [
        (forecast, transform_forecast(forecast.periods, metrics, tz=forecast.time_zone, start=start))
        for forecast in loaded
    ]

    slots = next((grid.slots for _, grid in grids if grid.slots), [])
    sections = [
        MetricSection(
            metric_id=metric.id,
            label=metric.label,
            unit=metric.unit,
            rows=[
                build_resort_row(forecast, grid, metric, len(slots))
                for forecast, grid in grids
            ],
        )
        for metric in metrics
    ]

    logger.debug("Built comparison table: %d resorts, %d errors", len(grids), len(errors))
    return ComparisonTable(
        unit_system=unit_system,
        columns=build_columns(slots),
        day_groups=build_day_groups(slots),
        sections=sections,
        errors=errors,
    )
