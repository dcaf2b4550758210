"""
Metric registry for the forecast table.

Each metric bundles three rules: how to extract a raw value from an hourly
record, how values in one slot are combined (``average`` or ``sum``; text and
wind directions use the mode), and how an aggregate is rendered for the
selected unit system.

Raw values and aggregates are always kept in the forecast's native units
(°F, mph, ft, mm). Conversions happen only when formatting, so one aggregated
grid can be rendered in either unit system.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from skiforecast.config import (
    UnitSystem,
    PLACEHOLDER,
    MPH_TO_KMH,
    FT_TO_M,
    MM_PER_INCH,
    MM_PER_CM,
    SNOW_LEVEL_BASE_FT,
    SNOW_LEVEL_FT_PER_DEG_F,
    SNOW_LEVEL_MAX_FT,
    FREEZING_F,
    METRIC_UNITS,
)
from skiforecast.models.forecast import HourlyRecord, WindValue

AGGREGATE_AVERAGE = "average"
AGGREGATE_SUM = "sum"

_DIGITS_RE = re.compile(r"(\d+)")

# Keyword → icon, most specific first. Each entry matches if any keyword
# (or all keywords, for tuples) is found in the lowercased text.
CONDITION_ICONS: list[tuple[list, str]] = [
    (["thunder"], "⛈️"),
    (["blizzard"], "🌨️"),
    ([("snow", "rain")], "🌨️🌧️"),
    (["freezing rain", "sleet"], "🌧️❄️"),
    (["snow"], "❄️"),
    (["rain", "showers"], "🌧️"),
    (["fog", "mist"], "🌫️"),
    (["partly cloudy", "partly sunny"], "⛅"),
    (["mostly cloudy"], "🌥️"),
    (["cloud", "overcast"], "☁️"),
    (["sunny", "clear"], "☀️"),
    (["wind"], "💨"),
]


@dataclass(frozen=True)
class MetricDefinition:
    """Extraction / aggregation / formatting rules for one table row."""
    id: str
    label: str
    unit: str
    extract: Callable[[HourlyRecord], Any]
    format: Callable[[Any], str]
    aggregate: str = AGGREGATE_AVERAGE
    unit_system: UnitSystem = UnitSystem.IMPERIAL


# --- Unit conversion helpers ---

def f_to_c(f: Optional[float]) -> Optional[float]:
    if f is None:
        return None
    return (f - 32.0) * 5.0 / 9.0


def mph_to_kmh(mph: Optional[float]) -> Optional[float]:
    if mph is None:
        return None
    return mph * MPH_TO_KMH


def ft_to_m(ft: Optional[float]) -> Optional[float]:
    if ft is None:
        return None
    return ft * FT_TO_M


def mm_to_in(mm: Optional[float]) -> Optional[float]:
    if mm is None:
        return None
    return mm / MM_PER_INCH


def mm_to_cm(mm: Optional[float]) -> Optional[float]:
    if mm is None:
        return None
    return mm / MM_PER_CM


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 → 3, -2.5 → -2)."""
    return math.floor(value + 0.5)


# --- Derived values ---

def estimate_snow_level(temperature_f: Optional[float]) -> Optional[float]:
    """
    Rough snow level (feet) from surface temperature.

    At or below freezing snow reaches all elevations (0 ft). Above freezing the
    level starts at 5,000 ft and rises 200 ft per °F, capped at 10,000 ft.
    """
    if temperature_f is None:
        return None
    if temperature_f <= FREEZING_F:
        return 0.0
    level = SNOW_LEVEL_BASE_FT + (temperature_f - FREEZING_F) * SNOW_LEVEL_FT_PER_DEG_F
    return max(0.0, min(SNOW_LEVEL_MAX_FT, level))


def condition_icon(text: Optional[str]) -> str:
    """Map a short forecast ("Chance Snow Showers") to an icon, else echo the text."""
    if not text:
        return PLACEHOLDER
    lower = text.lower()
    for keywords, icon in CONDITION_ICONS:
        for kw in keywords:
            if isinstance(kw, tuple):
                if all(part in lower for part in kw):
                    return icon
            elif kw in lower:
                return icon
    return text


def parse_wind_speed(text: Optional[str]) -> Optional[int]:
    """First run of digits in a wind speed string ("10 to 15 mph" → 10)."""
    if not text:
        return None
    match = _DIGITS_RE.search(text)
    return int(match.group(1)) if match else None


# --- Extraction rules ---

def _extract_temperature(record: HourlyRecord) -> Optional[float]:
    return record.temperature


def _extract_wind(record: HourlyRecord) -> WindValue:
    return WindValue(
        speed=parse_wind_speed(record.wind_speed),
        direction=record.wind_direction or None,
    )


def _extract_precip_chance(record: HourlyRecord) -> Optional[float]:
    return record.probability_of_precipitation


def _extract_conditions(record: HourlyRecord) -> Optional[str]:
    return record.short_forecast


def _extract_snow_level(record: HourlyRecord) -> Optional[float]:
    return estimate_snow_level(record.temperature)


def _extract_snowfall(record: HourlyRecord) -> float:
    return record.snowfall_amount


def _extract_rain(record: HourlyRecord) -> float:
    return record.precip_amount


def _wind_parts(value: Any) -> tuple[Optional[float], Optional[str]]:
    if isinstance(value, WindValue):
        return value.speed, value.direction
    if isinstance(value, dict):
        return value.get("speed"), value.get("direction")
    return None, None


def get_metrics(unit_system: UnitSystem = UnitSystem.IMPERIAL) -> list[MetricDefinition]:
    """
    Build the ordered metric definitions for a unit system.

    Args:
        unit_system: imperial or metric display units.

    Returns:
        List of MetricDefinition in table row order.
    """
    unit_system = UnitSystem(unit_system)
    is_metric = unit_system == UnitSystem.METRIC
    units = METRIC_UNITS[unit_system.value]

    def format_temperature(value: Optional[float]) -> str:
        if value is None:
            return PLACEHOLDER
        temp = f_to_c(value) if is_metric else value
        return f"{round_half_up(temp)}°"

    def format_wind(value: Any) -> str:
        speed, direction = _wind_parts(value)
        if speed is None:
            return PLACEHOLDER
        speed = mph_to_kmh(speed) if is_metric else speed
        if direction:
            return f"{direction} {round_half_up(speed)}"
        return f"{round_half_up(speed)}"

    def format_percent(value: Optional[float]) -> str:
        if value is None:
            return PLACEHOLDER
        return f"{round_half_up(value)}%"

    def format_conditions(value: Any) -> str:
        if value is None:
            return PLACEHOLDER
        return condition_icon(str(value))

    def format_snow_level(value: Optional[float]) -> str:
        if value is None:
            return PLACEHOLDER
        level = ft_to_m(value) if is_metric else value
        return f"{round_half_up(level):,}"

    def format_snowfall(value: Optional[float]) -> str:
        if value is None:
            return PLACEHOLDER
        amount = mm_to_cm(value) if is_metric else mm_to_in(value)
        return f"{amount:.1f}"

    def format_rain(value: Optional[float]) -> str:
        if value is None:
            return PLACEHOLDER
        if is_metric:
            return f"{value:.1f}"
        return f"{mm_to_in(value):.2f}"

    def label(name: str, metric_id: str) -> str:
        return f"{name} ({units[metric_id]})" if units[metric_id] else name

    return [
        MetricDefinition(
            id="temperature",
            label="Temperature (C)" if is_metric else "Temperature (F)",
            unit=units["temperature"],
            extract=_extract_temperature,
            format=format_temperature,
            unit_system=unit_system,
        ),
        MetricDefinition(
            id="wind",
            label=label("Wind", "wind"),
            unit=units["wind"],
            extract=_extract_wind,
            format=format_wind,
            unit_system=unit_system,
        ),
        MetricDefinition(
            id="precipitation-chance",
            label="Precip Chance",
            unit=units["precipitation-chance"],
            extract=_extract_precip_chance,
            format=format_percent,
            unit_system=unit_system,
        ),
        MetricDefinition(
            id="conditions",
            label="Conditions",
            unit=units["conditions"],
            extract=_extract_conditions,
            format=format_conditions,
            unit_system=unit_system,
        ),
        MetricDefinition(
            id="snow-level",
            label=label("Snow Level", "snow-level"),
            unit=units["snow-level"],
            extract=_extract_snow_level,
            format=format_snow_level,
            unit_system=unit_system,
        ),
        MetricDefinition(
            id="snow-amount",
            label=label("Snow", "snow-amount"),
            unit=units["snow-amount"],
            extract=_extract_snowfall,
            format=format_snowfall,
            aggregate=AGGREGATE_SUM,
            unit_system=unit_system,
        ),
        MetricDefinition(
            id="rain-amount",
            label=label("Rain", "rain-amount"),
            unit=units["rain-amount"],
            extract=_extract_rain,
            format=format_rain,
            aggregate=AGGREGATE_SUM,
            unit_system=unit_system,
        ),
    ]
