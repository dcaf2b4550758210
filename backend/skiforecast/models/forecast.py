"""
Pydantic models for hourly forecast input and the aggregated slot grid.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skiforecast.config import UnitSystem


class HourlyRecord(BaseModel):
    """One hourly forecast period, as served by the NWS hourly forecast.

    Snowfall and precipitation amounts (mm) are filled in by the merge step
    and stay 0 for hours no interval data covers.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, allow_inf_nan=False)

    start_time: datetime = Field(..., alias="startTime")
    temperature: Optional[float] = None
    wind_speed: Optional[str] = Field(None, alias="windSpeed")
    wind_direction: Optional[str] = Field(None, alias="windDirection")
    probability_of_precipitation: Optional[float] = Field(
        None, alias="probabilityOfPrecipitation"
    )
    short_forecast: Optional[str] = Field(None, alias="shortForecast")
    snowfall_amount: float = Field(0.0, alias="snowfallAmount")
    precip_amount: float = Field(0.0, alias="precipAmount")

    @field_validator("probability_of_precipitation", mode="before")
    @classmethod
    def _unwrap_quantity(cls, value: Any) -> Any:
        # NWS wraps quantities as {"unitCode": ..., "value": ...}
        if isinstance(value, dict):
            return value.get("value")
        return value


class IntervalEntry(BaseModel):
    """A quantity spanning one or more hours, e.g. validTime "2024-01-15T06:00:00+00:00/PT6H"."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    valid_time: str = Field(..., alias="validTime")
    value: Optional[float] = None  # mm for the whole span


class WindValue(BaseModel):
    """Wind speed (mph) paired with compass direction text."""
    speed: Optional[float] = None
    direction: Optional[str] = None


class TimeSlot(BaseModel):
    """A fixed 4-hour window and the hourly records that fall inside it."""
    start_time: datetime
    label: str         # e.g. "Mon 8AM"
    time_label: str    # e.g. "8AM"
    day_label: str     # e.g. "Mon (1/7)"
    records: list[HourlyRecord] = Field(default_factory=list, exclude=True)


class AggregatedSlotValue(BaseModel):
    """Aggregated value for one metric in one slot.

    ``value`` keeps the canonical (imperial / mm) aggregate so the grid can be
    re-formatted for another unit system without re-aggregating.
    """
    label: str
    value: Any = None
    formatted_value: str


class ForecastGrid(BaseModel):
    """Slot descriptors plus per-metric aggregated values, in slot order."""
    unit_system: UnitSystem = UnitSystem.IMPERIAL
    slots: list[TimeSlot]
    metric_data: dict[str, list[AggregatedSlotValue]]


class TransformInput(BaseModel):
    """Raw inputs for a pure aggregation run."""
    periods: list[HourlyRecord] = Field(
        default_factory=list,
        description="Hourly forecast periods, ascending by start time",
    )
    snowfall: list[IntervalEntry] = Field(
        default_factory=list,
        description="snowfallAmount.values from the raw gridpoint data",
    )
    precipitation: list[IntervalEntry] = Field(
        default_factory=list,
        description="quantitativePrecipitation.values from the raw gridpoint data",
    )
    unit_system: UnitSystem = UnitSystem.IMPERIAL
    time_zone: Optional[str] = Field(
        None,
        description="IANA zone used to anchor slots, e.g. America/Los_Angeles",
    )
