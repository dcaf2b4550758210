"""
Pydantic models for the assembled multi-resort comparison table.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from skiforecast.config import UnitSystem


class SlotColumn(BaseModel):
    """Header cell for one 4-hour slot."""
    start_time: datetime
    label: str
    time_label: str
    day_label: str
    day_start: bool  # first slot of a new day (after the first)


class DayGroup(BaseModel):
    """Run of consecutive slot columns sharing a day label."""
    day_label: str
    span: int


class TableCell(BaseModel):
    text: str
    value: Any = None
    css_class: Optional[str] = None
    day_start: bool = False


class ResortRow(BaseModel):
    resort_id: str
    resort_name: str
    forecast_url: str
    cells: list[TableCell]


class MetricSection(BaseModel):
    """One metric, one row per resort."""
    metric_id: str
    label: str
    unit: str
    rows: list[ResortRow]


class ResortError(BaseModel):
    resort_id: str
    resort_name: str
    message: str


class ComparisonTable(BaseModel):
    """Full table consumed by the renderer."""
    unit_system: UnitSystem
    columns: list[SlotColumn]
    day_groups: list[DayGroup]
    sections: list[MetricSection]
    errors: list[ResortError]
