"""
Pydantic models for monitored resorts and their fetched forecasts.
"""

from typing import Optional

from pydantic import BaseModel, Field

from skiforecast.models.forecast import HourlyRecord


class Resort(BaseModel):
    id: str
    name: str
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    @property
    def forecast_url(self) -> str:
        return f"https://forecast.weather.gov/MapClick.php?lat={self.lat}&lon={self.lon}"


class GridPoint(BaseModel):
    """NWS forecast office grid cell covering a coordinate."""
    grid_id: str
    grid_x: int
    grid_y: int
    time_zone: Optional[str] = None


class ResortForecast(BaseModel):
    """Outcome of fetching one resort. ``error`` is set when the fetch failed."""
    resort: Resort
    periods: list[HourlyRecord] = Field(default_factory=list)
    time_zone: Optional[str] = None
    error: Optional[str] = None
