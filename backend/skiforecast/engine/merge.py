"""
Merge per-hour snowfall and precipitation amounts into hourly records.
"""

from typing import Optional

from skiforecast.engine.interval_distributor import distribute_time_series, hour_key
from skiforecast.models.forecast import HourlyRecord


def merge_quantities(
    records: list[HourlyRecord],
    snow_map: dict[int, float],
    precip_map: dict[int, float],
) -> list[HourlyRecord]:
    """
    Join distributed amounts onto hourly records by exact hour timestamp.

    Returns fresh records; the inputs are left untouched. Hours not covered
    by a map get 0.
    """
    merged = []
    for record in records:
        key = hour_key(record.start_time)
        merged.append(record.model_copy(update={
            "snowfall_amount": snow_map.get(key, 0.0),
            "precip_amount": precip_map.get(key, 0.0),
        }))
    return merged


def merge_gridpoint_data(
    records: list[HourlyRecord],
    grid_properties: Optional[dict],
) -> list[HourlyRecord]:
    """Distribute snowfallAmount / quantitativePrecipitation from raw gridpoint
    properties and merge them into ``records``."""
    props = grid_properties or {}
    snow_map = distribute_time_series((props.get("snowfallAmount") or {}).get("values"))
    precip_map = distribute_time_series(
        (props.get("quantitativePrecipitation") or {}).get("values")
    )
    return merge_quantities(records, snow_map, precip_map)
