"""
Tests for merging distributed snowfall/precipitation amounts into hourly records.
"""

from datetime import datetime, timedelta, timezone

import pytest

from skiforecast.engine.interval_distributor import MS_PER_HOUR, hour_key
from skiforecast.engine.merge import merge_gridpoint_data, merge_quantities
from skiforecast.models.forecast import HourlyRecord

PST = timezone(timedelta(hours=-8))


def _records(n: int = 3) -> list[HourlyRecord]:
    start = datetime(2024, 1, 15, 0, 0, tzinfo=PST)
    return [
        HourlyRecord(start_time=start + timedelta(hours=i), temperature=30 + i)
        for i in range(n)
    ]


class TestMergeQuantities:
    def test_values_joined_by_hour(self):
        records = _records()
        k0 = hour_key(records[0].start_time)
        snow = {k0: 2.0, k0 + MS_PER_HOUR: 1.5}
        precip = {k0 + 2 * MS_PER_HOUR: 0.8}

        merged = merge_quantities(records, snow, precip)

        assert [r.snowfall_amount for r in merged] == [2.0, 1.5, 0.0]
        assert [r.precip_amount for r in merged] == [0.0, 0.0, 0.8]

    def test_other_fields_kept(self):
        merged = merge_quantities(_records(), {}, {})
        assert [r.temperature for r in merged] == [30, 31, 32]

    def test_inputs_not_mutated(self):
        records = _records()
        k0 = hour_key(records[0].start_time)
        merge_quantities(records, {k0: 5.0}, {k0: 5.0})
        assert records[0].snowfall_amount == 0.0
        assert records[0].precip_amount == 0.0

    def test_empty_records(self):
        assert merge_quantities([], {1: 1.0}, {}) == []


class TestMergeGridpointData:
    def test_from_raw_properties(self):
        records = _records(4)
        # 08:00Z == 00:00 PST
        props = {
            "snowfallAmount": {
                "uom": "wmoUnit:mm",
                "values": [{"validTime": "2024-01-15T08:00:00+00:00/PT2H", "value": 10}],
            },
            "quantitativePrecipitation": {
                "uom": "wmoUnit:mm",
                "values": [{"validTime": "2024-01-15T10:00:00+00:00/PT2H", "value": 3}],
            },
        }
        merged = merge_gridpoint_data(records, props)

        assert [r.snowfall_amount for r in merged] == pytest.approx([5.0, 5.0, 0.0, 0.0])
        assert [r.precip_amount for r in merged] == pytest.approx([0.0, 0.0, 1.5, 1.5])

    @pytest.mark.parametrize("props", [None, {}, {"snowfallAmount": None}])
    def test_missing_series_default_zero(self, props):
        merged = merge_gridpoint_data(_records(), props)
        assert all(r.snowfall_amount == 0.0 and r.precip_amount == 0.0 for r in merged)
