"""
Tests for the metric registry: conversions, derived snow level, condition
icons, extraction rules and unit-aware formatting.
"""

from datetime import datetime, timezone

import pytest

from skiforecast.config import UnitSystem, PLACEHOLDER
from skiforecast.engine.metrics import (
    AGGREGATE_AVERAGE,
    AGGREGATE_SUM,
    condition_icon,
    estimate_snow_level,
    f_to_c,
    ft_to_m,
    get_metrics,
    mm_to_cm,
    mm_to_in,
    mph_to_kmh,
    parse_wind_speed,
    round_half_up,
)
from skiforecast.models.forecast import HourlyRecord, WindValue


def _metric(metric_id: str, unit_system: UnitSystem = UnitSystem.IMPERIAL):
    return {m.id: m for m in get_metrics(unit_system)}[metric_id]


def _record(**fields) -> HourlyRecord:
    return HourlyRecord(start_time=datetime(2024, 1, 15, 6, tzinfo=timezone.utc), **fields)


class TestConversions:
    def test_f_to_c(self):
        assert f_to_c(32) == pytest.approx(0.0)
        assert f_to_c(212) == pytest.approx(100.0)
        assert f_to_c(-40) == pytest.approx(-40.0)

    def test_mph_to_kmh(self):
        assert mph_to_kmh(10) == pytest.approx(16.0934)

    def test_ft_to_m(self):
        assert ft_to_m(1000) == pytest.approx(304.8)

    def test_mm(self):
        assert mm_to_in(25.4) == pytest.approx(1.0)
        assert mm_to_cm(25.0) == pytest.approx(2.5)

    @pytest.mark.parametrize("fn", [f_to_c, mph_to_kmh, ft_to_m, mm_to_in, mm_to_cm])
    def test_none_passthrough(self, fn):
        assert fn(None) is None

    @pytest.mark.parametrize("value, expected", [
        (2.5, 3), (2.49, 2), (-2.5, -2), (-2.51, -3), (0.0, 0),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestSnowLevel:
    @pytest.mark.parametrize("temp, expected", [
        (32, 0.0),
        (20, 0.0),
        (33, 5200.0),
        (40, 6600.0),
        (57, 10000.0),
        (95, 10000.0),
    ])
    def test_estimate(self, temp, expected):
        assert estimate_snow_level(temp) == pytest.approx(expected)

    def test_missing_temperature(self):
        assert estimate_snow_level(None) is None


class TestConditionIcon:
    @pytest.mark.parametrize("text, icon", [
        ("Chance Showers And Thunderstorms", "⛈️"),
        ("Blizzard Warning", "🌨️"),
        ("Rain And Snow Likely", "🌨️🌧️"),
        ("Freezing Rain", "🌧️❄️"),
        ("Sleet", "🌧️❄️"),
        ("Light Snow", "❄️"),
        ("Chance Rain Showers", "🌧️"),
        ("Patchy Fog", "🌫️"),
        ("Partly Sunny", "⛅"),
        ("Mostly Cloudy", "🌥️"),
        ("Overcast", "☁️"),
        ("Mostly Clear", "☀️"),
        ("Breezy And Windy", "💨"),
    ])
    def test_priority(self, text, icon):
        assert condition_icon(text) == icon

    def test_unknown_text_returned(self):
        assert condition_icon("Haze") == "Haze"

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty(self, text):
        assert condition_icon(text) == PLACEHOLDER


class TestParseWindSpeed:
    @pytest.mark.parametrize("text, expected", [
        ("15 mph", 15),
        ("10 to 20 mph", 10),
        ("calm", None),
        (None, None),
    ])
    def test_parse(self, text, expected):
        assert parse_wind_speed(text) == expected


class TestRegistry:
    def test_metric_order(self):
        ids = [m.id for m in get_metrics()]
        assert ids == [
            "temperature", "wind", "precipitation-chance", "conditions",
            "snow-level", "snow-amount", "rain-amount",
        ]

    def test_aggregate_modes(self):
        modes = {m.id: m.aggregate for m in get_metrics()}
        assert modes["snow-amount"] == AGGREGATE_SUM
        assert modes["rain-amount"] == AGGREGATE_SUM
        assert modes["temperature"] == AGGREGATE_AVERAGE

    def test_labels_follow_units(self):
        imperial = {m.id: m.label for m in get_metrics(UnitSystem.IMPERIAL)}
        metric = {m.id: m.label for m in get_metrics(UnitSystem.METRIC)}
        assert imperial["temperature"] == "Temperature (F)"
        assert metric["temperature"] == "Temperature (C)"
        assert imperial["wind"] == "Wind (mph)"
        assert metric["wind"] == "Wind (km/h)"
        assert metric["snow-level"] == "Snow Level (m)"

    def test_accepts_string_unit_system(self):
        assert get_metrics("metric")[0].label == "Temperature (C)"


class TestExtraction:
    def test_wind(self):
        value = _metric("wind").extract(_record(windSpeed="10 to 15 mph", windDirection="NW"))
        assert value == WindValue(speed=10, direction="NW")

    def test_wind_missing(self):
        value = _metric("wind").extract(_record())
        assert value.speed is None and value.direction is None

    def test_precip_chance_unwrapped(self):
        record = HourlyRecord.model_validate({
            "startTime": "2024-01-15T06:00:00-08:00",
            "probabilityOfPrecipitation": {"unitCode": "wmoUnit:percent", "value": 40},
        })
        assert _metric("precipitation-chance").extract(record) == 40

    def test_snow_level_from_temperature(self):
        assert _metric("snow-level").extract(_record(temperature=40)) == pytest.approx(6600)
        assert _metric("snow-level").extract(_record()) is None

    def test_amounts(self):
        record = _record(snowfallAmount=2.5, precipAmount=1.0)
        assert _metric("snow-amount").extract(record) == 2.5
        assert _metric("rain-amount").extract(record) == 1.0


class TestFormatting:
    def test_temperature(self):
        assert _metric("temperature").format(33.0) == "33°"
        assert _metric("temperature", UnitSystem.METRIC).format(50.0) == "10°"
        assert _metric("temperature", UnitSystem.METRIC).format(33.0) == "1°"

    def test_wind(self):
        value = WindValue(speed=15, direction="NW")
        assert _metric("wind").format(value) == "NW 15"
        assert _metric("wind", UnitSystem.METRIC).format(value) == "NW 24"
        assert _metric("wind").format(WindValue(speed=7.5)) == "8"
        assert _metric("wind").format({"speed": 12, "direction": None}) == "12"

    def test_precip_chance(self):
        assert _metric("precipitation-chance").format(42.4) == "42%"
        assert _metric("precipitation-chance", UnitSystem.METRIC).format(42.5) == "43%"

    def test_conditions(self):
        assert _metric("conditions").format("Snow Showers Likely") == "❄️"

    def test_snow_level(self):
        assert _metric("snow-level").format(6600.0) == "6,600"
        assert _metric("snow-level", UnitSystem.METRIC).format(6600.0) == "2,012"
        assert _metric("snow-level").format(0.0) == "0"

    def test_snow_amount(self):
        assert _metric("snow-amount").format(25.4) == "1.0"
        assert _metric("snow-amount", UnitSystem.METRIC).format(25.4) == "2.5"

    def test_rain_amount(self):
        assert _metric("rain-amount").format(12.7) == "0.50"
        assert _metric("rain-amount", UnitSystem.METRIC).format(12.7) == "12.7"

    @pytest.mark.parametrize("unit_system", list(UnitSystem))
    def test_none_is_placeholder(self, unit_system):
        for metric in get_metrics(unit_system):
            assert metric.format(None) == PLACEHOLDER

    def test_wind_without_speed_is_placeholder(self):
        assert _metric("wind").format(WindValue(direction="N")) == PLACEHOLDER
