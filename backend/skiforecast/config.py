"""
Ski forecast configuration and constants.
"""

import os
from enum import Enum


class UnitSystem(str, Enum):
    IMPERIAL = "imperial"  # °F, mph, ft, in
    METRIC = "metric"  # °C, km/h, m, cm/mm


# Slot grid: 6 four-hour slots per day, 5 days shown
HOURS_PER_SLOT = 4
SLOTS_PER_DAY = 6
DAYS_TO_SHOW = 5
TOTAL_SLOTS = SLOTS_PER_DAY * DAYS_TO_SHOW

# Display placeholder for missing values
PLACEHOLDER = "—"

# Unit conversion factors
MPH_TO_KMH = 1.60934
FT_TO_M = 0.3048
MM_PER_INCH = 25.4
MM_PER_CM = 10.0

# Snow level estimate (feet): base at freezing + rise per °F above it
SNOW_LEVEL_BASE_FT = 5000.0
SNOW_LEVEL_FT_PER_DEG_F = 200.0
SNOW_LEVEL_MAX_FT = 10000.0
FREEZING_F = 32.0

# NWS API
NWS_BASE_URL = os.environ.get("SKIFORECAST_NWS_BASE_URL", "https://api.weather.gov")
USER_AGENT = os.environ.get(
    "SKIFORECAST_USER_AGENT", "WashingtonSkiWeather/1.0 (ski-weather-app)"
)
HTTP_TIMEOUT_SECONDS = float(os.environ.get("SKIFORECAST_HTTP_TIMEOUT", "20"))
HTTP_RETRIES = int(os.environ.get("SKIFORECAST_HTTP_RETRIES", "2"))
HTTP_RETRY_DELAY_SECONDS = 0.5

# Fetched forecasts are reused for 10 minutes
CACHE_TTL_SECONDS = float(os.environ.get("SKIFORECAST_CACHE_TTL_SECONDS", "600"))

# Monitored resorts. To add one, append {id, name, lat, lon}.
RESORTS: list[dict] = [
    {"id": "mt-baker", "name": "Mt. Baker", "lat": 48.8570, "lon": -121.6675},
    {"id": "stevens-pass", "name": "Stevens Pass", "lat": 47.7448, "lon": -121.0890},
    {"id": "snoqualmie-pass", "name": "Snoqualmie Pass", "lat": 47.4254, "lon": -121.4134},
    {"id": "crystal-mountain", "name": "Crystal Mountain", "lat": 46.9282, "lon": -121.5045},
    {"id": "white-pass", "name": "White Pass", "lat": 46.6371, "lon": -121.3914},
]

# Display units per unit system
METRIC_UNITS = {
    "imperial": {
        "temperature": "°F",
        "wind": "mph",
        "precipitation-chance": "%",
        "conditions": "",
        "snow-level": "ft",
        "snow-amount": "in",
        "rain-amount": "in",
    },
    "metric": {
        "temperature": "°C",
        "wind": "km/h",
        "precipitation-chance": "%",
        "conditions": "",
        "snow-level": "m",
        "snow-amount": "cm",
        "rain-amount": "mm",
    },
}
