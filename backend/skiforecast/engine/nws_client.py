"""
NOAA / NWS api.weather.gov client.

For each resort: look up the forecast grid cell for its coordinates, then
fetch the hourly forecast and the raw gridpoint data (quantitative snowfall
and precipitation) concurrently, and merge the amounts into the hourly
records. Results are cached per coordinate in an injected ForecastCache.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from skiforecast.config import (
    NWS_BASE_URL,
    USER_AGENT,
    HTTP_TIMEOUT_SECONDS,
    HTTP_RETRIES,
    HTTP_RETRY_DELAY_SECONDS,
)
from skiforecast.engine.cache import ForecastCache, cache_key
from skiforecast.engine.merge import merge_gridpoint_data
from skiforecast.models.forecast import HourlyRecord
from skiforecast.models.resort import GridPoint, Resort, ResortForecast

logger = logging.getLogger(__name__)

HEADERS = {"User-Agent": USER_AGENT, "Accept": "application/geo+json"}


class NWSError(RuntimeError):
    """Raised when the NWS API returns an error or an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NWSClient:
    """Async NWS client with retries and a caller-owned forecast cache."""

    def __init__(
        self,
        cache: Optional[ForecastCache] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = NWS_BASE_URL,
        retries: int = HTTP_RETRIES,
        retry_delay: float = HTTP_RETRY_DELAY_SECONDS,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.cache = cache if cache is not None else ForecastCache()
        self.base_url = base_url.rstrip("/")
        self.retries = retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "NWSClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, headers=HEADERS)
        return self._client

    async def _get_json(self, url: str) -> dict:
        """GET a JSON document, retrying transport errors and 5xx responses."""
        last_err: Optional[Exception] = None
        for attempt in range(self.retries + 1):
            try:
                resp = await self._http().get(url, headers=HEADERS)
            except httpx.TransportError as e:
                last_err = NWSError(f"Request to {url} failed: {e}")
            else:
                if resp.status_code < 400:
                    return resp.json()
                last_err = NWSError(
                    f"{url} returned {resp.status_code} {resp.reason_phrase}",
                    status_code=resp.status_code,
                )
                # Client errors won't fix themselves
                if resp.status_code < 500:
                    raise last_err
            if attempt < self.retries:
                logger.warning("Retrying %s (attempt %d): %s", url, attempt + 1, last_err)
                await asyncio.sleep(self.retry_delay * (attempt + 1))
        raise last_err

    async def fetch_grid_point(self, lat: float, lon: float) -> GridPoint:
        data = await self._get_json(f"{self.base_url}/points/{lat:.4f},{lon:.4f}")
        props = data.get("properties") or {}
        try:
            return GridPoint(
                grid_id=props["gridId"],
                grid_x=props["gridX"],
                grid_y=props["gridY"],
                time_zone=props.get("timeZone"),
            )
        except KeyError as e:
            raise NWSError(f"Grid point response missing {e}") from e

    def _gridpoint_url(self, point: GridPoint) -> str:
        return f"{self.base_url}/gridpoints/{point.grid_id}/{point.grid_x},{point.grid_y}"

    async def fetch_hourly_forecast(self, point: GridPoint) -> list[dict]:
        data = await self._get_json(f"{self._gridpoint_url(point)}/forecast/hourly")
        return (data.get("properties") or {}).get("periods") or []

    async def fetch_gridpoint_data(self, point: GridPoint) -> dict[str, Any]:
        data = await self._get_json(self._gridpoint_url(point))
        return data.get("properties") or {}

    async def fetch_resort_forecast(self, resort: Resort) -> ResortForecast:
        """
        Fetch, merge and cache one resort's hourly forecast.

        Failures are logged and reported in ``ResortForecast.error`` with no
        periods, never raised.
        """
        key = cache_key(resort.lat, resort.lon)
        cached = self.cache.get(key)
        if cached is not None:
            return ResortForecast(resort=resort, **cached)

        try:
            point = await self.fetch_grid_point(resort.lat, resort.lon)
            periods, grid_props = await asyncio.gather(
                self.fetch_hourly_forecast(point),
                self.fetch_gridpoint_data(point),
            )
            records = [HourlyRecord.model_validate(p) for p in periods]
            merged = merge_gridpoint_data(records, grid_props)
        except (NWSError, httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching forecast for %s: %s", resort.name, e)
            return ResortForecast(resort=resort, error=str(e))

        entry = {"periods": merged, "time_zone": point.time_zone}
        self.cache.set(key, entry)
        logger.info("Fetched %d hourly periods for %s", len(merged), resort.name)
        return ResortForecast(resort=resort, **entry)

    async def fetch_all_forecasts(self, resorts: list[Resort]) -> list[ResortForecast]:
        """Fetch every resort concurrently; one failure never affects the others."""
        results = await asyncio.gather(
            *(self.fetch_resort_forecast(r) for r in resorts),
            return_exceptions=True,
        )
        forecasts = []
        for resort, result in zip(resorts, results):
            if isinstance(result, BaseException):
                logger.error("Unexpected failure for %s: %r", resort.name, result)
                forecasts.append(ResortForecast(
                    resort=resort, error=str(result) or "Unknown error",
                ))
            else:
                forecasts.append(result)
        return forecasts
