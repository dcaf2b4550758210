"""
Shared FastAPI dependencies.
"""

from fastapi import Request

from skiforecast.config import RESORTS
from skiforecast.engine.cache import ForecastCache
from skiforecast.engine.nws_client import NWSClient
from skiforecast.models.resort import Resort


def get_nws_client(request: Request) -> NWSClient:
    """App-wide NWS client; its cache lives as long as the app."""
    client = getattr(request.app.state, "nws_client", None)
    if client is None:
        client = NWSClient(cache=ForecastCache())
        request.app.state.nws_client = client
    return client


def get_resorts() -> list[Resort]:
    return [Resort(**r) for r in RESORTS]
