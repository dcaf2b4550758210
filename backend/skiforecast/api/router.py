"""
Top-level API router that aggregates all sub-routers.
"""

from fastapi import APIRouter

from skiforecast.api.resorts import router as resorts_router
from skiforecast.api.forecast import router as forecast_router

router = APIRouter()
router.include_router(resorts_router)
router.include_router(forecast_router)
