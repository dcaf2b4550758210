"""
API routes for forecast aggregation and the resort comparison table.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from skiforecast.api.deps import get_nws_client, get_resorts
from skiforecast.config import UnitSystem
from skiforecast.engine.aggregator import transform_forecast
from skiforecast.engine.interval_distributor import distribute_time_series
from skiforecast.engine.merge import merge_quantities
from skiforecast.engine.metrics import get_metrics
from skiforecast.engine.nws_client import NWSClient
from skiforecast.engine.report_generator import generate_report
from skiforecast.engine.table_assembly import build_comparison_table
from skiforecast.models.forecast import ForecastGrid, TransformInput
from skiforecast.models.resort import Resort
from skiforecast.models.table import ComparisonTable

router = APIRouter(prefix="/api/v1", tags=["forecast"])


@router.post("/forecast/transform", response_model=ForecastGrid)
async def transform(data: TransformInput) -> ForecastGrid:
    """
    Aggregate raw hourly periods and interval series into the 30-slot grid.

    Pure transform: nothing is fetched or cached.
    """
    try:
        records = merge_quantities(
            data.periods,
            distribute_time_series(data.snowfall),
            distribute_time_series(data.precipitation),
        )
        return transform_forecast(records, get_metrics(data.unit_system), tz=data.time_zone)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Aggregation error: {str(e)}")


@router.get("/forecast", response_model=ComparisonTable)
async def get_forecast(
    unit_system: UnitSystem = Query(UnitSystem.IMPERIAL),
    client: NWSClient = Depends(get_nws_client),
    resorts: list[Resort] = Depends(get_resorts),
) -> ComparisonTable:
    """Fetch every resort (cached) and return the combined comparison table."""
    forecasts = await client.fetch_all_forecasts(resorts)
    try:
        return build_comparison_table(forecasts, unit_system)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Table assembly error: {str(e)}")


@router.get("/forecast/report")
async def get_forecast_report(
    unit_system: UnitSystem = Query(UnitSystem.IMPERIAL),
    client: NWSClient = Depends(get_nws_client),
    resorts: list[Resort] = Depends(get_resorts),
) -> Response:
    """The comparison table as a downloadable PDF."""
    forecasts = await client.fetch_all_forecasts(resorts)
    try:
        table = build_comparison_table(forecasts, unit_system)
        pdf_bytes = bytes(generate_report(table))
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'attachment; filename="ski-forecast.pdf"',
        },
    )
