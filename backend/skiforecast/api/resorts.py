"""
API routes for the monitored resorts and metric catalogue.
"""

from fastapi import APIRouter, Depends

from skiforecast.api.deps import get_resorts
from skiforecast.config import UnitSystem
from skiforecast.engine.metrics import get_metrics
from skiforecast.models.resort import Resort

router = APIRouter(prefix="/api/v1", tags=["resorts"])


@router.get("/resorts", response_model=list[Resort])
async def list_resorts(resorts: list[Resort] = Depends(get_resorts)) -> list[Resort]:
    return resorts


@router.get("/metrics")
async def list_metrics(unit_system: UnitSystem = UnitSystem.IMPERIAL) -> list[dict]:
    """Metric rows shown in the table, in display order."""
    return [
        {
            "id": m.id,
            "label": m.label,
            "unit": m.unit,
            "aggregate": m.aggregate,
        }
        for m in get_metrics(unit_system)
    ]
