from typing import Any

from fastapi import APIRouter, Depends

from feemirror.api import deps
from feemirror.schemas.billing import OutstandingReport
from feemirror.schemas.finance import PrecalculatedOutstandingReport
from feemirror.schemas.responses import SuccessResponse
from feemirror.services.dashboard_service import DashboardService
from feemirror.services.snapshot_store import Snapshot

router = APIRouter()


@router.get("", response_model=SuccessResponse[OutstandingReport])
async def get_outstanding(snapshot: Snapshot = Depends(deps.get_snapshot)) -> Any:
    """
    Students who owe fees, recomputed from enrollment and payment history.
    """
    return SuccessResponse(data=DashboardService.build_outstanding_report(snapshot))


@router.get("/precalculated", response_model=SuccessResponse[PrecalculatedOutstandingReport])
async def get_precalculated_outstanding(snapshot: Snapshot = Depends(deps.get_snapshot)) -> Any:
    """
    The outstanding list exactly as the desktop app published it.
    """
    return SuccessResponse(data=DashboardService.build_precalculated_report(snapshot))
