from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from feemirror.api import deps
from feemirror.schemas.billing import FeeCollectionSummary
from feemirror.schemas.finance import DashboardSummary
from feemirror.schemas.responses import SuccessResponse
from feemirror.services.dashboard_service import DashboardService
from feemirror.services.snapshot_store import Snapshot

router = APIRouter()


@router.get("", response_model=SuccessResponse[DashboardSummary])
async def get_dashboard(
    summary: DashboardSummary = Depends(deps.get_dashboard_summary),
) -> Any:
    """
    Headline figures: students, expenses, extra billing, outstanding and
    this month's collections. Served from the debounced cache.
    """
    return SuccessResponse(data=summary)


@router.get("/fee-collections", response_model=SuccessResponse[FeeCollectionSummary])
async def get_fee_collections(
    as_of: Optional[date] = Query(None, description="Day whose calendar month is summarised"),
    snapshot: Snapshot = Depends(deps.get_snapshot),
) -> Any:
    """
    Tuition and transport collected in the current calendar month.
    """
    return SuccessResponse(data=DashboardService.fee_collection_summary(snapshot, today=as_of))
