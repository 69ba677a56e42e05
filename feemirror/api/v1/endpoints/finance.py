from typing import Any

from fastapi import APIRouter, Depends

from feemirror.api import deps
from feemirror.schemas.finance import ExpenseSummary, ExtraBillingSummary
from feemirror.schemas.responses import SuccessResponse
from feemirror.services.dashboard_service import DashboardService
from feemirror.services.snapshot_store import Snapshot

router = APIRouter()


@router.get("/expenses", response_model=SuccessResponse[ExpenseSummary])
async def list_expenses(snapshot: Snapshot = Depends(deps.get_snapshot)) -> Any:
    """
    All expenses. Reversed expenses are listed but left out of the total.
    """
    return SuccessResponse(data=DashboardService.expense_summary(snapshot))


@router.get("/extra-billing", response_model=SuccessResponse[ExtraBillingSummary])
async def list_extra_billing(snapshot: Snapshot = Depends(deps.get_snapshot)) -> Any:
    return SuccessResponse(data=DashboardService.extra_billing_summary(snapshot))
