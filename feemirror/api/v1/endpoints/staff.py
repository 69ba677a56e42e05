from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from feemirror.api import deps
from feemirror.schemas.responses import SuccessResponse
from feemirror.schemas.staff import StaffAttendance
from feemirror.services.snapshot_store import Snapshot
from feemirror.services.staff_service import StaffService
from feemirror.utils.time import get_today

router = APIRouter()


@router.get("/attendance", response_model=SuccessResponse[StaffAttendance])
async def get_attendance(
    day: Optional[date] = Query(None, alias="date", description="Defaults to today"),
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    staff_id: Optional[str] = Query(None, alias="staffId"),
    snapshot: Snapshot = Depends(deps.get_snapshot),
) -> Any:
    """
    Who signed in on a day, grouped by role, and which active staff did not.
    """
    attendance = StaffService.attendance_for_day(
        snapshot.staff,
        snapshot.staff_logs,
        day or get_today(),
        search=search,
        role=role,
        staff_id=staff_id,
    )
    return SuccessResponse(data=attendance)


@router.get("/attendance.csv")
async def export_attendance(
    day: Optional[date] = Query(None, alias="date"),
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    staff_id: Optional[str] = Query(None, alias="staffId"),
    snapshot: Snapshot = Depends(deps.get_snapshot),
) -> Response:
    """
    The day's filtered logs as CSV.
    """
    day = day or get_today()
    logs = StaffService.filter_logs(
        StaffService.logs_for_day(snapshot.staff_logs, day),
        search=search,
        role=role,
        staff_id=staff_id,
    )
    return Response(
        content=StaffService.export_logs_csv(logs),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="staff-logs-{day.isoformat()}.csv"'},
    )
