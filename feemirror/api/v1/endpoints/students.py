from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from feemirror.api import deps
from feemirror.schemas.billing import StudentBalance
from feemirror.schemas.responses import SuccessResponse
from feemirror.services import billing_engine
from feemirror.services.snapshot_store import Snapshot

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[StudentBalance]])
async def list_students(
    search: Optional[str] = Query(None, description="Match on name or class"),
    class_group: Optional[str] = Query(None, alias="classGroup"),
    snapshot: Snapshot = Depends(deps.get_snapshot),
) -> Any:
    """
    Every student with a freshly computed balance.
    """
    cycle = billing_engine.coerce_billing_cycle(snapshot.billing_cycle)
    students = snapshot.students
    if class_group:
        students = [s for s in students if s.class_group == class_group]
    if search:
        needle = search.lower()
        students = [
            s for s in students
            if needle in s.full_name.lower() or needle in s.class_name.lower()
        ]

    balances = [
        billing_engine.build_student_balance(student, cycle, snapshot.settings)
        for student in students
    ]
    return SuccessResponse(data=balances)


@router.get("/{student_id}", response_model=SuccessResponse[StudentBalance])
async def get_student(
    student_id: str,
    snapshot: Snapshot = Depends(deps.get_snapshot),
) -> Any:
    for student in snapshot.students:
        if student.id == student_id:
            balance = billing_engine.build_student_balance(
                student, snapshot.billing_cycle, snapshot.settings
            )
            return SuccessResponse(data=balance)
    raise HTTPException(status_code=404, detail="Student not found")
