from datetime import date
from typing import Dict, List

from pydantic import BaseModel

from feemirror.schemas.base import Flag, LenientDate, MirrorDocument, Text


class Staff(MirrorDocument):
    id: Text = ""
    name: Text = ""
    role: Text = ""
    contact: Text = ""
    email: Text = ""
    date_joined: LenientDate = None
    is_active: Flag = False


class StaffLog(MirrorDocument):
    id: Text = ""
    staff_id: Text = ""
    staff_name: Text = ""
    role: Text = ""
    date: LenientDate = None
    time_in: Text = ""
    time_out: Text = ""
    duties: Text = ""
    notes: Text = ""
    is_present: Flag = False


class StaffAttendance(BaseModel):
    """One day of staff attendance"""
    day: date
    total_staff: int
    present_count: int
    absent_count: int
    logs: List[StaffLog]
    logs_by_role: Dict[str, List[StaffLog]]
    absent_staff: List[Staff]
