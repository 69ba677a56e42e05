import csv
import io
from datetime import date
from typing import Dict, Iterable, List, Optional

from feemirror.schemas.staff import Staff, StaffAttendance, StaffLog

STAFF_ROLES = ["Teacher", "Admin", "Security", "Support Staff", "Driver"]

CSV_HEADERS = ["Date", "Staff Name", "Role", "Time In", "Time Out", "Duties", "Notes"]


class StaffService:

    @staticmethod
    def logs_for_day(logs: Iterable[StaffLog], day: date) -> List[StaffLog]:
        return [log for log in logs if log.date == day]

    @staticmethod
    def filter_logs(
        logs: Iterable[StaffLog],
        search: Optional[str] = None,
        role: Optional[str] = None,
        staff_id: Optional[str] = None,
    ) -> List[StaffLog]:
        """Case-insensitive search over name, duties and notes; "all" disables a filter."""
        result = list(logs)
        if search:
            needle = search.lower()
            result = [
                log for log in result
                if needle in log.staff_name.lower() or needle in log.duties.lower() or needle in log.notes.lower()
            ]
        if role and role != "all":
            result = [log for log in result if log.role == role]
        if staff_id and staff_id != "all":
            result = [log for log in result if log.staff_id == staff_id]
        return result

    @staticmethod
    def group_by_role(logs: Iterable[StaffLog]) -> Dict[str, List[StaffLog]]:
        logs = list(logs)
        return {role: [log for log in logs if log.role == role] for role in STAFF_ROLES}

    @staticmethod
    def attendance_for_day(
        staff: Iterable[Staff],
        logs: Iterable[StaffLog],
        day: date,
        search: Optional[str] = None,
        role: Optional[str] = None,
        staff_id: Optional[str] = None,
    ) -> StaffAttendance:
        """
        Attendance for one day.

        Active staff without a log that day are absent. Counts ignore the
        search filters; the returned logs honour them.
        """
        active = [member for member in staff if member.is_active]
        day_logs = StaffService.logs_for_day(logs, day)
        present_ids = {log.staff_id for log in day_logs}
        absent = [member for member in active if member.id not in present_ids]
        filtered = StaffService.filter_logs(day_logs, search=search, role=role, staff_id=staff_id)

        return StaffAttendance(
            day=day,
            total_staff=len(active),
            present_count=len(day_logs),
            absent_count=len(absent),
            logs=filtered,
            logs_by_role=StaffService.group_by_role(filtered),
            absent_staff=absent,
        )

    @staticmethod
    def export_logs_csv(logs: Iterable[StaffLog]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for log in logs:
            writer.writerow([
                log.date.isoformat() if log.date else "",
                log.staff_name,
                log.role,
                log.time_in,
                log.time_out,
                log.duties,
                log.notes,
            ])
        return buffer.getvalue()
