"""Attendance schemas."""

from datetime import date

from pydantic import Field, model_validator

from edurank.core.subjects import ClassLevel
from edurank.models.attendance import AttendanceStatus
from edurank.schemas.common import BaseSchema


class AttendanceEntry(BaseSchema):
    """One student's row in a daily register."""

    student_id: int
    roll_no: str
    name: str
    status: AttendanceStatus


class AttendanceRegisterResponse(BaseSchema):
    """Daily register of a class.

    When nothing has been saved for the date every student defaults to
    present and ``is_saved`` is false.
    """

    class_level: str
    attendance_date: date
    is_saved: bool
    entries: list[AttendanceEntry]


class AttendanceMark(BaseSchema):
    """Status submitted for one student."""

    student_id: int
    status: AttendanceStatus


class AttendanceRegisterUpdate(BaseSchema):
    """Save a daily register."""

    class_level: ClassLevel
    attendance_date: date
    entries: list[AttendanceMark] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_students(self) -> "AttendanceRegisterUpdate":
        ids = [e.student_id for e in self.entries]
        if len(ids) != len(set(ids)):
            raise ValueError("Each student may appear only once in a register")
        return self


class AttendanceSummaryRow(BaseSchema):
    """Attendance counts for one student over a date range."""

    student_id: int
    roll_no: str
    name: str
    present_count: int
    absent_count: int
    leave_count: int
    total_days: int
    attendance_percentage: float


class AttendanceSummaryResponse(BaseSchema):
    """Attendance summary of a class over a date range."""

    class_level: str
    date_from: date
    date_to: date
    students: list[AttendanceSummaryRow]
