"""Attendance register service."""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from edurank.core.exceptions import ValidationError
from edurank.core.subjects import ClassLevel
from edurank.models.attendance import AttendanceRecord, AttendanceStatus
from edurank.schemas.attendance import (
    AttendanceEntry,
    AttendanceRegisterResponse,
    AttendanceRegisterUpdate,
    AttendanceSummaryResponse,
    AttendanceSummaryRow,
)
from edurank.services.ranking import round_half_up
from edurank.services.student import StudentService

logger = logging.getLogger(__name__)


class AttendanceService:
    """Daily attendance registers per class."""

    def __init__(self, db: Session):
        self.db = db
        self.students = StudentService(db)

    def _records_for(self, student_ids: list[int], date_from: date, date_to: date) -> list[AttendanceRecord]:
        if not student_ids:
            return []
        return list(
            self.db.execute(
                select(AttendanceRecord).where(
                    AttendanceRecord.student_id.in_(student_ids),
                    AttendanceRecord.attendance_date >= date_from,
                    AttendanceRecord.attendance_date <= date_to,
                )
            ).scalars().all()
        )

    def get_register(self, class_level: ClassLevel, attendance_date: date) -> AttendanceRegisterResponse:
        """Register of a class for one date. Unsaved students default to present."""
        students = self.students.get_class_students(class_level)
        saved = {
            r.student_id: r.status
            for r in self._records_for([s.id for s in students], attendance_date, attendance_date)
        }
        return AttendanceRegisterResponse(
            class_level=class_level.value,
            attendance_date=attendance_date,
            is_saved=bool(saved),
            entries=[
                AttendanceEntry(
                    student_id=s.id,
                    roll_no=s.roll_no,
                    name=s.name,
                    status=saved.get(s.id, AttendanceStatus.PRESENT),
                )
                for s in students
            ],
        )

    def save_register(self, request: AttendanceRegisterUpdate) -> AttendanceRegisterResponse:
        """Create or overwrite the register of a class for one date."""
        students = {s.id: s for s in self.students.get_class_students(request.class_level)}
        unknown = [e.student_id for e in request.entries if e.student_id not in students]
        if unknown:
            raise ValidationError(
                f"Students not in class {request.class_level.value}",
                details={"student_ids": unknown},
            )

        existing = {
            r.student_id: r
            for r in self._records_for(list(students), request.attendance_date, request.attendance_date)
        }
        for entry in request.entries:
            record = existing.get(entry.student_id)
            if record:
                record.status = entry.status
            else:
                self.db.add(
                    AttendanceRecord(
                        student_id=entry.student_id,
                        attendance_date=request.attendance_date,
                        status=entry.status,
                    )
                )

        self.db.flush()
        logger.info(
            "Saved attendance for class %s on %s (%d entries)",
            request.class_level.value, request.attendance_date, len(request.entries),
        )
        return self.get_register(request.class_level, request.attendance_date)

    def get_summary(
        self,
        class_level: ClassLevel,
        date_from: date,
        date_to: date,
    ) -> AttendanceSummaryResponse:
        """Present, absent and leave counts per student over a date range."""
        if date_from > date_to:
            raise ValidationError("date_from must not be after date_to")

        students = self.students.get_class_students(class_level)
        counts = {s.id: {status: 0 for status in AttendanceStatus} for s in students}
        for record in self._records_for(list(counts), date_from, date_to):
            counts[record.student_id][record.status] += 1

        rows = []
        for s in students:
            c = counts[s.id]
            total_days = sum(c.values())
            rows.append(
                AttendanceSummaryRow(
                    student_id=s.id,
                    roll_no=s.roll_no,
                    name=s.name,
                    present_count=c[AttendanceStatus.PRESENT],
                    absent_count=c[AttendanceStatus.ABSENT],
                    leave_count=c[AttendanceStatus.LEAVE],
                    total_days=total_days,
                    attendance_percentage=(
                        round_half_up(c[AttendanceStatus.PRESENT] / total_days * 100, 1)
                        if total_days
                        else 0.0
                    ),
                )
            )

        return AttendanceSummaryResponse(
            class_level=class_level.value,
            date_from=date_from,
            date_to=date_to,
            students=rows,
        )
