"""Attendance record model."""

import enum
from datetime import date

from sqlalchemy import BigInteger, Date, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edurank.core.database import Base
from edurank.models.base import IDMixin, TimestampMixin


class AttendanceStatus(str, enum.Enum):
    """Attendance status enumeration."""

    PRESENT = "P"
    ABSENT = "A"
    LEAVE = "L"

    @classmethod
    def from_string(cls, value: str) -> "AttendanceStatus":
        """Convert string to AttendanceStatus, handling common variations."""
        value = value.strip().upper()
        mapping = {
            "P": cls.PRESENT,
            "PRESENT": cls.PRESENT,
            "A": cls.ABSENT,
            "ABSENT": cls.ABSENT,
            "L": cls.LEAVE,
            "LEAVE": cls.LEAVE,
        }
        if value in mapping:
            return mapping[value]
        raise ValueError(f"Invalid attendance status: {value}")


class AttendanceRecord(Base, IDMixin, TimestampMixin):
    """One student's attendance on one date."""

    __tablename__ = "attendance_records"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(AttendanceStatus),
        nullable=False,
    )

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="attendance_records",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("student_id", "attendance_date", name="uq_attendance_student_date"),
    )

    def __repr__(self) -> str:
        return f"<AttendanceRecord(student_id={self.student_id}, date={self.attendance_date})>"
