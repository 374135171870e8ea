"""Student model."""

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edurank.core.database import Base
from edurank.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """Student record with marks keyed by exam period and subject."""

    __tablename__ = "students"

    roll_no: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    class_level: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    # {"final_hindi": 40, ...}; absent keys read as 0
    marks: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False, default=dict)
    manual_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    attendance_records: Mapped[list["AttendanceRecord"]] = relationship(
        "AttendanceRecord",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("class_level", "roll_no", name="uq_student_class_roll"),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, roll_no={self.roll_no}, class={self.class_level})>"
