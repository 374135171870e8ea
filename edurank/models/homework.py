"""Homework task model."""

import enum
from datetime import date

from sqlalchemy import JSON, BigInteger, Date, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from edurank.core.database import Base
from edurank.models.base import IDMixin, TimestampMixin


class HomeworkStatus(str, enum.Enum):
    """Homework lifecycle."""

    ASSIGNED = "Assigned"
    CHECKING = "Checking"
    COMPLETED = "Completed"


class HomeworkTask(Base, IDMixin, TimestampMixin):
    """Homework set for a class in one subject."""

    __tablename__ = "homework_tasks"

    class_level: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(50), nullable=False)
    task_name: Mapped[str] = mapped_column(String(255), nullable=False)
    assigned_on: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[HomeworkStatus] = mapped_column(
        Enum(HomeworkStatus),
        default=HomeworkStatus.ASSIGNED,
        nullable=False,
    )
    # Roll numbers of students who have not submitted
    non_submitters: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<HomeworkTask(id={self.id}, class={self.class_level}, subject={self.subject})>"
