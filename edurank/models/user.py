"""Staff user and teaching assignment models."""

import enum
from datetime import datetime

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edurank.core.database import Base
from edurank.models.base import IDMixin, TimestampMixin


class Role(str, enum.Enum):
    """Roles a principal can hold. Students authenticate as STUDENT."""

    ADMIN = "ADMIN"
    CLASS_INCHARGE = "CLASS_INCHARGE"
    SUBJECT_TEACHER = "SUBJECT_TEACHER"
    STUDENT = "STUDENT"


STAFF_ROLES = (Role.ADMIN, Role.CLASS_INCHARGE, Role.SUBJECT_TEACHER)


class User(Base, IDMixin, TimestampMixin):
    """Staff user model."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False)
    # Primary class for class incharges
    assigned_class: Mapped[str | None] = mapped_column(String(10), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    teaching_assignments: Mapped[list["TeachingAssignment"]] = relationship(
        "TeachingAssignment",
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="TeachingAssignment.class_level",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"


class TeachingAssignment(Base, IDMixin):
    """Subjects a staff member teaches in one class."""

    __tablename__ = "teaching_assignments"

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    class_level: Mapped[str] = mapped_column(String(10), nullable=False)
    subjects: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="teaching_assignments")

    __table_args__ = (
        UniqueConstraint("user_id", "class_level", name="uq_teaching_assignment_user_class"),
    )

    def __repr__(self) -> str:
        return f"<TeachingAssignment(user_id={self.user_id}, class={self.class_level})>"
