"""School configuration model."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from edurank.core.database import Base
from edurank.models.base import IDMixin, TimestampMixin


class SchoolConfig(Base, IDMixin, TimestampMixin):
    """Single-row school configuration written once at setup."""

    __tablename__ = "school_config"

    school_name: Mapped[str] = mapped_column(String(255), nullable=False)
    admin_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_setup: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<SchoolConfig(name={self.school_name}, is_setup={self.is_setup})>"
