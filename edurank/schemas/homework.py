"""Homework schemas."""

from datetime import date, datetime

from pydantic import Field

from edurank.core.subjects import ClassLevel
from edurank.models.homework import HomeworkStatus
from edurank.schemas.common import BaseSchema


class HomeworkCreate(BaseSchema):
    """Homework creation schema."""

    class_level: ClassLevel
    subject: str = Field(..., min_length=1, max_length=50)
    task_name: str = Field(..., min_length=1, max_length=255)
    assigned_on: date | None = None


class HomeworkUpdate(BaseSchema):
    """Homework progress update."""

    status: HomeworkStatus | None = None
    non_submitters: list[str] | None = None


class HomeworkResponse(BaseSchema):
    """Homework response schema."""

    id: int
    class_level: str
    subject: str
    task_name: str
    assigned_on: date
    status: HomeworkStatus
    non_submitters: list[str]
    created_by_id: int | None
    created_at: datetime
    updated_at: datetime
