"""Student schemas."""

from datetime import datetime

from pydantic import Field

from edurank.core.subjects import ClassLevel
from edurank.schemas.common import BaseSchema, PaginatedResponse
from edurank.schemas.results import MarksMap


class StudentBase(BaseSchema):
    """Base student schema."""

    roll_no: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)


class StudentCreate(StudentBase):
    """Student creation schema.

    Marks keys are checked against the class's subjects by the service,
    which also clamps each mark to the exam's max marks.
    """

    class_level: ClassLevel
    marks: MarksMap = {}
    manual_total: int | None = Field(None, ge=0)
    password: str | None = Field(None, min_length=4)


class StudentUpdate(BaseSchema):
    """Student update schema. Class level is fixed once created."""

    roll_no: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=255)
    marks: MarksMap | None = None
    manual_total: int | None = Field(None, ge=0)
    password: str | None = Field(None, min_length=4)


class StudentResponse(StudentBase):
    """Student response schema."""

    id: int
    class_level: str
    marks: dict[str, int]
    manual_total: int | None
    has_password: bool
    created_at: datetime
    updated_at: datetime


class StudentFilter(BaseSchema):
    """Student filter options."""

    class_level: ClassLevel | None = None
    search: str | None = None  # Search by name or roll number


class PaginatedStudentResponse(PaginatedResponse):
    """Paginated student list."""

    items: list[StudentResponse]


class StudentImportResult(BaseSchema):
    """Result of a CSV or Excel student import."""

    total_rows: int
    created: int
    updated: int
    errors: list[dict] = []
    message: str
