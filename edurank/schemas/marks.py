"""Award list (per-subject mark entry) schemas."""

from pydantic import Field

from edurank.core.subjects import ClassLevel, ExamType
from edurank.schemas.common import BaseSchema
from edurank.services.permissions import ColumnPermission


class AwardListRow(BaseSchema):
    """One student's mark in a subject column."""

    student_id: int
    roll_no: str
    name: str
    mark: int


class AwardListResponse(BaseSchema):
    """Marks of a whole class for one subject and exam period."""

    class_level: str
    exam_type: ExamType
    subject_key: str
    subject_label: str
    max_marks: int
    permission: ColumnPermission
    rows: list[AwardListRow]


class AwardListEntry(BaseSchema):
    """Mark entered for one student. Values outside the period range are clamped."""

    student_id: int
    mark: int


class AwardListUpdate(BaseSchema):
    """Bulk mark entry for one subject column."""

    class_level: ClassLevel
    exam_type: ExamType
    subject: str = Field(..., min_length=1, max_length=50)
    entries: list[AwardListEntry] = Field(..., min_length=1)
