"""Result, ranking and statistics schemas."""

import enum
from typing import Annotated

from pydantic import BeforeValidator, Field, model_validator

from edurank.core.subjects import ExamType, SubjectType, get_valid_mark_keys, parse_class_level
from edurank.schemas.common import BaseSchema

MarkValue = Annotated[int, Field(ge=0)]


def _normalize_mark_keys(v):
    if v is None:
        return {}
    if isinstance(v, dict):
        return {str(k).strip().lower(): value for k, value in v.items()}
    return v


# Storage key -> mark, keys lower-cased
MarksMap = Annotated[dict[str, MarkValue], BeforeValidator(_normalize_mark_keys)]


class ResultStatus(str, enum.Enum):
    """Pass/fail outcome of a result."""

    PASS = "Pass"
    FAIL = "Fail"


class StudentRecord(BaseSchema):
    """Snapshot of a student as handed to the ranking engine.

    ``marks`` maps storage keys (see ``get_mark_key``) to marks. Keys are
    checked against the subjects of the student's class tier when the record
    is built, so a record never carries marks for a subject its class does
    not take.
    """

    id: int
    roll_no: str
    name: str
    class_level: str
    marks: MarksMap = Field(default_factory=dict)
    manual_total: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_class_and_marks(self) -> "StudentRecord":
        level = parse_class_level(self.class_level)
        self.class_level = level.value
        unknown = sorted(set(self.marks) - get_valid_mark_keys(level))
        if unknown:
            raise ValueError(
                f"Marks keys not valid for class {level.value}: {', '.join(unknown)}"
            )
        return self


class CalculatedResult(StudentRecord):
    """A student record with its derived result. Never persisted."""

    total: int
    calculated_total: int
    max_total: int
    percentage: float
    status: ResultStatus
    total_overridden: bool = False
    rank: int | None = None


class RankedResultsResponse(BaseSchema):
    """Ranked result sheet for a class and exam."""

    class_level: str
    exam_type: ExamType
    sort_key: str | None = None
    results: list[CalculatedResult]


class PerformanceBand(BaseSchema):
    """Percentage band with the number of results that fall in it."""

    label: str
    min: float
    max: float
    color: str
    count: int = 0


class SubjectStatistic(BaseSchema):
    """Per-subject statistics within one class."""

    key: str
    label: str
    type: SubjectType
    max_marks: int
    avg: float
    highest: int
    pass_percent: float


class ComparativeSubjectStatistic(BaseSchema):
    """One subject's statistics for a single class level."""

    class_level: str
    offered: bool
    max_marks: int
    count: int
    avg: float
    highest: int
    pass_percent: float


class ClassSummary(BaseSchema):
    """Headline numbers for a class result sheet."""

    total_students: int
    pass_count: int
    fail_count: int
    pass_percentage: float
    average_total: float


class DashboardResponse(BaseSchema):
    """Dashboard payload for a class and exam."""

    class_level: str
    exam_type: ExamType
    summary: ClassSummary
    bands: list[PerformanceBand]
    subject_stats: list[SubjectStatistic]


class ComparativeResponse(BaseSchema):
    """Cross-class comparison of one subject."""

    subject_key: str
    exam_type: ExamType
    classes: list[ComparativeSubjectStatistic]
