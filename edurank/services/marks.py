"""Award list: per-subject mark entry for a whole class."""

import logging

from sqlalchemy.orm import Session

from edurank.core.dependencies import CurrentUserContext
from edurank.core.exceptions import ValidationError
from edurank.core.subjects import (
    ClassLevel,
    ExamType,
    SubjectConfig,
    clamp_mark,
    find_subject,
    get_exam_max_marks,
    get_mark_key,
    parse_class_level,
)
from edurank.schemas.marks import AwardListResponse, AwardListRow, AwardListUpdate
from edurank.services.permissions import ensure_class_access, ensure_subject_edit, get_column_permission
from edurank.services.student import StudentService

logger = logging.getLogger(__name__)


def resolve_subject(class_level: ClassLevel | str, subject_key: str) -> SubjectConfig:
    """Find a subject of the class or fail with a validation error."""
    subject = find_subject(class_level, subject_key)
    if subject is None:
        level = parse_class_level(class_level).value
        raise ValidationError(
            f"Subject '{subject_key}' is not taught in class {level}",
            details={"subject": subject_key, "class_level": level},
        )
    return subject


class MarksService:
    """Read and write one subject column of a class result sheet."""

    def __init__(self, db: Session):
        self.db = db
        self.students = StudentService(db)

    def get_award_list(
        self,
        context: CurrentUserContext,
        class_level: ClassLevel,
        exam_type: ExamType,
        subject_key: str,
    ) -> AwardListResponse:
        """Marks of every student of the class for one subject and period."""
        ensure_class_access(context, class_level)
        subject = resolve_subject(class_level, subject_key)
        key = get_mark_key(exam_type, subject.key)

        rows = [
            AwardListRow(
                student_id=s.id,
                roll_no=s.roll_no,
                name=s.name,
                mark=(s.marks or {}).get(key, 0),
            )
            for s in self.students.get_class_students(class_level)
        ]
        return AwardListResponse(
            class_level=class_level.value,
            exam_type=exam_type,
            subject_key=subject.key,
            subject_label=subject.label,
            max_marks=get_exam_max_marks(exam_type, subject),
            permission=get_column_permission(context, class_level, subject.key),
            rows=rows,
        )

    def update_award_list(
        self,
        context: CurrentUserContext,
        request: AwardListUpdate,
    ) -> AwardListResponse:
        """Store a subject column. Marks are clamped to the period's max marks."""
        subject = resolve_subject(request.class_level, request.subject)
        ensure_subject_edit(context, request.class_level, subject.key)

        key = get_mark_key(request.exam_type, subject.key)
        max_marks = get_exam_max_marks(request.exam_type, subject)
        students = {s.id: s for s in self.students.get_class_students(request.class_level)}

        unknown = [e.student_id for e in request.entries if e.student_id not in students]
        if unknown:
            raise ValidationError(
                f"Students not in class {request.class_level.value}",
                details={"student_ids": unknown},
            )

        for entry in request.entries:
            student = students[entry.student_id]
            # Reassign so the JSON column is flagged dirty
            student.marks = {**(student.marks or {}), key: clamp_mark(entry.mark, max_marks)}

        self.db.flush()
        logger.info(
            "Stored %d marks for %s in class %s (%s)",
            len(request.entries), subject.key, request.class_level.value, request.exam_type.value,
        )
        return self.get_award_list(context, request.class_level, request.exam_type, subject.key)
