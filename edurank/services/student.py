"""Student management service."""

import logging
from collections.abc import Iterable

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from edurank.core.exceptions import NotFoundError, ValidationError
from edurank.core.security import hash_password
from edurank.core.subjects import ClassLevel, ExamType, clamp_mark, get_exam_max_marks, parse_class_level, parse_mark_key
from edurank.models.student import Student
from edurank.schemas.results import StudentRecord
from edurank.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentBase,
    StudentImportResult,
    StudentResponse,
    StudentUpdate,
)
from edurank.services.ranking import compute_result
from edurank.services.transfer import ImportedRow

logger = logging.getLogger(__name__)


def roll_sort_key(roll_no: str) -> tuple:
    """Numeric roll numbers first in numeric order, then the rest alphabetically."""
    roll = roll_no.strip()
    if roll.isdigit():
        return (0, int(roll), roll)
    return (1, 0, roll.lower())


def to_record(student: Student) -> StudentRecord:
    """Snapshot a stored student for the ranking engine."""
    return StudentRecord(
        id=student.id,
        roll_no=student.roll_no,
        name=student.name,
        class_level=student.class_level,
        marks=dict(student.marks or {}),
        manual_total=student.manual_total,
    )


def _describe_errors(error: PydanticValidationError) -> str:
    return "; ".join(f"{e['loc'][0]}: {e['msg']}" for e in error.errors())


def calculated_totals(student: Student) -> dict[str, int]:
    """Computed (unoverridden) total per exam period."""
    record = to_record(student)
    return {exam.value: compute_result(record, exam).calculated_total for exam in ExamType}


class StudentService:
    """Student management service."""

    def __init__(self, db: Session):
        self.db = db

    def _student_to_response(self, student: Student) -> StudentResponse:
        return StudentResponse(
            id=student.id,
            roll_no=student.roll_no,
            name=student.name,
            class_level=student.class_level,
            marks=student.marks or {},
            manual_total=student.manual_total,
            has_password=bool(student.password_hash),
            created_at=student.created_at,
            updated_at=student.updated_at,
        )

    def _validated_marks(self, class_level: str, marks: dict[str, int]) -> dict[str, int]:
        """Reject keys the class cannot carry and clamp marks to the period maximum."""
        validated = {}
        for key, value in marks.items():
            parsed = parse_mark_key(class_level, key)
            if parsed is None:
                raise ValidationError(
                    f"Marks key '{key}' is not valid for class {class_level}",
                    details={"key": key, "class_level": class_level},
                )
            exam, subject = parsed
            validated[key] = clamp_mark(value, get_exam_max_marks(exam, subject))
        return validated

    def _ensure_roll_free(self, class_level: str, roll_no: str, exclude_id: int | None = None) -> None:
        query = select(Student.id).where(
            Student.class_level == class_level,
            Student.roll_no == roll_no,
        )
        if exclude_id is not None:
            query = query.where(Student.id != exclude_id)
        if self.db.execute(query).first():
            raise ValidationError(
                f"Roll No {roll_no} already exists in class {class_level}",
                details={"roll_no": roll_no, "class_level": class_level},
            )

    def create_student(self, request: StudentCreate) -> StudentResponse:
        """Create a new student."""
        level = request.class_level.value
        self._ensure_roll_free(level, request.roll_no)

        student = Student(
            roll_no=request.roll_no,
            name=request.name,
            class_level=level,
            marks=self._validated_marks(level, request.marks),
            manual_total=request.manual_total,
            password_hash=hash_password(request.password) if request.password else None,
        )
        self.db.add(student)
        self.db.flush()
        self.db.refresh(student)
        return self._student_to_response(student)

    def get_student(self, student_id: int) -> Student:
        """Get student by ID."""
        student = self.db.execute(
            select(Student).where(Student.id == student_id)
        ).scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def get_student_response(self, student_id: int) -> StudentResponse:
        return self._student_to_response(self.get_student(student_id))

    def update_student(self, student_id: int, request: StudentUpdate) -> StudentResponse:
        """Update a student.

        Marks in the request are merged into the stored marks, so a partial
        update leaves other subjects and exam periods untouched.
        """
        student = self.get_student(student_id)
        update_data = request.model_dump(exclude_unset=True)

        if update_data.get("roll_no") and update_data["roll_no"] != student.roll_no:
            self._ensure_roll_free(student.class_level, update_data["roll_no"], exclude_id=student.id)

        if "marks" in update_data:
            marks = self._validated_marks(student.class_level, update_data.pop("marks") or {})
            student.marks = {**(student.marks or {}), **marks}

        password = update_data.pop("password", None)
        if password:
            student.password_hash = hash_password(password)

        for field, value in update_data.items():
            setattr(student, field, value)

        self.db.flush()
        self.db.refresh(student)
        return self._student_to_response(student)

    def delete_student(self, student_id: int) -> Student:
        """Delete a student."""
        student = self.get_student(student_id)
        self.db.delete(student)
        self.db.flush()
        return student

    def list_students(
        self,
        filters: StudentFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentResponse:
        """List students with filtering and pagination."""
        query = select(Student)

        if filters:
            if filters.class_level:
                query = query.where(Student.class_level == filters.class_level.value)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Student.name.ilike(search_term),
                        Student.roll_no.ilike(search_term),
                    )
                )

        # Get total count
        total = self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar() or 0

        # Apply pagination
        offset = (page - 1) * page_size
        query = query.order_by(Student.class_level, Student.roll_no, Student.name)
        students = self.db.execute(query.offset(offset).limit(page_size)).scalars().all()

        return PaginatedStudentResponse(
            items=[self._student_to_response(s) for s in students],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )

    def get_class_students(self, class_level: ClassLevel | str) -> list[Student]:
        """All students of a class in roll number order."""
        level = parse_class_level(class_level)
        students = self.db.execute(
            select(Student).where(Student.class_level == level.value)
        ).scalars().all()
        return sorted(students, key=lambda s: roll_sort_key(s.roll_no))

    def load_snapshot(self, class_level: ClassLevel | str | None = None) -> list[StudentRecord]:
        """Snapshot students for the ranking engine, optionally for one class."""
        query = select(Student)
        if class_level is not None:
            query = query.where(Student.class_level == parse_class_level(class_level).value)
        students = self.db.execute(query.order_by(Student.id)).scalars().all()
        return [to_record(s) for s in students]

    def import_rows(
        self,
        class_level: ClassLevel | str,
        rows: Iterable[ImportedRow],
        errors: list[dict] | None = None,
    ) -> StudentImportResult:
        """Create or update students from parsed sheet rows.

        Students are matched on roll number within the class. Imported marks
        replace the stored marks under the same keys; a bad row is reported
        and the rest still import.
        """
        level = parse_class_level(class_level).value
        errors = list(errors or [])
        existing = {s.roll_no: s for s in self.get_class_students(level)}

        created = 0
        updated = 0
        total_rows = len(errors)
        for row in rows:
            total_rows += 1
            try:
                identity = StudentBase(roll_no=row.roll_no, name=row.name)
            except PydanticValidationError as e:
                errors.append({"row": row.row_number, "roll_no": row.roll_no, "error": _describe_errors(e)})
                continue

            try:
                marks = self._validated_marks(level, row.marks)
            except ValidationError as e:
                errors.append({"row": row.row_number, "roll_no": row.roll_no, "error": e.message})
                continue

            student = existing.get(identity.roll_no)
            if student is None:
                student = Student(roll_no=identity.roll_no, name=identity.name, class_level=level, marks=marks)
                self.db.add(student)
                existing[identity.roll_no] = student
                created += 1
            else:
                student.name = identity.name
                student.marks = {**(student.marks or {}), **marks}
                updated += 1

        self.db.flush()
        logger.info(
            "Imported class %s: %d created, %d updated, %d errors",
            level, created, updated, len(errors),
        )

        return StudentImportResult(
            total_rows=total_rows,
            created=created,
            updated=updated,
            errors=errors,
            message=f"Imported {created + updated} of {total_rows} rows",
        )
