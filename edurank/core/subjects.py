"""Static subject configuration and exam rules.

Class levels are split into two tiers, each with its own subject list:

- middle school: classes 6, 7 and 8
- high school: classes 9 and 10

Marks are stored per (exam period, subject) under a lower-cased composite
key produced by :func:`get_mark_key`. The maximum marks for a subject in a
given exam period come from :func:`get_exam_max_marks`, which is the only
place that rule lives.
"""

import enum
from dataclasses import dataclass

from edurank.core.exceptions import InvalidClassLevelError


class ClassLevel(str, enum.Enum):
    """Supported class levels."""

    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"


class ClassTier(str, enum.Enum):
    """Subject configuration groups."""

    MIDDLE = "middle"
    HIGH = "high"


class ExamType(str, enum.Enum):
    """Exam periods. The period decides max-marks scaling."""

    BIMONTHLY = "Bimonthly"
    TERM = "Term"
    PREBOARD = "Preboard"
    FINAL = "Final"


class SubjectType(str, enum.Enum):
    """MAIN subjects count towards totals, GRADING subjects are informational."""

    MAIN = "MAIN"
    GRADING = "GRADING"


@dataclass(frozen=True)
class SubjectConfig:
    key: str
    label: str
    type: SubjectType


MIDDLE_SCHOOL_CLASSES: tuple[ClassLevel, ...] = (ClassLevel.SIX, ClassLevel.SEVEN, ClassLevel.EIGHT)
HIGH_SCHOOL_CLASSES: tuple[ClassLevel, ...] = (ClassLevel.NINE, ClassLevel.TEN)
ALL_CLASSES: tuple[ClassLevel, ...] = MIDDLE_SCHOOL_CLASSES + HIGH_SCHOOL_CLASSES

MIDDLE_SUBJECTS: tuple[SubjectConfig, ...] = (
    SubjectConfig("pbi", "Pbi", SubjectType.MAIN),
    SubjectConfig("hindi", "Hindi", SubjectType.MAIN),
    SubjectConfig("eng", "Eng", SubjectType.MAIN),
    SubjectConfig("math", "Math", SubjectType.MAIN),
    SubjectConfig("sci", "Sci", SubjectType.MAIN),
    SubjectConfig("sst", "SST", SubjectType.MAIN),
    SubjectConfig("comp", "Comp", SubjectType.MAIN),
    SubjectConfig("phy_edu", "Phy Edu", SubjectType.GRADING),
    SubjectConfig("agri", "Agri", SubjectType.GRADING),
)

HIGH_SUBJECTS: tuple[SubjectConfig, ...] = (
    SubjectConfig("pbi_a", "Pbi A", SubjectType.MAIN),
    SubjectConfig("pbi_b", "Pbi B", SubjectType.MAIN),
    SubjectConfig("hindi", "Hindi", SubjectType.MAIN),
    SubjectConfig("eng", "Eng", SubjectType.MAIN),
    SubjectConfig("math", "Math", SubjectType.MAIN),
    SubjectConfig("sci", "Sci", SubjectType.MAIN),
    SubjectConfig("sst", "SST", SubjectType.MAIN),
    SubjectConfig("comp", "Comp", SubjectType.MAIN),
    SubjectConfig("phy_edu", "Phy Edu", SubjectType.GRADING),
)

SUBJECTS_BY_TIER: dict[ClassTier, tuple[SubjectConfig, ...]] = {
    ClassTier.MIDDLE: MIDDLE_SUBJECTS,
    ClassTier.HIGH: HIGH_SUBJECTS,
}

# High school first-language papers carry reduced max marks in Term/Preboard/Final
FIRST_LANGUAGE_SUBJECTS = frozenset({"pbi_a", "pbi_b"})

# Marks for a blank exam or subject all land in this one key
UNASSIGNED_MARK_KEY = "unassigned_marks_registry"

DEFAULT_MAX_MARKS = 100


def parse_class_level(class_level: "ClassLevel | str") -> ClassLevel:
    """Resolve a class level, rejecting anything outside the supported set."""
    if isinstance(class_level, ClassLevel):
        return class_level
    try:
        return ClassLevel(str(class_level).strip())
    except ValueError:
        raise InvalidClassLevelError(class_level)


def get_class_tier(class_level: "ClassLevel | str") -> ClassTier:
    """Get the subject tier a class level belongs to."""
    level = parse_class_level(class_level)
    if level in MIDDLE_SCHOOL_CLASSES:
        return ClassTier.MIDDLE
    return ClassTier.HIGH


def get_subjects_for_class(class_level: "ClassLevel | str") -> tuple[SubjectConfig, ...]:
    """Get the ordered subject configuration for a class level."""
    return SUBJECTS_BY_TIER[get_class_tier(class_level)]


def get_main_subjects(class_level: "ClassLevel | str") -> tuple[SubjectConfig, ...]:
    return tuple(s for s in get_subjects_for_class(class_level) if s.type == SubjectType.MAIN)


def find_subject(class_level: "ClassLevel | str", subject_key: str) -> SubjectConfig | None:
    """Find a subject by key within a class's configuration."""
    key = str(subject_key or "").strip().lower()
    for subject in get_subjects_for_class(class_level):
        if subject.key == key:
            return subject
    return None


def _lookup_subject_type(subject_key: str) -> SubjectType:
    for subjects in SUBJECTS_BY_TIER.values():
        for subject in subjects:
            if subject.key == subject_key:
                return subject.type
    return SubjectType.MAIN


def _exam_value(exam_type: "ExamType | str | None") -> str:
    if isinstance(exam_type, ExamType):
        return exam_type.value
    return str(exam_type or "").strip()


def get_mark_key(exam_type: "ExamType | str | None", subject_key: str | None) -> str:
    """Build the storage key for a mark, e.g. ``final_hindi``."""
    safe_exam = _exam_value(exam_type).lower()
    safe_subject = str(subject_key or "").strip().lower()

    if not safe_exam or not safe_subject:
        return UNASSIGNED_MARK_KEY
    return f"{safe_exam}_{safe_subject}"


def get_exam_max_marks(
    exam_type: "ExamType | str | None",
    subject: "SubjectConfig | str | None",
) -> int:
    """Maximum marks for a subject in an exam period.

    | Exam period     | GRADING | MAIN | MAIN pbi_a / pbi_b |
    |-----------------|---------|------|--------------------|
    | Bimonthly       | 100     | 20   | 20                 |
    | Term / Preboard | 100     | 80   | 65                 |
    | Final           | 100     | 100  | 75                 |
    """
    exam = _exam_value(exam_type)
    if not exam or not subject:
        return DEFAULT_MAX_MARKS

    if isinstance(subject, SubjectConfig):
        subject_key = subject.key.lower()
        subject_type = subject.type
    else:
        subject_key = str(subject).strip().lower()
        subject_type = _lookup_subject_type(subject_key)

    if subject_type == SubjectType.GRADING:
        return DEFAULT_MAX_MARKS

    is_first_language = subject_key in FIRST_LANGUAGE_SUBJECTS

    if exam == ExamType.BIMONTHLY.value:
        return 20
    if exam in (ExamType.TERM.value, ExamType.PREBOARD.value):
        return 65 if is_first_language else 80
    if exam == ExamType.FINAL.value:
        return 75 if is_first_language else 100
    return DEFAULT_MAX_MARKS


def get_valid_mark_keys(class_level: "ClassLevel | str") -> frozenset[str]:
    """All storage keys a student of this class may carry."""
    subjects = get_subjects_for_class(class_level)
    return frozenset(get_mark_key(exam, s.key) for exam in ExamType for s in subjects)


def parse_mark_key(
    class_level: "ClassLevel | str",
    mark_key: str,
) -> tuple[ExamType, SubjectConfig] | None:
    """Resolve a storage key back to its exam period and subject for a class."""
    key = str(mark_key or "").strip().lower()
    for exam in ExamType:
        for subject in get_subjects_for_class(class_level):
            if get_mark_key(exam, subject.key) == key:
                return exam, subject
    return None


def clamp_mark(value: int, max_marks: int) -> int:
    """Clamp a mark into ``[0, max_marks]``."""
    return min(max_marks, max(0, value))
