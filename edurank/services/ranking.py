"""Result computation, ranking and aggregate statistics.

Every function here is a pure computation over the snapshot it is given.
Nothing is cached and nothing is read from or written to storage; callers
re-invoke the functions whenever their inputs change.
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from edurank.core.subjects import (
    ALL_CLASSES,
    ClassLevel,
    ExamType,
    SubjectConfig,
    find_subject,
    get_exam_max_marks,
    get_main_subjects,
    get_mark_key,
    get_subjects_for_class,
    parse_class_level,
)
from edurank.schemas.results import (
    CalculatedResult,
    ClassSummary,
    ComparativeSubjectStatistic,
    PerformanceBand,
    ResultStatus,
    StudentRecord,
    SubjectStatistic,
)

logger = logging.getLogger(__name__)

PASS_PERCENTAGE = 33

# Sort keys that mean "rank by total" rather than by a subject column
TOTAL_SORT_KEYS = frozenset({"total", "percentage"})

# (label, min inclusive, max exclusive, color), highest band first
PERFORMANCE_BANDS: tuple[tuple[str, float, float, str], ...] = (
    ("Above 90%", 90, 101, "#10b981"),
    ("80-90%", 80, 90, "#3b82f6"),
    ("60-80%", 60, 80, "#6366f1"),
    ("40-60%", 40, 60, "#f59e0b"),
    ("Below 40%", 0, 40, "#ef4444"),
)


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero on the decimal representation of ``value``."""
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def _mark(marks: dict[str, int], exam_type: ExamType | str, subject_key: str) -> int:
    return marks.get(get_mark_key(exam_type, subject_key), 0)


def compute_result(student: StudentRecord, exam_type: ExamType | str) -> CalculatedResult:
    """Compute total, percentage and status for one student. ``rank`` stays unset."""
    main_subjects = get_main_subjects(student.class_level)

    calculated_total = sum(_mark(student.marks, exam_type, s.key) for s in main_subjects)
    total = student.manual_total if student.manual_total is not None else calculated_total

    max_total = sum(get_exam_max_marks(exam_type, s) for s in main_subjects)
    percentage = round_half_up(total / max_total * 100, 2) if max_total > 0 else 0.0

    return CalculatedResult(
        **student.model_dump(),
        total=total,
        calculated_total=calculated_total,
        max_total=max_total,
        percentage=percentage,
        status=ResultStatus.PASS if percentage >= PASS_PERCENTAGE else ResultStatus.FAIL,
        total_overridden=student.manual_total is not None and student.manual_total != calculated_total,
    )


def rank_students(
    students: Iterable[StudentRecord],
    class_level: ClassLevel | str,
    exam_type: ExamType | str,
    sort_key: str | None = None,
) -> list[CalculatedResult]:
    """Rank the students of one class.

    Results are ordered by ``sort_key`` (a subject key) when given, else by
    total. Ranks always come from totals: an element whose total matches an
    earlier element takes that element's rank, otherwise its 1-based
    position. Totals [90, 90, 80, 70] rank as [1, 1, 3, 4].
    """
    level = parse_class_level(class_level)
    class_students = [s for s in students if s.class_level == level.value]
    if not class_students:
        return []

    results = [compute_result(s, exam_type) for s in class_students]

    if sort_key and sort_key.strip().lower() not in TOTAL_SORT_KEYS:
        subject_key = sort_key.strip().lower()
        ordered = sorted(results, key=lambda r: _mark(r.marks, exam_type, subject_key), reverse=True)
    else:
        ordered = sorted(results, key=lambda r: r.total, reverse=True)

    first_rank_for_total: dict[int, int] = {}
    ranked = []
    for index, result in enumerate(ordered):
        rank = first_rank_for_total.setdefault(result.total, index + 1)
        ranked.append(result.model_copy(update={"rank": rank}))

    logger.debug(
        "Ranked %d students for class %s (%s, sort=%s)",
        len(ranked), level.value, exam_type, sort_key or "total",
    )
    return ranked


def performance_bands(results: Iterable[CalculatedResult]) -> list[PerformanceBand]:
    """Count results per percentage band, in fixed band order."""
    bands = [
        PerformanceBand(label=label, min=low, max=high, color=color)
        for label, low, high, color in PERFORMANCE_BANDS
    ]
    for result in results:
        for band in bands:
            if band.min <= result.percentage < band.max:
                band.count += 1
                break
    return bands


def _mark_statistics(marks: Sequence[int], max_marks: int) -> tuple[float, int, float]:
    """Average, highest and pass percentage for one subject column."""
    if not marks:
        return 0.0, 0, 0.0
    pass_mark = max_marks * PASS_PERCENTAGE / 100
    passed = sum(1 for m in marks if m >= pass_mark)
    return (
        round_half_up(sum(marks) / len(marks), 1),
        max(marks),
        round_half_up(passed / len(marks) * 100, 1),
    )


def subject_statistics(
    results: Sequence[StudentRecord],
    class_level: ClassLevel | str,
    exam_type: ExamType | str,
) -> list[SubjectStatistic]:
    """Average, highest and pass rate for every subject of a class."""
    stats = []
    for subject in get_subjects_for_class(class_level):
        max_marks = get_exam_max_marks(exam_type, subject)
        marks = [_mark(r.marks, exam_type, subject.key) for r in results]
        avg, highest, pass_percent = _mark_statistics(marks, max_marks)
        stats.append(
            SubjectStatistic(
                key=subject.key,
                label=subject.label,
                type=subject.type,
                max_marks=max_marks,
                avg=avg,
                highest=highest,
                pass_percent=pass_percent,
            )
        )
    return stats


def comparative_subject_statistics(
    students: Sequence[StudentRecord],
    subject_key: str,
    exam_type: ExamType | str,
) -> list[ComparativeSubjectStatistic]:
    """One subject's statistics for each class level, in class order.

    The max-marks denominator is resolved per class through that class's own
    subject configuration. Classes whose tier does not offer the subject are
    reported with ``offered=False`` and zeroed statistics.
    """
    stats = []
    for level in ALL_CLASSES:
        class_students = [s for s in students if s.class_level == level.value]
        subject: SubjectConfig | None = find_subject(level, subject_key)
        if subject is None:
            stats.append(
                ComparativeSubjectStatistic(
                    class_level=level.value,
                    offered=False,
                    max_marks=0,
                    count=len(class_students),
                    avg=0.0,
                    highest=0,
                    pass_percent=0.0,
                )
            )
            continue

        max_marks = get_exam_max_marks(exam_type, subject)
        marks = [_mark(s.marks, exam_type, subject.key) for s in class_students]
        avg, highest, pass_percent = _mark_statistics(marks, max_marks)
        stats.append(
            ComparativeSubjectStatistic(
                class_level=level.value,
                offered=True,
                max_marks=max_marks,
                count=len(class_students),
                avg=avg,
                highest=highest,
                pass_percent=pass_percent,
            )
        )
    return stats


def class_summary(results: Sequence[CalculatedResult]) -> ClassSummary:
    """Pass/fail counts and average total of a result sheet."""
    total_students = len(results)
    pass_count = sum(1 for r in results if r.status == ResultStatus.PASS)
    if total_students == 0:
        return ClassSummary(
            total_students=0, pass_count=0, fail_count=0, pass_percentage=0.0, average_total=0.0
        )
    return ClassSummary(
        total_students=total_students,
        pass_count=pass_count,
        fail_count=total_students - pass_count,
        pass_percentage=round_half_up(pass_count / total_students * 100, 1),
        average_total=round_half_up(sum(r.total for r in results) / total_students, 0),
    )
