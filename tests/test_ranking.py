"""Tests for the ranking engine."""

import pytest
from pydantic import ValidationError

from edurank.core.exceptions import InvalidClassLevelError
from edurank.core.subjects import ExamType, SubjectType
from edurank.schemas.results import ResultStatus, StudentRecord
from edurank.services.ranking import (
    class_summary,
    comparative_subject_statistics,
    compute_result,
    performance_bands,
    rank_students,
    round_half_up,
    subject_statistics,
)


def record(
    student_id: int,
    marks: dict[str, int] | None = None,
    class_level: str = "6",
    manual_total: int | None = None,
) -> StudentRecord:
    return StudentRecord(
        id=student_id,
        roll_no=str(student_id),
        name=f"Student {student_id}",
        class_level=class_level,
        marks=marks or {},
        manual_total=manual_total,
    )


# Student record validation


def test_record_lowercases_mark_keys():
    student = record(1, {"Final_Hindi": 40})
    assert student.marks == {"final_hindi": 40}


def test_record_rejects_keys_outside_class_subjects():
    with pytest.raises(ValidationError):
        record(1, {"final_pbi_a": 40}, class_level="6")


def test_record_rejects_negative_marks():
    with pytest.raises(ValidationError):
        record(1, {"final_hindi": -1})


def test_record_rejects_unknown_class_level():
    with pytest.raises(InvalidClassLevelError):
        record(1, class_level="12")


# compute_result


def test_class_six_final_scenario():
    """Hindi 40 + Eng 50 in class 6 Final.

    Comp is a MAIN subject in the middle-school table, so seven MAIN papers
    of 100 give a maximum of 700, not 600, and 90 / 700 rounds to 12.86.
    """
    result = compute_result(record(1, {"final_hindi": 40, "final_eng": 50}), ExamType.FINAL)

    assert result.calculated_total == 90
    assert result.total == 90
    assert result.max_total == 700
    assert result.percentage == 12.86
    assert result.status == ResultStatus.FAIL
    assert result.total_overridden is False
    assert result.rank is None


def test_grading_subjects_do_not_count():
    result = compute_result(record(1, {"final_phy_edu": 100, "final_agri": 90}), ExamType.FINAL)
    assert result.total == 0
    assert result.percentage == 0.0


def test_marks_of_other_exam_periods_are_ignored():
    result = compute_result(record(1, {"term_hindi": 80, "final_hindi": 10}), ExamType.FINAL)
    assert result.total == 10


def test_manual_total_wins():
    result = compute_result(record(1, {"final_hindi": 40}, manual_total=350), ExamType.FINAL)

    assert result.total == 350
    assert result.calculated_total == 40
    assert result.percentage == 50.0
    assert result.status == ResultStatus.PASS
    assert result.total_overridden is True


def test_manual_total_equal_to_computed_is_not_an_override():
    result = compute_result(record(1, {"final_hindi": 40}, manual_total=40), ExamType.FINAL)
    assert result.total_overridden is False


def test_manual_total_of_zero_is_respected():
    result = compute_result(record(1, {"final_hindi": 40}, manual_total=0), ExamType.FINAL)
    assert result.total == 0


@pytest.mark.parametrize(
    "class_level, exam, expected",
    [
        ("6", ExamType.BIMONTHLY, 140),
        ("6", ExamType.TERM, 560),
        ("9", ExamType.BIMONTHLY, 160),
        ("9", ExamType.TERM, 610),
        ("10", ExamType.PREBOARD, 610),
        ("10", ExamType.FINAL, 750),
    ],
)
def test_max_total_per_tier_and_period(class_level, exam, expected):
    assert compute_result(record(1, class_level=class_level), exam).max_total == expected


def test_percentage_rounds_half_up():
    # 1 / 160 * 100 = 0.625
    result = compute_result(record(1, {"bimonthly_eng": 1}, class_level="9"), ExamType.BIMONTHLY)
    assert result.percentage == 0.63


def test_pass_threshold_is_inclusive():
    passed = compute_result(record(1, manual_total=231), ExamType.FINAL)
    failed = compute_result(record(2, manual_total=230), ExamType.FINAL)

    assert passed.percentage == 33.0
    assert passed.status == ResultStatus.PASS
    assert failed.percentage == 32.86
    assert failed.status == ResultStatus.FAIL


def test_compute_result_is_idempotent():
    student = record(1, {"final_hindi": 40, "final_math": 77}, manual_total=None)
    assert compute_result(student, ExamType.FINAL) == compute_result(student, ExamType.FINAL)


def test_percentage_stays_within_bounds_when_total_within_max():
    marks = {f"final_{key}": 100 for key in ("pbi", "hindi", "eng", "math", "sci", "sst", "comp")}
    result = compute_result(record(1, marks), ExamType.FINAL)
    assert result.percentage == 100.0


def test_round_half_up():
    assert round_half_up(2.675, 2) == 2.68
    assert round_half_up(0.05, 1) == 0.1
    assert round_half_up(14.5, 0) == 15.0


# rank_students


def test_ties_share_the_first_rank_and_skip_after():
    students = [
        record(1, manual_total=80),
        record(2, manual_total=90),
        record(3, manual_total=70),
        record(4, manual_total=90),
    ]
    ranked = rank_students(students, "6", ExamType.FINAL)

    assert [r.total for r in ranked] == [90, 90, 80, 70]
    assert [r.rank for r in ranked] == [1, 1, 3, 4]
    # Stable sort keeps input order within a tie
    assert [r.id for r in ranked[:2]] == [2, 4]


def test_sorting_by_subject_keeps_total_based_ranks():
    students = [
        record(1, {"final_math": 10, "final_hindi": 80}),
        record(2, {"final_math": 50, "final_eng": 30}),
        record(3, {"final_math": 30, "final_sci": 60}),
    ]
    ranked = rank_students(students, "6", ExamType.FINAL, sort_key="math")

    assert [r.id for r in ranked] == [2, 3, 1]
    assert [r.total for r in ranked] == [80, 90, 90]
    # Student 1 ties with student 3, who appears earlier in the produced order
    assert [r.rank for r in ranked] == [1, 2, 2]


@pytest.mark.parametrize("sort_key", [None, "total", "percentage", "TOTAL"])
def test_total_sort_keys(sort_key):
    students = [record(1, manual_total=10), record(2, manual_total=20)]
    ranked = rank_students(students, "6", ExamType.FINAL, sort_key=sort_key)
    assert [r.id for r in ranked] == [2, 1]


def test_rank_filters_to_the_requested_class():
    students = [
        record(1, manual_total=100),
        record(2, manual_total=500, class_level="7"),
        record(3, manual_total=50),
    ]
    ranked = rank_students(students, "6", ExamType.FINAL)

    assert [r.id for r in ranked] == [1, 3]
    assert all(r.class_level == "6" for r in ranked)


def test_rank_with_no_students_in_class():
    assert rank_students([record(1, class_level="7")], "6", ExamType.FINAL) == []
    assert rank_students([], "10", ExamType.TERM) == []


def test_rank_rejects_unknown_class():
    with pytest.raises(InvalidClassLevelError):
        rank_students([record(1)], "5", ExamType.FINAL)


def test_sole_student_is_ranked_first():
    ranked = rank_students([record(1, {"final_hindi": 40, "final_eng": 50})], "6", ExamType.FINAL)
    assert len(ranked) == 1
    assert ranked[0].rank == 1
    assert ranked[0].status == ResultStatus.FAIL


# performance_bands


def test_one_result_per_band():
    # Percentages 95, 85, 65, 45, 25 over a max total of 700
    totals = [665, 595, 455, 315, 175]
    results = [compute_result(record(i, manual_total=t), ExamType.FINAL) for i, t in enumerate(totals, 1)]

    bands = performance_bands(results)

    assert [b.label for b in bands] == ["Above 90%", "80-90%", "60-80%", "40-60%", "Below 40%"]
    assert [b.count for b in bands] == [1, 1, 1, 1, 1]


def test_band_boundaries_are_half_open():
    # 630 / 700 = 90%, 560 / 700 = 80%, 700 / 700 = 100%
    results = [
        compute_result(record(i, manual_total=t), ExamType.FINAL)
        for i, t in enumerate([630, 560, 700], 1)
    ]
    bands = {b.label: b.count for b in performance_bands(results)}

    assert bands["Above 90%"] == 2
    assert bands["80-90%"] == 1


def test_bands_for_no_results():
    assert [b.count for b in performance_bands([])] == [0, 0, 0, 0, 0]


# subject_statistics


def test_subject_statistics_for_a_class():
    students = [
        record(1, {"final_hindi": 40, "final_phy_edu": 90}),
        record(2, {"final_hindi": 20}),
        record(3),
    ]
    stats = {s.key: s for s in subject_statistics(students, "6", ExamType.FINAL)}

    assert list(stats) == ["pbi", "hindi", "eng", "math", "sci", "sst", "comp", "phy_edu", "agri"]
    hindi = stats["hindi"]
    assert hindi.avg == 20.0
    assert hindi.highest == 40
    assert hindi.pass_percent == 33.3
    assert hindi.max_marks == 100

    phy_edu = stats["phy_edu"]
    assert phy_edu.type == SubjectType.GRADING
    assert phy_edu.highest == 90
    assert phy_edu.avg == 30.0


def test_subject_statistics_use_period_max_marks():
    # Bimonthly max is 20, so 7 passes (>= 6.6) and 6 fails
    students = [record(1, {"bimonthly_math": 7}), record(2, {"bimonthly_math": 6})]
    stats = {s.key: s for s in subject_statistics(students, "6", ExamType.BIMONTHLY)}

    assert stats["math"].max_marks == 20
    assert stats["math"].pass_percent == 50.0
    assert stats["agri"].max_marks == 100


def test_subject_statistics_with_no_students():
    stats = subject_statistics([], "9", ExamType.TERM)
    assert all(s.avg == 0 and s.highest == 0 and s.pass_percent == 0 for s in stats)


# comparative_subject_statistics


def test_comparison_across_classes():
    students = [
        record(1, {"term_hindi": 60}, class_level="6"),
        record(2, {"term_hindi": 20}, class_level="6"),
        record(3, {"term_pbi_a": 50}, class_level="9"),
    ]
    stats = comparative_subject_statistics(students, "pbi_a", ExamType.TERM)

    assert [s.class_level for s in stats] == ["6", "7", "8", "9", "10"]
    class_6 = stats[0]
    assert class_6.offered is False
    assert class_6.count == 2
    assert class_6.avg == 0

    class_9 = stats[3]
    assert class_9.offered is True
    assert class_9.max_marks == 65
    assert class_9.count == 1
    assert class_9.highest == 50
    assert class_9.pass_percent == 100.0

    class_10 = stats[4]
    assert class_10.offered is True
    assert class_10.count == 0
    assert class_10.avg == 0


def test_comparison_resolves_max_marks_per_class():
    students = [record(1, {"final_hindi": 40}, class_level="8"), record(2, {"final_hindi": 70}, class_level="10")]
    stats = {s.class_level: s for s in comparative_subject_statistics(students, "hindi", ExamType.FINAL)}

    assert stats["8"].avg == 40.0
    assert stats["10"].avg == 70.0
    assert all(s.offered and s.max_marks == 100 for s in stats.values())


# class_summary


def test_class_summary():
    results = rank_students(
        [record(1, manual_total=400), record(2, manual_total=100), record(3, manual_total=301)],
        "6",
        ExamType.FINAL,
    )
    summary = class_summary(results)

    assert summary.total_students == 3
    assert summary.pass_count == 2
    assert summary.fail_count == 1
    assert summary.pass_percentage == 66.7
    assert summary.average_total == 267.0


def test_class_summary_when_empty():
    summary = class_summary([])
    assert summary.total_students == 0
    assert summary.pass_percentage == 0.0
