"""Result sheets and dashboards built from stored students."""

import logging

from sqlalchemy.orm import Session

from edurank.core.dependencies import CurrentUserContext
from edurank.core.exceptions import ValidationError
from edurank.core.subjects import ALL_CLASSES, ClassLevel, ExamType, find_subject
from edurank.schemas.results import ComparativeResponse, DashboardResponse, RankedResultsResponse
from edurank.services import ranking, transfer
from edurank.services.student import StudentService

logger = logging.getLogger(__name__)


class ResultService:
    """Feeds student snapshots to the ranking engine."""

    def __init__(self, db: Session):
        self.db = db
        self.students = StudentService(db)

    def ranked_results(
        self,
        context: CurrentUserContext,
        class_level: ClassLevel,
        exam_type: ExamType,
        sort_key: str | None = None,
        search: str | None = None,
    ) -> RankedResultsResponse:
        """Ranked result sheet of a class.

        Filtering by ``search`` or by the student principal happens after
        ranking, so ranks are always class ranks.
        """
        results = ranking.rank_students(
            self.students.load_snapshot(class_level), class_level, exam_type, sort_key
        )

        if context.is_student():
            results = [r for r in results if r.id == context.student.id]
        elif search:
            term = search.strip().lower()
            results = [r for r in results if term in r.name.lower() or term in r.roll_no.lower()]

        return RankedResultsResponse(
            class_level=class_level.value,
            exam_type=exam_type,
            sort_key=sort_key,
            results=results,
        )

    def export_csv(self, class_level: ClassLevel, exam_type: ExamType) -> tuple[str, str]:
        """CSV text and download file name for a class's ranked results."""
        results = ranking.rank_students(self.students.load_snapshot(class_level), class_level, exam_type)
        content = transfer.export_csv(results, class_level, exam_type)
        logger.info("Exported %d results for class %s (%s)", len(results), class_level.value, exam_type.value)
        return content, transfer.export_filename(class_level)

    def dashboard(self, class_level: ClassLevel, exam_type: ExamType) -> DashboardResponse:
        """Summary, performance bands and subject statistics of a class."""
        results = ranking.rank_students(self.students.load_snapshot(class_level), class_level, exam_type)
        return DashboardResponse(
            class_level=class_level.value,
            exam_type=exam_type,
            summary=ranking.class_summary(results),
            bands=ranking.performance_bands(results),
            subject_stats=ranking.subject_statistics(results, class_level, exam_type),
        )

    def compare(self, subject_key: str, exam_type: ExamType) -> ComparativeResponse:
        """One subject's statistics across every class level."""
        key = subject_key.strip().lower()
        # The subject must exist in at least one tier
        if not any(find_subject(level, key) for level in ALL_CLASSES):
            raise ValidationError(f"Unknown subject '{subject_key}'", details={"subject": subject_key})

        return ComparativeResponse(
            subject_key=key,
            exam_type=exam_type,
            classes=ranking.comparative_subject_statistics(self.students.load_snapshot(), key, exam_type),
        )
