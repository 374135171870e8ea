"""Dashboard endpoints."""

from fastapi import APIRouter, Query

from edurank.core.database import DbSession
from edurank.core.dependencies import CurrentContext, StaffContext
from edurank.core.exceptions import PermissionDeniedError
from edurank.core.subjects import ClassLevel, ExamType
from edurank.schemas.results import ComparativeResponse, DashboardResponse
from edurank.services.permissions import ensure_class_access, is_view_restricted
from edurank.services.results import ResultService

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    context: CurrentContext,
    db: DbSession,
    class_level: ClassLevel,
    exam_type: ExamType,
):
    """Class summary, performance bands and subject statistics."""
    ensure_class_access(context, class_level)
    return ResultService(db).dashboard(class_level, exam_type)


@router.get("/compare", response_model=ComparativeResponse)
def compare_classes(
    context: StaffContext,
    db: DbSession,
    exam_type: ExamType,
    subject: str = Query(..., min_length=1),
):
    """One subject's statistics across every class level."""
    if is_view_restricted(context):
        raise PermissionDeniedError("Class comparison is not available to class-restricted users")
    return ResultService(db).compare(subject, exam_type)
