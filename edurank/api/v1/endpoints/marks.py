"""Award list (subject-wise mark entry) endpoints."""

from fastapi import APIRouter, Query, Request

from edurank.core.database import DbSession
from edurank.core.dependencies import StaffContext
from edurank.core.subjects import ClassLevel, ExamType
from edurank.models.audit import AuditAction
from edurank.schemas.marks import AwardListResponse, AwardListUpdate
from edurank.services.audit import AuditService
from edurank.services.marks import MarksService

router = APIRouter()


@router.get("/award-list", response_model=AwardListResponse)
def get_award_list(
    context: StaffContext,
    db: DbSession,
    class_level: ClassLevel,
    exam_type: ExamType,
    subject: str = Query(..., min_length=1),
):
    """Marks of a class for one subject and exam period, with the caller's access level."""
    return MarksService(db).get_award_list(context, class_level, exam_type, subject)


@router.put("/award-list", response_model=AwardListResponse)
def update_award_list(
    request: AwardListUpdate,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """
    Enter marks for one subject column.

    Requires edit access on the column. Marks outside ``[0, max marks]``
    for the exam period are clamped.
    """
    award_list = MarksService(db).update_award_list(context, request)

    AuditService(db).log(
        action=AuditAction.MARKS_UPDATED,
        resource_type="award_list",
        resource_id=f"{award_list.class_level}:{award_list.exam_type.value}:{award_list.subject_key}",
        user_id=context.user_id,
        description=(
            f"{len(request.entries)} {award_list.subject_label} marks entered for "
            f"class {award_list.class_level} ({award_list.exam_type.value})"
        ),
        extra_data={"student_ids": [e.student_id for e in request.entries]},
        ip_address=http_request.client.host if http_request.client else None,
    )

    return award_list
