"""Homework tracking endpoints."""

from fastapi import APIRouter, Request

from edurank.core.database import DbSession
from edurank.core.dependencies import CurrentContext, StaffContext
from edurank.core.subjects import ClassLevel
from edurank.models.audit import AuditAction
from edurank.models.homework import HomeworkStatus
from edurank.schemas.common import MessageResponse
from edurank.schemas.homework import HomeworkCreate, HomeworkResponse, HomeworkUpdate
from edurank.services.audit import AuditService
from edurank.services.homework import HomeworkService
from edurank.services.marks import resolve_subject
from edurank.services.permissions import ensure_class_access, ensure_subject_edit

router = APIRouter()


@router.get("", response_model=list[HomeworkResponse])
def list_homework(
    context: CurrentContext,
    db: DbSession,
    class_level: ClassLevel,
    subject: str | None = None,
    status: HomeworkStatus | None = None,
):
    """Homework tasks of a class."""
    ensure_class_access(context, class_level)
    return HomeworkService(db).list_tasks(class_level, subject, status)


@router.post("", response_model=HomeworkResponse)
def create_homework(
    request: HomeworkCreate,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """Set homework. Requires edit access on the subject in that class."""
    subject = resolve_subject(request.class_level, request.subject)
    ensure_subject_edit(context, request.class_level, subject.key)

    task = HomeworkService(db).create_task(request, subject.key, context.user_id)

    AuditService(db).log(
        action=AuditAction.DATA_CREATED,
        resource_type="homework",
        resource_id=str(task.id),
        user_id=context.user_id,
        description=f"Homework '{task.task_name}' set for class {task.class_level} ({task.subject})",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return task


@router.patch("/{task_id}", response_model=HomeworkResponse)
def update_homework(
    task_id: int,
    request: HomeworkUpdate,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """Update a task's status or its non-submitter list."""
    service = HomeworkService(db)
    task = service.get_task(task_id)
    ensure_subject_edit(context, task.class_level, task.subject)

    updated = service.update_task(task, request)

    AuditService(db).log(
        action=AuditAction.DATA_UPDATED,
        resource_type="homework",
        resource_id=str(task_id),
        user_id=context.user_id,
        extra_data=request.model_dump(mode="json", exclude_unset=True),
        ip_address=http_request.client.host if http_request.client else None,
    )

    return updated


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_homework(
    task_id: int,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """Delete a homework task."""
    service = HomeworkService(db)
    task = service.get_task(task_id)
    ensure_subject_edit(context, task.class_level, task.subject)
    service.delete_task(task)

    AuditService(db).log(
        action=AuditAction.DATA_DELETED,
        resource_type="homework",
        resource_id=str(task_id),
        user_id=context.user_id,
        ip_address=http_request.client.host if http_request.client else None,
    )

    return MessageResponse(message="Homework deleted successfully")
