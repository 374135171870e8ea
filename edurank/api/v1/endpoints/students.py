"""Student management endpoints."""

from fastapi import APIRouter, Query, Request

from edurank.core.database import DbSession
from edurank.core.dependencies import CurrentContext, StaffContext
from edurank.core.exceptions import PermissionDeniedError, ValidationError
from edurank.core.subjects import ClassLevel
from edurank.models.audit import AuditAction
from edurank.schemas.common import MessageResponse
from edurank.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentResponse,
    StudentUpdate,
)
from edurank.services.audit import AuditService
from edurank.services.permissions import ensure_admin_action, ensure_class_access
from edurank.services.student import StudentService, calculated_totals

router = APIRouter()


@router.post("", response_model=StudentResponse)
def create_student(
    request: StudentCreate,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """Create a new student. Requires the administrator or the class incharge."""
    ensure_admin_action(context, request.class_level)

    service = StudentService(db)
    student = service.create_student(request)

    # Audit log
    AuditService(db).log(
        action=AuditAction.DATA_CREATED,
        resource_type="student",
        resource_id=str(student.id),
        user_id=context.user_id,
        description=f"Student '{student.name}' created in class {student.class_level}",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return student


@router.get("", response_model=PaginatedStudentResponse)
def list_students(
    context: StaffContext,
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    class_level: ClassLevel | None = None,
    search: str | None = None,
):
    """List students with filtering and pagination.

    Only the administrator may list across all classes.
    """
    if class_level is None and not context.is_admin():
        raise ValidationError("class_level is required")
    if class_level is not None:
        ensure_class_access(context, class_level)

    filters = StudentFilter(class_level=class_level, search=search)
    return StudentService(db).list_students(filters, page, page_size)


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(student_id: int, context: CurrentContext, db: DbSession):
    """Get a student by ID. Students may only read their own record."""
    service = StudentService(db)
    student = service.get_student(student_id)
    if context.is_student() and context.student.id != student.id:
        raise PermissionDeniedError("Students can only view their own record")
    ensure_class_access(context, student.class_level)
    return service.get_student_response(student_id)


@router.patch("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: int,
    request: StudentUpdate,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """Update a student. Manual total changes are audited with the computed totals."""
    service = StudentService(db)
    existing = service.get_student(student_id)
    ensure_admin_action(context, existing.class_level)
    previous_manual_total = existing.manual_total

    student = service.update_student(student_id, request)

    audit = AuditService(db)
    changes = request.model_dump(exclude_unset=True, exclude={"password"})
    audit.log(
        action=AuditAction.DATA_UPDATED,
        resource_type="student",
        resource_id=str(student_id),
        user_id=context.user_id,
        description=f"Student '{student.name}' updated",
        extra_data={"fields": sorted(changes)},
        ip_address=http_request.client.host if http_request.client else None,
    )

    if "manual_total" in changes and student.manual_total != previous_manual_total:
        audit.log(
            action=AuditAction.MANUAL_TOTAL_SET,
            resource_type="student",
            resource_id=str(student_id),
            user_id=context.user_id,
            description=f"Manual total for '{student.name}' set to {student.manual_total}",
            extra_data={
                "previous_manual_total": previous_manual_total,
                "manual_total": student.manual_total,
                "calculated_totals": calculated_totals(service.get_student(student_id)),
            },
            ip_address=http_request.client.host if http_request.client else None,
        )

    return student


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """Delete a student."""
    service = StudentService(db)
    ensure_admin_action(context, service.get_student(student_id).class_level)
    student = service.delete_student(student_id)

    # Audit log
    AuditService(db).log(
        action=AuditAction.DATA_DELETED,
        resource_type="student",
        resource_id=str(student_id),
        user_id=context.user_id,
        description=f"Student '{student.name}' deleted from class {student.class_level}",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return MessageResponse(message="Student deleted successfully")
