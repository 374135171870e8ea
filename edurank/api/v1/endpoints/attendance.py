"""Attendance register endpoints."""

from datetime import date

from fastapi import APIRouter, Request

from edurank.core.database import DbSession
from edurank.core.dependencies import StaffContext
from edurank.core.subjects import ClassLevel
from edurank.models.audit import AuditAction
from edurank.schemas.attendance import (
    AttendanceRegisterResponse,
    AttendanceRegisterUpdate,
    AttendanceSummaryResponse,
)
from edurank.services.attendance import AttendanceService
from edurank.services.audit import AuditService
from edurank.services.permissions import ensure_admin_action, ensure_class_access

router = APIRouter()


@router.get("", response_model=AttendanceRegisterResponse)
def get_register(
    context: StaffContext,
    db: DbSession,
    class_level: ClassLevel,
    attendance_date: date | None = None,
):
    """Daily register of a class (today by default). Every student defaults to present until saved."""
    ensure_class_access(context, class_level)
    return AttendanceService(db).get_register(class_level, attendance_date or date.today())


@router.put("", response_model=AttendanceRegisterResponse)
def save_register(
    request: AttendanceRegisterUpdate,
    context: StaffContext,
    db: DbSession,
    http_request: Request,
):
    """Save a daily register. Requires the administrator or the class incharge."""
    ensure_admin_action(context, request.class_level)
    register = AttendanceService(db).save_register(request)

    AuditService(db).log(
        action=AuditAction.DATA_UPDATED,
        resource_type="attendance",
        resource_id=f"{request.class_level.value}:{request.attendance_date.isoformat()}",
        user_id=context.user_id,
        description=f"Attendance saved for class {request.class_level.value} on {request.attendance_date}",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return register


@router.get("/summary", response_model=AttendanceSummaryResponse)
def get_summary(
    context: StaffContext,
    db: DbSession,
    class_level: ClassLevel,
    date_from: date,
    date_to: date,
):
    """Present, absent and leave counts per student over a date range."""
    ensure_class_access(context, class_level)
    return AttendanceService(db).get_summary(class_level, date_from, date_to)
