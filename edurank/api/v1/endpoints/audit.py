"""Audit log endpoints."""

from datetime import datetime

from fastapi import APIRouter, Query

from edurank.core.database import DbSession
from edurank.core.dependencies import AdminContext
from edurank.models.audit import AuditAction
from edurank.schemas.audit import AuditLogFilter, PaginatedAuditLogResponse
from edurank.services.audit import AuditService

router = APIRouter()


@router.get("", response_model=PaginatedAuditLogResponse)
def list_audit_logs(
    context: AdminContext,
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    action: AuditAction | None = None,
    user_id: int | None = None,
    resource_type: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
):
    """List audit logs, newest first."""
    filters = AuditLogFilter(
        action=action,
        user_id=user_id,
        resource_type=resource_type,
        date_from=date_from,
        date_to=date_to,
    )
    return AuditService(db).list_logs(filters, page, page_size)
