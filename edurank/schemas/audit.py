"""Audit log schemas."""

from datetime import datetime
from typing import Any

from edurank.models.audit import AuditAction
from edurank.schemas.common import BaseSchema, PaginatedResponse


class AuditLogResponse(BaseSchema):
    """Audit log response schema."""

    id: int
    user_id: int | None
    action: AuditAction
    resource_type: str
    resource_id: str | None
    description: str | None
    extra_data: dict[str, Any] | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime


class AuditLogWithUser(AuditLogResponse):
    """Audit log with user details."""

    user_name: str | None = None
    user_username: str | None = None


class AuditLogFilter(BaseSchema):
    """Audit log filtering options."""

    action: AuditAction | None = None
    user_id: int | None = None
    resource_type: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class PaginatedAuditLogResponse(PaginatedResponse):
    """Paginated audit log list."""

    items: list[AuditLogWithUser]
