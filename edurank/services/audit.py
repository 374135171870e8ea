"""Audit logging service."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from edurank.models.audit import AuditAction, AuditLog
from edurank.schemas.audit import AuditLogFilter, AuditLogWithUser, PaginatedAuditLogResponse

logger = logging.getLogger(__name__)


class AuditService:
    """Audit logging service - append-only."""

    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: str | None = None,
        user_id: int | None = None,
        description: str | None = None,
        extra_data: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditLog:
        """Create an audit log entry."""
        log = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            description=description,
            extra_data=extra_data,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(log)
        self.db.flush()
        logger.debug("Audit %s on %s %s", action.value, resource_type, resource_id)
        return log

    def list_logs(
        self,
        filters: AuditLogFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedAuditLogResponse:
        """List audit logs with filtering, newest first."""
        query = select(AuditLog).options(selectinload(AuditLog.user))

        if filters:
            if filters.action:
                query = query.where(AuditLog.action == filters.action)
            if filters.user_id:
                query = query.where(AuditLog.user_id == filters.user_id)
            if filters.resource_type:
                query = query.where(AuditLog.resource_type == filters.resource_type)
            if filters.date_from:
                query = query.where(AuditLog.created_at >= filters.date_from)
            if filters.date_to:
                query = query.where(AuditLog.created_at <= filters.date_to)

        # Count total
        total = self.db.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar() or 0

        # Apply pagination and ordering
        query = (
            query
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        logs = self.db.execute(query).scalars().all()

        return PaginatedAuditLogResponse(
            items=[
                AuditLogWithUser(
                    id=log.id,
                    user_id=log.user_id,
                    action=log.action,
                    resource_type=log.resource_type,
                    resource_id=log.resource_id,
                    description=log.description,
                    extra_data=log.extra_data,
                    ip_address=log.ip_address,
                    user_agent=log.user_agent,
                    created_at=log.created_at,
                    user_name=log.user.name if log.user else None,
                    user_username=log.user.username if log.user else None,
                )
                for log in logs
            ],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )
