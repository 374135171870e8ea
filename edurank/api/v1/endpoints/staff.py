"""Staff management endpoints (administrator only)."""

from fastapi import APIRouter, Request

from edurank.core.database import DbSession
from edurank.core.dependencies import AdminContext
from edurank.models.audit import AuditAction
from edurank.models.user import Role
from edurank.schemas.auth import StaffCreate, StaffResponse
from edurank.schemas.common import MessageResponse
from edurank.services.audit import AuditService
from edurank.services.staff import StaffService

router = APIRouter()


@router.post("", response_model=StaffResponse)
def create_staff(
    request: StaffCreate,
    context: AdminContext,
    db: DbSession,
    http_request: Request,
):
    """Create a staff account with its role and teaching assignments."""
    staff = StaffService(db).create_staff(request)

    AuditService(db).log(
        action=AuditAction.USER_CREATED,
        resource_type="user",
        resource_id=str(staff.id),
        user_id=context.user_id,
        description=f"{staff.role.value} '{staff.username}' created",
        extra_data={"role": staff.role.value, "assigned_class": staff.assigned_class},
        ip_address=http_request.client.host if http_request.client else None,
    )

    return staff


@router.get("", response_model=list[StaffResponse])
def list_staff(context: AdminContext, db: DbSession, role: Role | None = None):
    """List staff accounts."""
    return StaffService(db).list_staff(role)


@router.get("/{user_id}", response_model=StaffResponse)
def get_staff(user_id: int, context: AdminContext, db: DbSession):
    """Get a staff account by ID."""
    return StaffResponse.model_validate(StaffService(db).get_staff(user_id))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_staff(
    user_id: int,
    context: AdminContext,
    db: DbSession,
    http_request: Request,
):
    """Delete a staff account."""
    user = StaffService(db).delete_staff(user_id, context.user_id)

    AuditService(db).log(
        action=AuditAction.USER_DELETED,
        resource_type="user",
        resource_id=str(user_id),
        user_id=context.user_id,
        description=f"User '{user.username}' deleted",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return MessageResponse(message="Staff user deleted successfully")
