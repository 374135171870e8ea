"""School setup endpoints."""

from fastapi import APIRouter, Request

from edurank.core.database import DbSession
from edurank.models.audit import AuditAction
from edurank.schemas.school import SchoolSetupRequest, SchoolStatusResponse
from edurank.services.audit import AuditService
from edurank.services.school import SchoolService

router = APIRouter()


@router.get("", response_model=SchoolStatusResponse)
def get_setup_status(db: DbSession):
    """Whether the school has been initialised."""
    return SchoolService(db).get_status()


@router.post("", response_model=SchoolStatusResponse)
def setup_school(
    request: SchoolSetupRequest,
    db: DbSession,
    http_request: Request,
):
    """
    Initialise the school and create the administrator account.

    Can only be called once.
    """
    service = SchoolService(db)
    config, admin = service.setup(request)

    # Audit log
    AuditService(db).log(
        action=AuditAction.SCHOOL_SETUP,
        resource_type="school",
        resource_id=str(config.id),
        user_id=admin.id,
        description=f"School '{config.school_name}' set up",
        ip_address=http_request.client.host if http_request.client else None,
    )

    return service.get_status()
