"""School setup service."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from edurank.core.exceptions import ValidationError
from edurank.core.security import hash_password
from edurank.models.school import SchoolConfig
from edurank.models.user import Role, User
from edurank.schemas.school import SchoolSetupRequest, SchoolStatusResponse

logger = logging.getLogger(__name__)


class SchoolService:
    """One-time school initialisation and its status."""

    def __init__(self, db: Session):
        self.db = db

    def get_config(self) -> SchoolConfig | None:
        return self.db.execute(select(SchoolConfig).limit(1)).scalar_one_or_none()

    def get_status(self) -> SchoolStatusResponse:
        config = self.get_config()
        if not config or not config.is_setup:
            return SchoolStatusResponse(is_setup=False)
        return SchoolStatusResponse(
            is_setup=True,
            school_name=config.school_name,
            admin_name=config.admin_name,
        )

    def setup(self, request: SchoolSetupRequest) -> tuple[SchoolConfig, User]:
        """Store the school details and create the administrator account."""
        config = self.get_config()
        if config and config.is_setup:
            raise ValidationError("School is already set up")

        existing = self.db.execute(
            select(User).where(User.username == request.admin_username)
        ).scalar_one_or_none()
        if existing:
            raise ValidationError("Username already registered")

        if config is None:
            config = SchoolConfig(school_name=request.school_name, admin_name=request.admin_name)
            self.db.add(config)
        else:
            config.school_name = request.school_name
            config.admin_name = request.admin_name
        config.is_setup = True

        admin = User(
            name=request.admin_name,
            username=request.admin_username,
            password_hash=hash_password(request.admin_password),
            role=Role.ADMIN,
            is_active=True,
        )
        self.db.add(admin)
        self.db.flush()
        self.db.refresh(admin)

        logger.info("School '%s' set up with administrator '%s'", config.school_name, admin.username)
        return config, admin
