"""Staff management service."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from edurank.core.exceptions import NotFoundError, ValidationError
from edurank.core.security import hash_password
from edurank.models.user import STAFF_ROLES, Role, TeachingAssignment, User
from edurank.schemas.auth import StaffCreate, StaffResponse

logger = logging.getLogger(__name__)


class StaffService:
    """Create, list and remove staff accounts."""

    def __init__(self, db: Session):
        self.db = db

    def create_staff(self, request: StaffCreate) -> StaffResponse:
        """Create a staff user with its teaching assignments."""
        existing = self.db.execute(
            select(User).where(User.username == request.username)
        ).scalar_one_or_none()
        if existing:
            raise ValidationError("Username already registered")

        user = User(
            name=request.name,
            username=request.username,
            password_hash=hash_password(request.password),
            role=request.role,
            assigned_class=request.assigned_class.value if request.assigned_class else None,
            is_active=True,
        )
        user.teaching_assignments = [
            TeachingAssignment(class_level=a.class_level.value, subjects=list(a.subjects))
            for a in request.teaching_assignments
        ]
        self.db.add(user)
        self.db.flush()
        self.db.refresh(user)

        logger.info("Created %s account '%s'", user.role.value, user.username)
        return StaffResponse.model_validate(user)

    def get_staff(self, user_id: int) -> User:
        """Get a staff user by ID."""
        user = self.db.execute(
            select(User).where(User.id == user_id, User.role.in_(STAFF_ROLES))
        ).scalar_one_or_none()
        if not user:
            raise NotFoundError("Staff user", str(user_id))
        return user

    def list_staff(self, role: Role | None = None) -> list[StaffResponse]:
        query = select(User).where(User.role.in_(STAFF_ROLES))
        if role:
            query = query.where(User.role == role)
        users = self.db.execute(query.order_by(User.name)).scalars().all()
        return [StaffResponse.model_validate(u) for u in users]

    def delete_staff(self, user_id: int, acting_user_id: int | None) -> User:
        """Delete a staff user. Administrators cannot delete themselves."""
        user = self.get_staff(user_id)
        if user.id == acting_user_id:
            raise ValidationError("You cannot delete your own account")
        self.db.delete(user)
        self.db.flush()
        return user
