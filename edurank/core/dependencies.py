"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.orm import Session

from edurank.core.database import get_db
from edurank.core.exceptions import AuthenticationError, PermissionDeniedError
from edurank.core.security import STUDENT, verify_access_token
from edurank.models.student import Student
from edurank.models.user import Role, User


class CurrentUserContext:
    """Authenticated principal: a staff user or a student."""

    def __init__(
        self,
        role: Role,
        user: User | None = None,
        student: Student | None = None,
        assigned_class: str | None = None,
        teaching_assignments: dict[str, list[str]] | None = None,
    ):
        self.role = role
        self.user = user
        self.student = student
        self.assigned_class = assigned_class
        self.teaching_assignments = teaching_assignments or {}

    @classmethod
    def for_staff(cls, user: User) -> "CurrentUserContext":
        return cls(
            role=user.role,
            user=user,
            assigned_class=user.assigned_class,
            teaching_assignments={
                a.class_level: list(a.subjects) for a in user.teaching_assignments
            },
        )

    @classmethod
    def for_student(cls, student: Student) -> "CurrentUserContext":
        return cls(role=Role.STUDENT, student=student, assigned_class=student.class_level)

    @property
    def user_id(self) -> int | None:
        return self.user.id if self.user else None

    @property
    def roll_no(self) -> str | None:
        return self.student.roll_no if self.student else None

    @property
    def display_name(self) -> str:
        if self.user:
            return self.user.name
        return self.student.name if self.student else ""

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def is_student(self) -> bool:
        return self.role == Role.STUDENT


def get_current_context(
    db: Annotated[Session, Depends(get_db)],
    authorization: str = Header(..., description="Bearer token"),
) -> CurrentUserContext:
    """Extract and validate the current principal from the JWT token."""
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization[7:]  # Remove "Bearer " prefix
    payload = verify_access_token(token)

    if not payload:
        raise AuthenticationError("Invalid or expired token")

    subject_id_str = payload.get("sub")
    if not subject_id_str:
        raise AuthenticationError("Invalid token payload")

    try:
        subject_id = int(subject_id_str)
    except ValueError:
        raise AuthenticationError("Invalid subject ID in token")

    kind = payload["kind"]
    if kind == STUDENT:
        student = db.execute(select(Student).where(Student.id == subject_id)).scalar_one_or_none()
        if not student:
            raise AuthenticationError("Student not found")
        return CurrentUserContext.for_student(student)

    user = db.execute(select(User).where(User.id == subject_id)).scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return CurrentUserContext.for_staff(user)


def require_roles(*roles: Role):
    """Dependency factory that requires one of the given roles."""

    def check_role(
        context: Annotated[CurrentUserContext, Depends(get_current_context)],
    ) -> CurrentUserContext:
        if context.role not in roles:
            raise PermissionDeniedError(
                f"Requires role: {', '.join(r.value for r in roles)}"
            )
        return context

    return check_role


def require_staff():
    """Dependency that rejects student principals."""
    return require_roles(Role.ADMIN, Role.CLASS_INCHARGE, Role.SUBJECT_TEACHER)


def require_admin():
    """Dependency that requires the administrator role."""
    return require_roles(Role.ADMIN)


# Type aliases for dependency injection
CurrentContext = Annotated[CurrentUserContext, Depends(get_current_context)]
StaffContext = Annotated[CurrentUserContext, Depends(require_staff())]
AdminContext = Annotated[CurrentUserContext, Depends(require_admin())]
