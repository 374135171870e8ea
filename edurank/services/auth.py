"""Authentication service."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from edurank.core.config import settings
from edurank.core.dependencies import CurrentUserContext
from edurank.core.exceptions import AuthenticationError, ValidationError
from edurank.core.security import (
    STAFF,
    STUDENT,
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_refresh_token,
)
from edurank.models.student import Student
from edurank.models.user import User
from edurank.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    PasswordChange,
    StudentLoginRequest,
    TokenResponse,
)
from edurank.services.permissions import accessible_classes, is_view_restricted

logger = logging.getLogger(__name__)


def _student_username(student: Student) -> str:
    return f"{student.class_level}-{student.roll_no}"


def _issue_tokens(subject_id: int, username: str, kind: str) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(subject_id, username, kind=kind),
        refresh_token=create_refresh_token(subject_id, kind=kind),
        token_type="bearer",
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


class AuthService:
    """Authentication service."""

    def __init__(self, db: Session):
        self.db = db

    def login(self, request: LoginRequest) -> tuple[User, TokenResponse]:
        """Authenticate a staff user and return tokens."""
        user = self.db.execute(
            select(User).where(User.username == request.username)
        ).scalar_one_or_none()

        if not user:
            raise AuthenticationError("Invalid username or password")

        if not verify_password(request.password, user.password_hash):
            raise AuthenticationError("Invalid username or password")

        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        # Update last login
        user.last_login_at = datetime.now(timezone.utc)
        self.db.flush()

        logger.info("Staff login: %s", user.username)
        return user, _issue_tokens(user.id, user.username, STAFF)

    def student_login(self, request: StudentLoginRequest) -> tuple[Student, TokenResponse]:
        """Authenticate a student by class, roll number and password."""
        student = self.db.execute(
            select(Student).where(
                Student.class_level == request.class_level.value,
                Student.roll_no == request.roll_no,
            )
        ).scalar_one_or_none()

        # Students without a password cannot log in
        if not student or not student.password_hash:
            raise AuthenticationError("Invalid class, roll number or password")

        if not verify_password(request.password, student.password_hash):
            raise AuthenticationError("Invalid class, roll number or password")

        logger.info("Student login: class %s roll %s", student.class_level, student.roll_no)
        return student, _issue_tokens(student.id, _student_username(student), STUDENT)

    def refresh_tokens(self, refresh_token: str) -> TokenResponse:
        """Refresh access token using refresh token."""
        payload = verify_refresh_token(refresh_token)

        if not payload:
            raise AuthenticationError("Invalid or expired refresh token")

        subject_id = payload.get("sub")
        if not subject_id:
            raise AuthenticationError("Invalid token payload")

        try:
            subject_id = int(subject_id)
        except ValueError:
            raise AuthenticationError("Invalid subject ID in token")

        if payload["kind"] == STUDENT:
            student = self.db.execute(
                select(Student).where(Student.id == subject_id)
            ).scalar_one_or_none()
            if not student or not student.password_hash:
                raise AuthenticationError("Student not found")
            return _issue_tokens(student.id, _student_username(student), STUDENT)

        user = self.db.execute(select(User).where(User.id == subject_id)).scalar_one_or_none()
        if not user or not user.is_active:
            raise AuthenticationError("User not found or deactivated")

        return _issue_tokens(user.id, user.username, STAFF)

    def change_password(self, context: CurrentUserContext, request: PasswordChange) -> None:
        """Change the password of the authenticated principal."""
        account = context.student if context.is_student() else context.user
        if account is None:
            raise AuthenticationError()

        if not account.password_hash or not verify_password(
            request.current_password, account.password_hash
        ):
            raise ValidationError("Current password is incorrect")

        if request.current_password == request.new_password:
            raise ValidationError("New password must differ from the current password")

        account.password_hash = hash_password(request.new_password)
        self.db.flush()

    @staticmethod
    def describe(context: CurrentUserContext) -> CurrentUserResponse:
        """Describe the principal and the classes it can open."""
        return CurrentUserResponse(
            role=context.role,
            name=context.display_name,
            username=context.user.username if context.user else None,
            roll_no=context.roll_no,
            assigned_class=context.assigned_class,
            teaching_assignments=context.teaching_assignments,
            accessible_classes=accessible_classes(context),
            is_view_restricted=is_view_restricted(context),
        )
