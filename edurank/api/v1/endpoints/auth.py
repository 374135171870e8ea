"""Authentication endpoints."""

from fastapi import APIRouter, Request

from edurank.core.database import DbSession
from edurank.core.dependencies import CurrentContext
from edurank.models.audit import AuditAction
from edurank.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    PasswordChange,
    RefreshTokenRequest,
    StudentLoginRequest,
    TokenResponse,
)
from edurank.schemas.common import MessageResponse
from edurank.services.audit import AuditService
from edurank.services.auth import AuthService

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: DbSession, http_request: Request):
    """Authenticate a staff user and return access and refresh tokens."""
    user, tokens = AuthService(db).login(request)

    AuditService(db).log(
        action=AuditAction.USER_LOGIN,
        resource_type="user",
        resource_id=str(user.id),
        user_id=user.id,
        ip_address=http_request.client.host if http_request.client else None,
        user_agent=http_request.headers.get("user-agent"),
    )

    return tokens


@router.post("/student-login", response_model=TokenResponse)
def student_login(request: StudentLoginRequest, db: DbSession, http_request: Request):
    """Authenticate a student by class, roll number and password."""
    student, tokens = AuthService(db).student_login(request)

    AuditService(db).log(
        action=AuditAction.USER_LOGIN,
        resource_type="student",
        resource_id=str(student.id),
        description=f"Student {student.roll_no} of class {student.class_level} logged in",
        ip_address=http_request.client.host if http_request.client else None,
        user_agent=http_request.headers.get("user-agent"),
    )

    return tokens


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(request: RefreshTokenRequest, db: DbSession):
    """Refresh access token using refresh token."""
    return AuthService(db).refresh_tokens(request.refresh_token)


@router.get("/me", response_model=CurrentUserResponse)
def get_current_user_info(context: CurrentContext):
    """Get the current principal and the classes it can open."""
    return AuthService.describe(context)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: PasswordChange,
    context: CurrentContext,
    db: DbSession,
    http_request: Request,
):
    """Change the current principal's password."""
    AuthService(db).change_password(context, request)

    AuditService(db).log(
        action=AuditAction.PASSWORD_CHANGED,
        resource_type="student" if context.is_student() else "user",
        resource_id=str(context.student.id if context.is_student() else context.user_id),
        user_id=context.user_id,
        ip_address=http_request.client.host if http_request.client else None,
    )

    return MessageResponse(message="Password changed successfully")
