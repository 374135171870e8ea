"""Authentication and staff schemas."""

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from edurank.core.subjects import ClassLevel, find_subject
from edurank.models.user import STAFF_ROLES, Role
from edurank.schemas.common import BaseSchema


class LoginRequest(BaseSchema):
    """Staff login request schema."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class StudentLoginRequest(BaseSchema):
    """Student login: class and roll number identify the student."""

    class_level: ClassLevel
    roll_no: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseSchema):
    """Token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshTokenRequest(BaseSchema):
    """Refresh token request schema."""

    refresh_token: str


class PasswordChange(BaseSchema):
    """Password change schema."""

    current_password: str
    new_password: str = Field(..., min_length=4)


class TeachingAssignmentSchema(BaseSchema):
    """Subjects taught in one class."""

    class_level: ClassLevel
    subjects: list[str] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_subjects(self) -> "TeachingAssignmentSchema":
        normalized = []
        for key in self.subjects:
            subject = find_subject(self.class_level, key)
            if subject is None:
                raise ValueError(f"Subject '{key}' is not taught in class {self.class_level.value}")
            if subject.key not in normalized:
                normalized.append(subject.key)
        self.subjects = normalized
        return self


class StaffCreate(BaseSchema):
    """Staff user creation schema."""

    name: str = Field(..., min_length=2, max_length=255)
    username: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=4)
    role: Role
    assigned_class: ClassLevel | None = None
    teaching_assignments: list[TeachingAssignmentSchema] = []

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Role) -> Role:
        if v not in STAFF_ROLES:
            raise ValueError("Staff role must be ADMIN, CLASS_INCHARGE or SUBJECT_TEACHER")
        return v

    @model_validator(mode="after")
    def validate_assignment(self) -> "StaffCreate":
        if self.role == Role.CLASS_INCHARGE and self.assigned_class is None:
            raise ValueError("A class incharge needs an assigned class")
        if self.role != Role.CLASS_INCHARGE:
            self.assigned_class = None
        classes = [a.class_level for a in self.teaching_assignments]
        if len(classes) != len(set(classes)):
            raise ValueError("Only one teaching assignment per class")
        return self


class StaffResponse(BaseSchema):
    """Staff user response schema."""

    id: int
    name: str
    username: str
    role: Role
    assigned_class: str | None
    is_active: bool
    teaching_assignments: list[TeachingAssignmentSchema] = []
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class CurrentUserResponse(BaseSchema):
    """The authenticated principal and what it may access."""

    role: Role
    name: str
    username: str | None = None
    roll_no: str | None = None
    assigned_class: str | None = None
    teaching_assignments: dict[str, list[str]] = {}
    accessible_classes: list[str]
    is_view_restricted: bool
