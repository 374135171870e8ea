"""School setup schemas."""

from pydantic import Field, model_validator

from edurank.schemas.common import BaseSchema


class SchoolSetupRequest(BaseSchema):
    """One-time school initialisation."""

    school_name: str = Field(..., min_length=1, max_length=255)
    admin_name: str = Field(..., min_length=1, max_length=255)
    admin_username: str = Field("admin", min_length=1, max_length=255)
    admin_password: str = Field(..., min_length=4, max_length=128)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "SchoolSetupRequest":
        if self.admin_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class SchoolStatusResponse(BaseSchema):
    """Setup state of the school."""

    is_setup: bool
    school_name: str | None = None
    admin_name: str | None = None
