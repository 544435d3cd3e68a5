"""
Pydantic schemas for sign-up, sign-in and session lookups.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from storefront.core.config import settings


class Credentials(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignUpRequest(Credentials):
    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
        return v


class SignInRequest(Credentials):
    pass


class UserPublic(BaseModel):
    id: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserPublic
    token: str


class IsAdminResponse(BaseModel):
    is_admin: bool = Field(..., alias="isAdmin")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str
