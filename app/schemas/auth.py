"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AccountSummary(BaseModel):
    """Minimal account data returned with a token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str
    role_name: str
    last_login_at: datetime | None = None


class TokenData(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    account: AccountSummary


class ProfileOut(BaseModel):
    """Authenticated account as seen by itself."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str
    phone: str | None = None
    status: str
    role_name: str
    house_number: str | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class PasswordRecoveryRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class PasswordRecoveryData(BaseModel):
    """Only populated in dev so the reset flow can be exercised without e-mail."""

    debug_token: str | None = None


class PasswordResetRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=64)
    new_password: str = Field(..., min_length=8, max_length=128)
