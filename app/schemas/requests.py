"""
Input and output schemas for the five request kinds.

Each kind has one input model validated at the HTTP boundary (and again by the
workflow engine when called with a plain dict) and one output model.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

MOTIVO_MIN_LEN = 10
MOTIVO_MAX_LEN = 500


def _lower_email(v: str | None) -> str | None:
    return v.strip().lower() if v is not None else None


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class RegistrationIn(_Input):
    """Public sign-up: the password is hashed at submission and only stored on the request."""

    full_name: str = Field(..., min_length=3, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    phone: str | None = Field(default=None, min_length=8, max_length=20)
    house_number: str | None = Field(default=None, min_length=1, max_length=10)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return _lower_email(v)


class InfoEditIn(_Input):
    """Fields left out (or unchanged) are not captured and will not be touched on approval."""

    full_name: str | None = Field(default=None, min_length=3, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=8, max_length=20)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return _lower_email(v)


class DeactivationIn(_Input):
    account_id: int = Field(..., ge=1, description="Account to deactivate")
    motivo: str = Field(..., min_length=MOTIVO_MIN_LEN, max_length=MOTIVO_MAX_LEN)


class ReactivationIn(_Input):
    """Public: a suspended resident identifies themselves by email."""

    email: EmailStr
    motivo: str = Field(..., min_length=MOTIVO_MIN_LEN, max_length=MOTIVO_MAX_LEN)
    house_number: str = Field(..., min_length=1, max_length=10)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return _lower_email(v)


class RoleChangeIn(_Input):
    account_id: int = Field(..., ge=1, description="Account whose role changes")
    change_type: Literal["asignar_admin", "remover_admin"]
    motivo: str | None = Field(default=None, max_length=MOTIVO_MAX_LEN)


class ApproveIn(_Input):
    comentario: str | None = Field(default=None, max_length=MOTIVO_MAX_LEN)


class RejectIn(_Input):
    motivo: str = Field(..., min_length=MOTIVO_MIN_LEN, max_length=MOTIVO_MAX_LEN)


class RequestOut(BaseModel):
    """Lifecycle fields shared by every request kind."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    state: str
    submitter_id: int | None = None
    target_account_id: int | None = None
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewer_id: int | None = None
    review_comment: str | None = None


class RegistrationOut(RequestOut):
    full_name: str
    email: str
    phone: str | None = None
    house_number: str | None = None


class InfoEditOut(RequestOut):
    current_full_name: str
    new_full_name: str | None = None
    current_email: str
    new_email: str | None = None
    current_phone: str | None = None
    new_phone: str | None = None


class DeactivationOut(RequestOut):
    motivo: str


class ReactivationOut(RequestOut):
    motivo: str
    house_number: str


class RoleChangeOut(RequestOut):
    current_role: str
    new_role: str
    change_type: str
    motivo: str | None = None
