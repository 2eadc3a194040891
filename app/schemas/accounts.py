"""Schemas for account listings (reviewers) and house residents."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AccountOut(BaseModel):
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
