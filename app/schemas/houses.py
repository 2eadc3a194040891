"""Schemas for houses and their payment status."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.accounts import AccountOut

PaymentStatus = Literal["al_dia", "moroso", "en_arreglo"]


class HouseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    house_number: str
    payment_status: str
    updated_at: datetime | None = None


class HouseSummary(BaseModel):
    """House with the number of accounts living in it."""

    house_number: str
    payment_status: str
    account_count: int = Field(..., ge=0)


class HouseResidents(BaseModel):
    house: HouseOut
    accounts: list[AccountOut]


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus
