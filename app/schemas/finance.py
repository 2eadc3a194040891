"""Schemas for house payments, financial categories and ledger movements."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MovementType = Literal["ingreso", "gasto"]


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class PaymentCreate(_Input):
    """Payment recorded by an administrator on behalf of a house."""

    house_number: str = Field(..., min_length=1, max_length=10)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: str | None = Field(default=None, max_length=500)
    payment_method: str | None = Field(default=None, max_length=50)
    paid_at: datetime | None = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    house_number: str
    amount: float
    description: str | None = None
    payment_method: str | None = None
    receipt_filename: str | None = None
    paid_at: datetime
    registered_by_id: int | None = None


class MonthSummary(BaseModel):
    """Amount paid in the current month against the expected monthly fee."""

    month: str = Field(..., description="YYYY-MM")
    expected: float
    paid: float
    pending: float
    up_to_date: bool


class HousePayments(BaseModel):
    house_number: str
    payment_status: str
    current_month: MonthSummary
    payments: list[PaymentOut]


class CategoryCreate(_Input):
    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class CategoryUpdate(_Input):
    """Only the fields sent are changed; `active` may re-enable a deleted category."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    active: bool | None = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    active: bool


class MovementCreate(_Input):
    movement_type: MovementType
    category_id: int = Field(..., ge=1)
    details: str = Field(..., min_length=3, max_length=500)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    occurred_at: datetime | None = None


class MovementUpdate(_Input):
    movement_type: MovementType | None = None
    category_id: int | None = Field(default=None, ge=1)
    details: str | None = Field(default=None, min_length=3, max_length=500)
    amount: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    occurred_at: datetime | None = None


class MovementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    movement_type: str
    category_id: int
    category_name: str
    details: str
    amount: float
    occurred_at: datetime
    payment_id: int | None = None
    house_number: str | None = None


class LedgerSummary(BaseModel):
    """Income, expense and balance over the whole ledger."""

    total_income: float
    total_expense: float
    balance: float
    movement_count: int = Field(..., ge=0)
