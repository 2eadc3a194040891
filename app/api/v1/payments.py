"""House payments: the caller's own history, per-house history, recording and confirming payments."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.api.v1.auth import require_capability
from app.core.config import settings
from app.core.database import get_db
from app.models import Account, House
from app.schemas.common import ApiResponse
from app.schemas.finance import HousePayments, MonthSummary, PaymentCreate, PaymentOut
from app.services import houses as house_service
from app.services import payments as payment_service
from app.services.access import Capability

router = APIRouter()

FinanceManager = Annotated[Account, Depends(require_capability(Capability.MANAGE_FINANCES))]
DbSession = Annotated[Session, Depends(get_db)]


def _house_payments(db: Session, house: House) -> HousePayments:
    return HousePayments(
        house_number=house.house_number,
        payment_status=house.payment_status,
        current_month=MonthSummary(**payment_service.month_summary(db, house)),
        payments=[PaymentOut.model_validate(p) for p in payment_service.house_payments(db, house)],
    )


@router.get("/my-house", response_model=ApiResponse[HousePayments])
def my_house_payments(
    account: Annotated[Account, Depends(require_capability(Capability.VIEW_OWN_PAYMENTS))],
    db: DbSession,
) -> ApiResponse[HousePayments]:
    """Payment history of the caller's house and how much of this month's fee is still due."""
    if account.house is None:
        return ApiResponse(message="No tienes una casa asignada", data=None)
    return ApiResponse(data=_house_payments(db, account.house))


@router.get("/house/{house_number}", response_model=ApiResponse[HousePayments])
def house_payments(
    house_number: str,
    _manager: FinanceManager,
    db: DbSession,
) -> ApiResponse[HousePayments]:
    house = house_service.get_house(db, house_number)
    return ApiResponse(data=_house_payments(db, house))


@router.post("", response_model=ApiResponse[PaymentOut], status_code=201)
def record_payment(
    body: PaymentCreate,
    manager: FinanceManager,
    db: DbSession,
) -> ApiResponse[PaymentOut]:
    payment = payment_service.record_payment(db, body, manager)
    return ApiResponse(
        message="Pago registrado exitosamente",
        data=PaymentOut.model_validate(payment),
    )


@router.post("/confirm", response_model=ApiResponse[PaymentOut], status_code=201)
def confirm_payment(
    account: Annotated[Account, Depends(require_capability(Capability.CONFIRM_PAYMENT))],
    db: DbSession,
    receipt: Annotated[UploadFile, File(description="JPG, PNG, WEBP or PDF receipt")],
    amount: Annotated[Decimal, Form(gt=0, max_digits=12, decimal_places=2)],
    description: Annotated[str | None, Form(max_length=500)] = None,
    payment_method: Annotated[str | None, Form(max_length=50)] = None,
    paid_at: Annotated[datetime | None, Form()] = None,
) -> ApiResponse[PaymentOut]:
    """
    Multipart form: a resident confirms a payment of their own house with a receipt.
    At most MAX_RECEIPT_BYTES are read; anything larger is rejected.
    """
    content = receipt.file.read(settings.MAX_RECEIPT_BYTES + 1)
    payment = payment_service.confirm_payment(
        db,
        account,
        amount,
        content,
        receipt.content_type,
        description=description,
        payment_method=payment_method,
        paid_at=paid_at,
    )
    return ApiResponse(
        message="Pago confirmado exitosamente",
        data=PaymentOut.model_validate(payment),
    )
