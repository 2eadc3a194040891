"""
House payments: history, current-month standing, administrator-recorded
payments and resident confirmations with an uploaded receipt.

Every payment books a matching income movement in the "Cuotas" category in
the same transaction (see app.services.finance for the ledger itself).
"""

import logging
import os
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.models import Account, FinancialCategory, FinancialMovement, House, Payment
from app.models.finance import MOVEMENT_INCOME
from app.schemas.finance import PaymentCreate
from app.services import audit
from app.services.houses import get_house

logger = logging.getLogger(__name__)

FEES_CATEGORY = "Cuotas"

ALLOWED_RECEIPT_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
}


def house_payments(session: Session, house: House) -> list[Payment]:
    """Payments of a house, newest first."""
    return (
        session.query(Payment)
        .filter(Payment.house_id == house.id)
        .order_by(Payment.paid_at.desc(), Payment.id.desc())
        .all()
    )


def _month_bounds(now: datetime) -> tuple[datetime, datetime]:
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def month_summary(session: Session, house: House, now: datetime | None = None) -> dict:
    """Paid vs. expected (MONTHLY_FEE) for the calendar month containing now (UTC)."""
    now = now or datetime.now(UTC)
    start, end = _month_bounds(now)
    rows = (
        session.query(Payment.amount)
        .filter(
            Payment.house_id == house.id,
            Payment.paid_at >= start,
            Payment.paid_at < end,
        )
        .all()
    )
    paid = sum((Decimal(amount) for (amount,) in rows), Decimal(0))
    expected = Decimal(settings.MONTHLY_FEE)
    pending = max(Decimal(0), expected - paid)
    return {
        "month": start.strftime("%Y-%m"),
        "expected": float(expected),
        "paid": float(paid),
        "pending": float(pending),
        "up_to_date": pending == 0,
    }


def fees_category(session: Session) -> FinancialCategory:
    """The income category for house payments; created (or re-enabled) on first use."""
    category = (
        session.query(FinancialCategory).filter(FinancialCategory.name == FEES_CATEGORY).first()
    )
    if category is None:
        category = FinancialCategory(
            name=FEES_CATEGORY,
            description="Cuotas de mantenimiento pagadas por las casas",
            active=True,
        )
        session.add(category)
        session.flush()
    elif not category.active:
        category.active = True
    return category


def _book_payment(session: Session, payment: Payment) -> FinancialMovement:
    session.flush()
    movement = FinancialMovement(
        movement_type=MOVEMENT_INCOME,
        category=fees_category(session),
        details=f"Pago casa {payment.house.house_number}",
        amount=payment.amount,
        occurred_at=payment.paid_at,
        payment_id=payment.id,
    )
    session.add(movement)
    return movement


def record_payment(session: Session, data: PaymentCreate, actor: Account) -> Payment:
    """Administrator records a payment for a house. Audited as registro_pago."""
    house = get_house(session, data.house_number)
    payment = Payment(
        house=house,
        amount=data.amount,
        description=data.description,
        payment_method=data.payment_method,
        paid_at=data.paid_at or datetime.now(UTC),
        registered_by_id=actor.id,
    )
    session.add(payment)
    _book_payment(session, payment)
    audit.record(
        session,
        actor.id,
        "registro_pago",
        f"Pago de {data.amount} registrado para la casa {house.house_number}",
        {"house_number": house.house_number, "amount": str(data.amount)},
    )
    session.commit()
    logger.info(
        "Payment recorded",
        extra={"payment_id": payment.id, "house_number": house.house_number, "actor_id": actor.id},
    )
    return payment


def receipt_extension(content_type: str | None) -> str:
    """Stored file extension for an uploaded receipt; ValidationError for other types."""
    normalized = (content_type or "").split(";")[0].strip().lower()
    extension = ALLOWED_RECEIPT_TYPES.get(normalized)
    if extension is None:
        raise ValidationError("Tipo de archivo no permitido. Solo JPG, PNG, WEBP o PDF")
    return extension


def _store_receipt(content: bytes, extension: str) -> Path:
    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    path = upload_dir / f"comprobante-{uuid.uuid4().hex}{extension}"
    path.write_bytes(content)
    return path


def confirm_payment(
    session: Session,
    actor: Account,
    amount: Decimal,
    content: bytes,
    content_type: str | None,
    description: str | None = None,
    payment_method: str | None = None,
    paid_at: datetime | None = None,
) -> Payment:
    """
    A resident confirms a payment of their own house with a receipt file.

    The receipt is written under UPLOAD_DIR before the transaction commits and
    removed again if the commit fails.
    """
    if actor.house_id is None:
        raise ValidationError("Usuario no tiene una casa asignada")
    if not content:
        raise ValidationError("Se requiere un comprobante de pago")
    if len(content) > settings.MAX_RECEIPT_BYTES:
        raise ValidationError(
            f"El comprobante excede el tamaño máximo de {settings.MAX_RECEIPT_BYTES} bytes"
        )
    extension = receipt_extension(content_type)

    house = session.get(House, actor.house_id)
    path = _store_receipt(content, extension)
    try:
        payment = Payment(
            house=house,
            amount=amount,
            description=description,
            payment_method=payment_method,
            receipt_filename=path.name,
            paid_at=paid_at or datetime.now(UTC),
            registered_by_id=actor.id,
        )
        session.add(payment)
        _book_payment(session, payment)
        audit.record(
            session,
            actor.id,
            "confirmacion_pago",
            f"Pago de {amount} confirmado con comprobante para la casa {house.house_number}",
            {
                "house_number": house.house_number,
                "amount": str(amount),
                "receipt": path.name,
            },
        )
        session.commit()
    except Exception:
        session.rollback()
        os.remove(path)
        raise
    logger.info(
        "Payment confirmed",
        extra={"payment_id": payment.id, "house_number": house.house_number, "actor_id": actor.id},
    )
    return payment
