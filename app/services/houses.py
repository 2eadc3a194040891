"""House listing and the administrator's direct payment-status edit."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models import Account, House
from app.models.house import PAYMENT_STATUSES
from app.services import audit

logger = logging.getLogger(__name__)


def list_houses(session: Session) -> list[tuple[House, int]]:
    """All houses with their account count, in numeric house order ("2" before "10")."""
    count = func.count(Account.id)
    return (
        session.query(House, count)
        .outerjoin(Account, Account.house_id == House.id)
        .group_by(House.id)
        .order_by(func.length(House.house_number), House.house_number)
        .all()
    )


def get_house(session: Session, house_number: str) -> House:
    house = session.query(House).filter(House.house_number == house_number).first()
    if house is None:
        raise NotFoundError("Casa no encontrada")
    return house


def house_accounts(session: Session, house: House) -> list[Account]:
    return (
        session.query(Account)
        .filter(Account.house_id == house.id)
        .order_by(Account.full_name)
        .all()
    )


def update_payment_status(
    session: Session, house_number: str, payment_status: str, actor: Account
) -> House:
    """Set a house's payment status and audit the change in the same transaction."""
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError("Estado de pago inválido")
    house = get_house(session, house_number)
    previous = house.payment_status
    house.payment_status = payment_status
    audit.record(
        session,
        actor.id,
        "cambio_estado_pago",
        f"Estado de pago de la casa {house.house_number}: {previous} -> {payment_status}",
        {
            "house_number": house.house_number,
            "previous_status": previous,
            "new_status": payment_status,
        },
    )
    session.commit()
    logger.info(
        "Payment status updated",
        extra={
            "house_number": house.house_number,
            "payment_status": payment_status,
            "actor_id": actor.id,
        },
    )
    return house
