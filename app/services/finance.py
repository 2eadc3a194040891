"""Financial categories and the community's income/expense ledger. Every mutation is audited."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import Account, FinancialCategory, FinancialMovement
from app.models.finance import MOVEMENT_EXPENSE, MOVEMENT_INCOME
from app.schemas.finance import CategoryCreate, CategoryUpdate, MovementCreate, MovementUpdate
from app.services import audit

logger = logging.getLogger(__name__)

MSG_CATEGORY_NOT_FOUND = "Categoría no encontrada"
MSG_CATEGORY_EXISTS = "Ya existe una categoría con ese nombre"
MSG_MOVEMENT_NOT_FOUND = "Movimiento no encontrado"
MSG_PAYMENT_MOVEMENT = "No se puede modificar un movimiento generado automáticamente desde un pago"


def list_categories(session: Session, include_inactive: bool = False) -> list[FinancialCategory]:
    query = session.query(FinancialCategory)
    if not include_inactive:
        query = query.filter(FinancialCategory.active.is_(True))
    return query.order_by(FinancialCategory.name).all()


def get_category(session: Session, category_id: int) -> FinancialCategory:
    category = session.get(FinancialCategory, category_id)
    if category is None:
        raise NotFoundError(MSG_CATEGORY_NOT_FOUND)
    return category


def _ensure_unique_name(session: Session, name: str, exclude_id: int | None = None) -> None:
    query = session.query(FinancialCategory.id).filter(FinancialCategory.name == name)
    if exclude_id is not None:
        query = query.filter(FinancialCategory.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(MSG_CATEGORY_EXISTS)


def _commit(session: Session, conflict_message: str) -> None:
    """Commit; a unique-constraint race surfaces as ConflictError."""
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(conflict_message) from None


def create_category(session: Session, data: CategoryCreate, actor: Account) -> FinancialCategory:
    _ensure_unique_name(session, data.name)
    category = FinancialCategory(name=data.name, description=data.description, active=True)
    session.add(category)
    audit.record(
        session,
        actor.id,
        "creacion_categoria",
        f"Categoría financiera creada: {data.name}",
        {"name": data.name},
    )
    _commit(session, MSG_CATEGORY_EXISTS)
    logger.info("Category created", extra={"category_id": category.id, "actor_id": actor.id})
    return category


def update_category(
    session: Session, category_id: int, data: CategoryUpdate, actor: Account
) -> FinancialCategory:
    category = get_category(session, category_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No se enviaron cambios")
    if "name" in changes:
        _ensure_unique_name(session, changes["name"], exclude_id=category.id)
    for field, value in changes.items():
        setattr(category, field, value)
    audit.record(
        session,
        actor.id,
        "actualizacion_categoria",
        f"Categoría financiera {category.id} actualizada",
        {"category_id": category.id, "changes": changes},
    )
    _commit(session, MSG_CATEGORY_EXISTS)
    return category


def deactivate_category(session: Session, category_id: int, actor: Account) -> FinancialCategory:
    """Soft delete: clears `active`. A category with movements cannot be deleted."""
    category = get_category(session, category_id)
    in_use = (
        session.query(FinancialMovement.id)
        .filter(FinancialMovement.category_id == category.id)
        .first()
    )
    if in_use is not None:
        raise ConflictError("No se puede eliminar la categoría porque tiene movimientos asociados")
    category.active = False
    audit.record(
        session,
        actor.id,
        "desactivacion_categoria",
        f"Categoría financiera desactivada: {category.name}",
        {"category_id": category.id},
    )
    session.commit()
    return category


def list_movements(
    session: Session,
    movement_type: str | None = None,
    category_id: int | None = None,
) -> list[FinancialMovement]:
    """Ledger movements, newest first, optionally filtered by type and category."""
    query = session.query(FinancialMovement)
    if movement_type is not None:
        query = query.filter(FinancialMovement.movement_type == movement_type)
    if category_id is not None:
        query = query.filter(FinancialMovement.category_id == category_id)
    return query.order_by(FinancialMovement.occurred_at.desc(), FinancialMovement.id.desc()).all()


def get_movement(session: Session, movement_id: int) -> FinancialMovement:
    movement = session.get(FinancialMovement, movement_id)
    if movement is None:
        raise NotFoundError(MSG_MOVEMENT_NOT_FOUND)
    return movement


def _active_category(session: Session, category_id: int) -> FinancialCategory:
    category = session.get(FinancialCategory, category_id)
    if category is None or not category.active:
        raise ValidationError("La categoría no existe")
    return category


def create_movement(session: Session, data: MovementCreate, actor: Account) -> FinancialMovement:
    category = _active_category(session, data.category_id)
    movement = FinancialMovement(
        movement_type=data.movement_type,
        category=category,
        details=data.details,
        amount=data.amount,
        occurred_at=data.occurred_at or datetime.now(UTC),
    )
    session.add(movement)
    audit.record(
        session,
        actor.id,
        "creacion_movimiento",
        f"Movimiento de {data.movement_type} por {data.amount} en {category.name}",
        {
            "movement_type": data.movement_type,
            "category_id": category.id,
            "amount": str(data.amount),
        },
    )
    session.commit()
    logger.info(
        "Movement created",
        extra={"movement_id": movement.id, "movement_type": data.movement_type, "actor_id": actor.id},
    )
    return movement


def _ensure_editable(movement: FinancialMovement) -> None:
    if movement.payment_id is not None:
        raise ConflictError(MSG_PAYMENT_MOVEMENT)


def update_movement(
    session: Session, movement_id: int, data: MovementUpdate, actor: Account
) -> FinancialMovement:
    movement = get_movement(session, movement_id)
    _ensure_editable(movement)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No se enviaron cambios")
    if "category_id" in changes:
        movement.category = _active_category(session, changes.pop("category_id"))
    for field, value in changes.items():
        setattr(movement, field, value)
    audit.record(
        session,
        actor.id,
        "actualizacion_movimiento",
        f"Movimiento {movement.id} actualizado",
        {
            "movement_id": movement.id,
            "fields": sorted(data.model_dump(exclude_unset=True, exclude_none=True)),
        },
    )
    session.commit()
    return movement


def delete_movement(session: Session, movement_id: int, actor: Account) -> None:
    movement = get_movement(session, movement_id)
    _ensure_editable(movement)
    audit.record(
        session,
        actor.id,
        "eliminacion_movimiento",
        f"Movimiento {movement.id} eliminado",
        {
            "movement_id": movement.id,
            "movement_type": movement.movement_type,
            "amount": str(movement.amount),
        },
    )
    session.delete(movement)
    session.commit()


def summary(session: Session) -> dict:
    """Total income, total expense and their difference over every movement."""
    income = Decimal(0)
    expense = Decimal(0)
    count = 0
    for movement_type, amount in session.query(
        FinancialMovement.movement_type, FinancialMovement.amount
    ):
        count += 1
        if movement_type == MOVEMENT_INCOME:
            income += Decimal(amount)
        elif movement_type == MOVEMENT_EXPENSE:
            expense += Decimal(amount)
    return {
        "total_income": float(income),
        "total_expense": float(expense),
        "balance": float(income - expense),
        "movement_count": count,
    }
