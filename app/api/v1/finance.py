"""Financial categories and ledger movements. Administrators only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.auth import require_capability
from app.core.database import get_db
from app.models import Account
from app.schemas.common import ApiResponse
from app.schemas.finance import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    LedgerSummary,
    MovementCreate,
    MovementOut,
    MovementType,
    MovementUpdate,
)
from app.services import finance as finance_service
from app.services.access import Capability

categories_router = APIRouter()
movements_router = APIRouter()

FinanceManager = Annotated[Account, Depends(require_capability(Capability.MANAGE_FINANCES))]
DbSession = Annotated[Session, Depends(get_db)]


@categories_router.get("", response_model=ApiResponse[list[CategoryOut]])
def list_categories(
    _manager: FinanceManager,
    db: DbSession,
    include_inactive: Annotated[bool, Query()] = False,
) -> ApiResponse[list[CategoryOut]]:
    categories = finance_service.list_categories(db, include_inactive=include_inactive)
    return ApiResponse(data=[CategoryOut.model_validate(c) for c in categories])


@categories_router.post("", response_model=ApiResponse[CategoryOut], status_code=201)
def create_category(
    body: CategoryCreate, manager: FinanceManager, db: DbSession
) -> ApiResponse[CategoryOut]:
    category = finance_service.create_category(db, body, manager)
    return ApiResponse(
        message="Categoría creada exitosamente",
        data=CategoryOut.model_validate(category),
    )


@categories_router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
def update_category(
    category_id: int, body: CategoryUpdate, manager: FinanceManager, db: DbSession
) -> ApiResponse[CategoryOut]:
    category = finance_service.update_category(db, category_id, body, manager)
    return ApiResponse(
        message="Categoría actualizada exitosamente",
        data=CategoryOut.model_validate(category),
    )


@categories_router.delete("/{category_id}", response_model=ApiResponse[CategoryOut])
def delete_category(
    category_id: int, manager: FinanceManager, db: DbSession
) -> ApiResponse[CategoryOut]:
    """Soft delete; refused with 409 while the category has movements."""
    category = finance_service.deactivate_category(db, category_id, manager)
    return ApiResponse(
        message="Categoría desactivada exitosamente",
        data=CategoryOut.model_validate(category),
    )


@movements_router.get("", response_model=ApiResponse[list[MovementOut]])
def list_movements(
    _manager: FinanceManager,
    db: DbSession,
    movement_type: Annotated[MovementType | None, Query()] = None,
    category_id: Annotated[int | None, Query(ge=1)] = None,
) -> ApiResponse[list[MovementOut]]:
    movements = finance_service.list_movements(db, movement_type, category_id)
    return ApiResponse(data=[MovementOut.model_validate(m) for m in movements])


@movements_router.get("/summary", response_model=ApiResponse[LedgerSummary])
def movements_summary(_manager: FinanceManager, db: DbSession) -> ApiResponse[LedgerSummary]:
    return ApiResponse(data=LedgerSummary(**finance_service.summary(db)))


@movements_router.post("", response_model=ApiResponse[MovementOut], status_code=201)
def create_movement(
    body: MovementCreate, manager: FinanceManager, db: DbSession
) -> ApiResponse[MovementOut]:
    movement = finance_service.create_movement(db, body, manager)
    return ApiResponse(
        message="Movimiento creado exitosamente",
        data=MovementOut.model_validate(movement),
    )


@movements_router.put("/{movement_id}", response_model=ApiResponse[MovementOut])
def update_movement(
    movement_id: int, body: MovementUpdate, manager: FinanceManager, db: DbSession
) -> ApiResponse[MovementOut]:
    """Movements booked from a payment are read-only (409)."""
    movement = finance_service.update_movement(db, movement_id, body, manager)
    return ApiResponse(
        message="Movimiento actualizado exitosamente",
        data=MovementOut.model_validate(movement),
    )


@movements_router.delete("/{movement_id}", response_model=ApiResponse[None])
def delete_movement(movement_id: int, manager: FinanceManager, db: DbSession) -> ApiResponse[None]:
    finance_service.delete_movement(db, movement_id, manager)
    return ApiResponse(message="Movimiento eliminado exitosamente")
