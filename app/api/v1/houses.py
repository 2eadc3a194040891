"""House listing, residents per house, and payment-status edits."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require_capability
from app.core.database import get_db
from app.models import Account
from app.schemas.accounts import AccountOut
from app.schemas.common import ApiResponse
from app.schemas.houses import HouseOut, HouseResidents, HouseSummary, PaymentStatusUpdate
from app.services import houses as house_service
from app.services.access import Capability

router = APIRouter()


@router.get("", response_model=ApiResponse[list[HouseSummary]])
def list_houses(
    _account: Annotated[Account, Depends(require_capability(Capability.VIEW_HOUSES))],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[list[HouseSummary]]:
    rows = house_service.list_houses(db)
    return ApiResponse(
        data=[
            HouseSummary(
                house_number=house.house_number,
                payment_status=house.payment_status,
                account_count=count,
            )
            for house, count in rows
        ]
    )


@router.get("/{house_number}/accounts", response_model=ApiResponse[HouseResidents])
def list_house_accounts(
    house_number: str,
    _account: Annotated[Account, Depends(require_capability(Capability.VIEW_HOUSES))],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[HouseResidents]:
    house = house_service.get_house(db, house_number)
    residents = house_service.house_accounts(db, house)
    return ApiResponse(
        data=HouseResidents(
            house=HouseOut.model_validate(house),
            accounts=[AccountOut.model_validate(a) for a in residents],
        )
    )


@router.put("/{house_number}/payment-status", response_model=ApiResponse[HouseOut])
def update_payment_status(
    house_number: str,
    body: PaymentStatusUpdate,
    account: Annotated[Account, Depends(require_capability(Capability.EDIT_PAYMENT_STATUS))],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[HouseOut]:
    """Set the payment status of a house (al_dia, moroso, en_arreglo). Audited."""
    house = house_service.update_payment_status(db, house_number, body.payment_status, account)
    return ApiResponse(
        message="Estado de pago actualizado exitosamente",
        data=HouseOut.model_validate(house),
    )
