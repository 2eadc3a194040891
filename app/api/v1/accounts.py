"""Account listing for reviewers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.auth import require_capability
from app.core.database import get_db
from app.models import Account
from app.models.account import ACCOUNT_STATUSES
from app.schemas.accounts import AccountOut
from app.schemas.common import ApiResponse
from app.services.access import Capability

router = APIRouter()


@router.get("", response_model=ApiResponse[list[AccountOut]])
def list_accounts(
    _reviewer: Annotated[Account, Depends(require_capability(Capability.LIST_ACCOUNTS))],
    db: Annotated[Session, Depends(get_db)],
    status: Annotated[str | None, Query(description="Filter by account status")] = None,
) -> ApiResponse[list[AccountOut]]:
    """List all accounts, optionally filtered by status (pending, active, suspended)."""
    query = db.query(Account)
    if status is not None and status in ACCOUNT_STATUSES:
        query = query.filter(Account.status == status)
    accounts = query.order_by(Account.id).all()
    return ApiResponse(data=[AccountOut.model_validate(a) for a in accounts])
