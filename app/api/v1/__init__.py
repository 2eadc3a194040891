"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import accounts, auth, finance, health, houses, payments, requests

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
router.include_router(houses.router, prefix="/houses", tags=["houses"])
router.include_router(requests.router, prefix="/requests", tags=["requests"])
router.include_router(payments.router, prefix="/payments", tags=["payments"])
router.include_router(
    finance.categories_router, prefix="/financial-categories", tags=["finance"]
)
router.include_router(
    finance.movements_router, prefix="/financial-movements", tags=["finance"]
)
