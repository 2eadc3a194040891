"""Pydantic request/response schemas."""

from app.schemas.accounts import AccountOut
from app.schemas.auth import LoginRequest, ProfileOut, TokenData
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.health import HealthResponse
from app.schemas.houses import HouseOut, HouseResidents, HouseSummary, PaymentStatusUpdate
from app.schemas.requests import (
    ApproveIn,
    DeactivationIn,
    InfoEditIn,
    ReactivationIn,
    RegistrationIn,
    RejectIn,
    RoleChangeIn,
)

__all__ = [
    "AccountOut",
    "ApiResponse",
    "ApproveIn",
    "DeactivationIn",
    "ErrorResponse",
    "HealthResponse",
    "HouseOut",
    "HouseResidents",
    "HouseSummary",
    "InfoEditIn",
    "LoginRequest",
    "PaymentStatusUpdate",
    "ProfileOut",
    "ReactivationIn",
    "RegistrationIn",
    "RejectIn",
    "RoleChangeIn",
    "TokenData",
]
