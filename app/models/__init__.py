"""SQLAlchemy ORM models."""

from app.models.account import Account
from app.models.audit import AuditEntry
from app.models.base import Base
from app.models.finance import FinancialCategory, FinancialMovement, Payment
from app.models.house import House
from app.models.requests import (
    DeactivationRequest,
    InfoEditRequest,
    ReactivationRequest,
    RegistrationRequest,
    RoleChangeRequest,
)
from app.models.role import Role

__all__ = [
    "Account",
    "AuditEntry",
    "Base",
    "DeactivationRequest",
    "FinancialCategory",
    "FinancialMovement",
    "House",
    "InfoEditRequest",
    "Payment",
    "ReactivationRequest",
    "RegistrationRequest",
    "Role",
    "RoleChangeRequest",
]
