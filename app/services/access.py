"""Role-based access gate: which role may perform which operation."""

from enum import Enum

from app.core.exceptions import AuthorizationError
from app.models.role import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_VECINO


class Capability(str, Enum):
    VIEW_HOUSES = "view_houses"
    SUBMIT_INFO_EDIT = "submit_info_edit"
    SUBMIT_DEACTIVATION = "submit_deactivation"
    SUBMIT_ROLE_CHANGE = "submit_role_change"
    REVIEW_REQUESTS = "review_requests"
    LIST_ACCOUNTS = "list_accounts"
    EDIT_PAYMENT_STATUS = "edit_payment_status"
    VIEW_OWN_PAYMENTS = "view_own_payments"
    CONFIRM_PAYMENT = "confirm_payment"
    MANAGE_FINANCES = "manage_finances"


_RESIDENT_CAPABILITIES = frozenset(
    {
        Capability.VIEW_HOUSES,
        Capability.SUBMIT_INFO_EDIT,
        Capability.SUBMIT_DEACTIVATION,
        Capability.SUBMIT_ROLE_CHANGE,
        Capability.VIEW_OWN_PAYMENTS,
        Capability.CONFIRM_PAYMENT,
    }
)

ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    ROLE_VECINO: _RESIDENT_CAPABILITIES,
    ROLE_ADMIN: _RESIDENT_CAPABILITIES
    | {
        Capability.REVIEW_REQUESTS,
        Capability.LIST_ACCOUNTS,
        Capability.EDIT_PAYMENT_STATUS,
        Capability.MANAGE_FINANCES,
    },
}


def is_allowed(role: str, capability: Capability) -> bool:
    """super_admin passes every check; other roles need the capability in ROLE_CAPABILITIES."""
    if role == ROLE_SUPER_ADMIN:
        return True
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def is_reviewer(role: str) -> bool:
    return is_allowed(role, Capability.REVIEW_REQUESTS)


def ensure_allowed(role: str, capability: Capability) -> None:
    """Raise AuthorizationError (403) when role lacks capability."""
    if not is_allowed(role, capability):
        raise AuthorizationError("No tienes permisos para acceder a este recurso")
