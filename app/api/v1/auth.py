"""JWT login, password recovery, and auth dependencies (get_current_account, require_capability)."""

from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import create_access_token, decode_access_token
from app.models import Account
from app.models.account import ACCOUNT_ACTIVE
from app.schemas.accounts import AccountOut
from app.schemas.auth import (
    AccountSummary,
    LoginRequest,
    PasswordRecoveryData,
    PasswordRecoveryRequest,
    PasswordResetRequest,
    ProfileOut,
    TokenData,
)
from app.schemas.common import ApiResponse
from app.schemas.houses import HouseOut, HouseResidents
from app.services import auth as auth_service
from app.services import houses as house_service
from app.services.access import Capability, ensure_allowed

router = APIRouter()
security = HTTPBearer(auto_error=False)

MSG_RECOVERY_SENT = "Si el correo existe, recibirás instrucciones para restablecer tu contraseña"


def get_optional_account(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> Account | None:
    """Dependency: the account behind a Bearer token, or None when no token was sent."""
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise AuthenticationError("Token inválido o expirado") from None
    try:
        account_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Token inválido") from None

    account = db.get(Account, account_id)
    if account is None:
        raise AuthenticationError("Usuario no encontrado")
    if account.status != ACCOUNT_ACTIVE:
        raise AuthorizationError("Tu cuenta no está activa")
    return account


def get_current_account(
    account: Annotated[Account | None, Depends(get_optional_account)],
) -> Account:
    """Dependency: require a valid Bearer JWT for an active account. Raises 401 if missing."""
    if account is None:
        raise AuthenticationError("No autenticado")
    return account


def require_capability(capability: Capability) -> Callable[..., Account]:
    """Dependency factory: authenticated account whose role grants capability (403 otherwise)."""

    def dependency(
        account: Annotated[Account, Depends(get_current_account)],
    ) -> Account:
        ensure_allowed(account.role_name, capability)
        return account

    return dependency


@router.post("/login", response_model=ApiResponse[TokenData])
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[TokenData]:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    account = auth_service.authenticate(db, body.email, body.password)
    token = create_access_token(sub=account.id, role=account.role_name)
    return ApiResponse(
        message="Inicio de sesión exitoso",
        data=TokenData(
            access_token=token,
            token_type="bearer",
            account=AccountSummary.model_validate(account),
        ),
    )


@router.get("/profile", response_model=ApiResponse[ProfileOut])
def get_profile(
    account: Annotated[Account, Depends(get_current_account)],
) -> ApiResponse[ProfileOut]:
    return ApiResponse(data=ProfileOut.model_validate(account))


@router.get("/my-house", response_model=ApiResponse[HouseResidents])
def get_my_house(
    account: Annotated[Account, Depends(get_current_account)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[HouseResidents]:
    """The caller's house and everyone registered in it."""
    if account.house is None:
        return ApiResponse(message="No tienes una casa asignada", data=None)
    residents = house_service.house_accounts(db, account.house)
    return ApiResponse(
        data=HouseResidents(
            house=HouseOut.model_validate(account.house),
            accounts=[AccountOut.model_validate(a) for a in residents],
        )
    )


@router.post("/password-recovery", response_model=ApiResponse[PasswordRecoveryData])
def password_recovery(
    body: PasswordRecoveryRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[PasswordRecoveryData]:
    """
    Issue a reset token. The response is the same whether or not the email exists;
    the token itself is only echoed back in dev (there is no e-mail delivery).
    """
    token = auth_service.request_password_reset(db, body.email)
    debug_token = token if settings.APP_ENV == "dev" else None
    return ApiResponse(
        message=MSG_RECOVERY_SENT,
        data=PasswordRecoveryData(debug_token=debug_token),
    )


@router.post("/password-reset", response_model=ApiResponse[None])
def password_reset(
    body: PasswordResetRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[None]:
    auth_service.reset_password(db, body.token, body.new_password)
    return ApiResponse(message="Contraseña restablecida exitosamente")
