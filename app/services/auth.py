"""Login with lockout, and password recovery by reset token."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from app.core.security import (
    generate_reset_token,
    hash_password,
    password_strength_errors,
    verify_password,
)
from app.models import Account
from app.models.account import ACCOUNT_ACTIVE, ACCOUNT_PENDING, ACCOUNT_SUSPENDED

logger = logging.getLogger(__name__)

MSG_BAD_CREDENTIALS = "Credenciales incorrectas"

_STATUS_LABELS = {
    ACCOUNT_PENDING: "pendiente de aprobación",
    ACCOUNT_SUSPENDED: "suspendida",
}


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (SQLite) as UTC so they compare with aware ones."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def authenticate(session: Session, email: str, password: str) -> Account:
    """
    Check credentials and return the account, committing the login bookkeeping.

    Unknown email and wrong password produce the same AuthenticationError. After
    MAX_LOGIN_ATTEMPTS consecutive failures the account is locked for
    LOCKOUT_TIME_MINUTES (AuthorizationError while locked).
    """
    account = session.query(Account).filter(Account.email == email).first()
    if account is None:
        raise AuthenticationError(MSG_BAD_CREDENTIALS)

    now = datetime.now(UTC)
    locked_until = _as_utc(account.locked_until)
    if locked_until is not None and locked_until > now:
        minutes = max(1, int((locked_until - now).total_seconds() // 60) + 1)
        raise AuthorizationError(
            f"Cuenta bloqueada temporalmente. Intenta de nuevo en {minutes} minutos"
        )

    if not verify_password(password, account.password_hash):
        account.failed_login_attempts = (account.failed_login_attempts or 0) + 1
        if account.failed_login_attempts >= settings.MAX_LOGIN_ATTEMPTS:
            account.locked_until = now + timedelta(minutes=settings.LOCKOUT_TIME_MINUTES)
            account.failed_login_attempts = 0
            logger.info(
                "Account locked after failed logins",
                extra={"account_id": account.id},
            )
        session.commit()
        raise AuthenticationError(MSG_BAD_CREDENTIALS)

    if account.status != ACCOUNT_ACTIVE:
        label = _STATUS_LABELS.get(account.status, account.status)
        raise AuthorizationError(f"Tu cuenta está {label}")

    account.failed_login_attempts = 0
    account.locked_until = None
    account.last_login_at = now
    session.commit()
    return account


def request_password_reset(session: Session, email: str) -> str | None:
    """
    Issue a reset token for an active account; returns None for unknown emails.

    Callers must answer identically either way so emails cannot be enumerated.
    """
    account = session.query(Account).filter(Account.email == email).first()
    if account is None or account.status != ACCOUNT_ACTIVE:
        return None
    token = generate_reset_token()
    account.reset_token = token
    account.reset_token_expires_at = datetime.now(UTC) + timedelta(
        minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES
    )
    session.commit()
    logger.info("Password reset token issued", extra={"account_id": account.id})
    return token


def reset_password(session: Session, token: str, new_password: str) -> Account:
    """Set a new password from a valid, unexpired reset token; the token is single-use."""
    errors = password_strength_errors(new_password)
    if errors:
        raise ValidationError(
            "La contraseña no cumple con los requisitos de seguridad",
            errors=[{"field": "new_password", "message": e} for e in errors],
        )
    account = session.query(Account).filter(Account.reset_token == token).first()
    expires_at = _as_utc(account.reset_token_expires_at) if account is not None else None
    if account is None or expires_at is None or expires_at < datetime.now(UTC):
        raise ValidationError("Token inválido o expirado")

    account.password_hash = hash_password(new_password)
    account.reset_token = None
    account.reset_token_expires_at = None
    account.failed_login_attempts = 0
    account.locked_until = None
    session.commit()
    return account
