"""
Create an active account (e.g. the first administrator) without going through
a registration request. Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD "FULL NAME" [role] [--house NUMBER]
Example:
  python -m app.scripts.create_user admin@example.com 'S3cure-pass' "Ana Pérez" administrador --house 0
"""
import argparse
import logging
import sys
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import session_scope
from app.core.logging_config import configure_logging
from app.core.security import (
    FULL_NAME_MAX_LEN,
    FULL_NAME_MIN_LEN,
    hash_password,
    password_strength_errors,
)
from app.models import Account, House, Role
from app.models.account import ACCOUNT_ACTIVE
from app.models.role import ROLE_NAMES, ROLE_VECINO

logger = logging.getLogger(__name__)


def create_account(
    db: Session,
    email: str,
    password: str,
    full_name: str,
    role_name: str = ROLE_VECINO,
    house_number: str | None = None,
) -> Account:
    """Insert an active account; raises ValueError on invalid input or missing reference data."""
    email = email.strip().lower()
    full_name = full_name.strip()
    if not (FULL_NAME_MIN_LEN <= len(full_name) <= FULL_NAME_MAX_LEN):
        raise ValueError("Invalid full name length.")
    errors = password_strength_errors(password)
    if errors:
        raise ValueError("; ".join(errors))
    if db.query(Account).filter(Account.email == email).first() is not None:
        raise ValueError(f"Account '{email}' already exists.")

    role = db.query(Role).filter(Role.name == role_name).first()
    if role is None:
        raise ValueError(f"Role '{role_name}' not found; run app.scripts.seed first.")
    house = None
    if house_number is not None:
        house = db.query(House).filter(House.house_number == house_number).first()
        if house is None:
            raise ValueError(f"House '{house_number}' not found.")

    account = Account(
        full_name=full_name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        house_id=house.id if house is not None else None,
        status=ACCOUNT_ACTIVE,
        failed_login_attempts=0,
        approved_at=datetime.now(UTC),
    )
    db.add(account)
    db.commit()
    return account


def main() -> int:
    configure_logging(settings.LOG_LEVEL)
    parser = argparse.ArgumentParser(description="Create an active Residencial account.")
    parser.add_argument("email", help="Account email")
    parser.add_argument("password", help="Password (8+ chars, upper, lower, digit)")
    parser.add_argument("full_name", help="Full name (3-255 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_VECINO, choices=ROLE_NAMES)
    parser.add_argument("--house", dest="house_number", default=None, help="House number")
    args = parser.parse_args()

    try:
        with session_scope() as db:
            account = create_account(
                db, args.email, args.password, args.full_name, args.role, args.house_number
            )
            logger.info("Account created", extra={"account_id": account.id, "role": args.role})
            print(f"Created account '{account.email}' with role '{args.role}'.")
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
