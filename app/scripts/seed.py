"""
Seed reference data: the three roles, houses "0".."120" and, optionally, a
super administrator. Safe to run more than once. Run from project root:
  python -m app.scripts.seed [--admin-email EMAIL --admin-password PASSWORD]
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import session_scope
from app.core.logging_config import configure_logging
from app.models import Account, House, Role
from app.models.house import PAYMENT_AL_DIA
from app.models.role import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_VECINO
from app.scripts.create_user import create_account

logger = logging.getLogger(__name__)

ROLE_DESCRIPTIONS = {
    ROLE_VECINO: "Residente de la comunidad",
    ROLE_ADMIN: "Administrador de la comunidad",
    ROLE_SUPER_ADMIN: "Super administrador con acceso total",
}

# House "0" is reserved for administrators who do not live in the community.
HOUSE_NUMBERS = [str(n) for n in range(0, 121)]


def seed_roles(db: Session) -> int:
    existing = {name for (name,) in db.query(Role.name).all()}
    created = 0
    for name, description in ROLE_DESCRIPTIONS.items():
        if name not in existing:
            db.add(Role(name=name, description=description))
            created += 1
    return created


def seed_houses(db: Session) -> int:
    existing = {number for (number,) in db.query(House.house_number).all()}
    created = 0
    for number in HOUSE_NUMBERS:
        if number not in existing:
            db.add(House(house_number=number, payment_status=PAYMENT_AL_DIA))
            created += 1
    return created


def seed(db: Session) -> tuple[int, int]:
    """Insert missing roles and houses; returns (roles_created, houses_created)."""
    roles = seed_roles(db)
    houses = seed_houses(db)
    db.commit()
    return roles, houses


def main() -> int:
    configure_logging(settings.LOG_LEVEL)
    parser = argparse.ArgumentParser(description="Seed roles, houses and a super administrator.")
    parser.add_argument("--admin-email", default=None)
    parser.add_argument("--admin-password", default=None)
    parser.add_argument("--admin-name", default="Super Administrador")
    args = parser.parse_args()

    try:
        with session_scope() as db:
            roles, houses = seed(db)
            logger.info("Seed complete", extra={"roles_created": roles, "houses_created": houses})
            print(f"Roles created: {roles}. Houses created: {houses}.")

            if not (args.admin_email and args.admin_password):
                return 0
            email = args.admin_email.strip().lower()
            if db.query(Account).filter(Account.email == email).first() is not None:
                print(f"Account '{email}' already exists; skipping.")
                return 0
            create_account(
                db,
                email,
                args.admin_password,
                args.admin_name,
                ROLE_SUPER_ADMIN,
                house_number="0",
            )
            print(f"Created super administrator '{email}'.")
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
