"""Shared SQLite-backed test case and account factory."""

import os
import tempfile
import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.security import hash_password
from app.models import Account, AuditEntry, House, Role
from app.models.account import ACCOUNT_ACTIVE
from app.models.base import Base
from app.models.role import ROLE_VECINO
from app.scripts.seed import seed

PASSWORD = "Secret123"
PASSWORD_HASH = hash_password(PASSWORD)


def make_account(
    session: Session,
    email: str,
    role: str = ROLE_VECINO,
    house_number: str | None = "12",
    status: str = ACCOUNT_ACTIVE,
    full_name: str | None = None,
    phone: str | None = None,
) -> Account:
    role_row = session.query(Role).filter(Role.name == role).one()
    house = None
    if house_number is not None:
        house = session.query(House).filter(House.house_number == house_number).one()
    account = Account(
        full_name=full_name or email.split("@")[0].title(),
        email=email,
        phone=phone,
        password_hash=PASSWORD_HASH,
        role=role_row,
        house_id=house.id if house is not None else None,
        status=status,
        failed_login_attempts=0,
    )
    session.add(account)
    session.commit()
    return account


class DatabaseTestCase(unittest.TestCase):
    """
    Each test gets a fresh SQLite file with roles and houses seeded.

    A file (not :memory:) so that several sessions can see each other's commits.
    """

    def setUp(self) -> None:
        fd, self.db_path = tempfile.mkstemp(suffix=".sqlite3")
        os.close(fd)
        self.engine = create_engine(f"sqlite:///{self.db_path}")
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False)
        self.session = self.Session()
        seed(self.session)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()
        os.remove(self.db_path)

    def audit_entries(self, action_type: str) -> list[AuditEntry]:
        self.session.expire_all()
        return (
            self.session.query(AuditEntry)
            .filter(AuditEntry.action_type == action_type)
            .order_by(AuditEntry.id)
            .all()
        )
