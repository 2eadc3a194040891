"""ORM model for account roles (reference data, seeded once)."""

from sqlalchemy import Column, Integer, String, Text

from app.models.base import Base

ROLE_VECINO = "vecino"
ROLE_ADMIN = "administrador"
ROLE_SUPER_ADMIN = "super_admin"

ROLE_NAMES = (ROLE_VECINO, ROLE_ADMIN, ROLE_SUPER_ADMIN)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
