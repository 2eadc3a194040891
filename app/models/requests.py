"""
ORM models for the five approval-request kinds.

All kinds share RequestMixin (lifecycle and review columns); each adds its own
payload columns. A request starts as 'pendiente' and moves exactly once to
'aprobada' or 'rechazada'.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import declared_attr, relationship

from app.models.base import Base

STATE_PENDING = "pendiente"
STATE_APPROVED = "aprobada"
STATE_REJECTED = "rechazada"

REQUEST_STATES = (STATE_PENDING, STATE_APPROVED, STATE_REJECTED)

CHANGE_ASSIGN_ADMIN = "asignar_admin"
CHANGE_REMOVE_ADMIN = "remover_admin"


class RequestMixin:
    """Columns shared by every request kind."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    state = Column(
        String(16),
        nullable=False,
        default=STATE_PENDING,
        server_default=STATE_PENDING,
        index=True,
    )
    submitted_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_comment = Column(Text, nullable=True)

    @declared_attr
    def submitter_id(cls):
        # Null for public submissions (registration, reactivation).
        return Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def target_account_id(cls):
        # Null for registrations until approval creates the account.
        return Column(
            Integer,
            ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        )

    @declared_attr
    def reviewer_id(cls):
        return Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def target_account(cls):
        return relationship("Account", foreign_keys=f"{cls.__name__}.target_account_id")

    @declared_attr
    def submitter(cls):
        return relationship("Account", foreign_keys=f"{cls.__name__}.submitter_id")


class RegistrationRequest(RequestMixin, Base):
    """New resident asking for an account; approval creates it."""

    __tablename__ = "registration_requests"

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)
    house_number = Column(String(10), nullable=True)


class InfoEditRequest(RequestMixin, Base):
    """
    Account holder asking to change their own name, email or phone.

    new_* columns are null when that field was not changed at submission time;
    approval only writes the non-null ones.
    """

    __tablename__ = "info_edit_requests"

    current_full_name = Column(String(255), nullable=False)
    new_full_name = Column(String(255), nullable=True)
    current_email = Column(String(255), nullable=False)
    new_email = Column(String(255), nullable=True)
    current_phone = Column(String(20), nullable=True)
    new_phone = Column(String(20), nullable=True)


class DeactivationRequest(RequestMixin, Base):
    __tablename__ = "deactivation_requests"

    motivo = Column(Text, nullable=False)


class ReactivationRequest(RequestMixin, Base):
    """Suspended account asking to be reactivated, possibly in another house."""

    __tablename__ = "reactivation_requests"

    motivo = Column(Text, nullable=False)
    house_number = Column(String(10), nullable=False)


class RoleChangeRequest(RequestMixin, Base):
    __tablename__ = "role_change_requests"

    current_role = Column(String(50), nullable=False)
    new_role = Column(String(50), nullable=False)
    change_type = Column(String(32), nullable=False)
    motivo = Column(Text, nullable=True)
