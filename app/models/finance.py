"""ORM models for house payments and the community's income/expense ledger."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from app.models.base import Base

MOVEMENT_INCOME = "ingreso"
MOVEMENT_EXPENSE = "gasto"

MOVEMENT_TYPES = (MOVEMENT_INCOME, MOVEMENT_EXPENSE)


class Payment(Base):
    """
    A payment made by a house, either recorded by an administrator or
    confirmed by a resident with an uploaded receipt.

    Every payment also books an income movement (FinancialMovement.payment_id).
    """

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    house_id = Column(
        Integer,
        ForeignKey("houses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    payment_method = Column(String(50), nullable=True)
    # Stored file name under UPLOAD_DIR, not a path.
    receipt_filename = Column(String(255), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    registered_by_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    house = relationship("House")

    @property
    def house_number(self) -> str:
        return self.house.house_number


class FinancialCategory(Base):
    """Category for ledger movements. Deleting only clears `active`."""

    __tablename__ = "financial_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True, server_default="true")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class FinancialMovement(Base):
    __tablename__ = "financial_movements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    movement_type = Column(String(16), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("financial_categories.id"), nullable=False, index=True)
    details = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    occurred_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    # Set for movements booked automatically from a payment; those are read-only.
    payment_id = Column(
        Integer,
        ForeignKey("payments.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    category = relationship("FinancialCategory", lazy="joined")
    payment = relationship("Payment")

    @property
    def category_name(self) -> str:
        return self.category.name

    @property
    def house_number(self) -> str | None:
        return self.payment.house.house_number if self.payment is not None else None
