"""ORM model for houses in the residential community."""

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base

PAYMENT_AL_DIA = "al_dia"
PAYMENT_MOROSO = "moroso"
PAYMENT_EN_ARREGLO = "en_arreglo"

PAYMENT_STATUSES = (PAYMENT_AL_DIA, PAYMENT_MOROSO, PAYMENT_EN_ARREGLO)


class House(Base):
    """
    One house of the community, identified by its house number ("0" is reserved
    for administrators who do not live in the community).
    """

    __tablename__ = "houses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    house_number = Column(String(10), nullable=False, unique=True, index=True)
    payment_status = Column(String(20), nullable=False, default=PAYMENT_AL_DIA)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    accounts = relationship("Account", back_populates="house")
