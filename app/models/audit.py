"""Append-only audit trail of state-changing actions. Rows are never updated or deleted."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from app.models.base import Base, JSONType


class AuditEntry(Base):
    __tablename__ = "audit_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Null for actions taken without a session (public registration/reactivation).
    actor_account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action_type = Column(String(64), nullable=False, index=True)
    description = Column(Text, nullable=False)
    # Structured data, always including request_id for workflow actions.
    extra_data = Column(JSONType, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
