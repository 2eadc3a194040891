"""Audit trail: append entries inside the caller's transaction."""

from typing import Any

from sqlalchemy.orm import Session

from app.models import AuditEntry


def record(
    session: Session,
    actor_id: int | None,
    action_type: str,
    description: str,
    extra_data: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Add an audit entry to the session without committing.

    The entry becomes visible only when the caller commits the mutation it
    documents, so a rolled-back mutation leaves no audit trace.
    """
    entry = AuditEntry(
        actor_account_id=actor_id,
        action_type=action_type,
        description=description,
        extra_data=extra_data or {},
    )
    session.add(entry)
    return entry
