"""
Generic approval workflow: submit → list pending → approve/reject.

One WorkflowEngine drives every request kind. Kind-specific behavior
(payload validation, eligibility, the mutation applied on approval, audit
wording) lives in RequestKind subclasses; see app.services.request_kinds.

Every Submit and Review runs in a single transaction on the injected session:
the request row, the target mutation and the audit entry commit together or
not at all. Review claims the request with a conditional
UPDATE ... WHERE state = 'pendiente' and treats zero affected rows as already
processed, so two concurrent reviews cannot both apply the mutation.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar

import pydantic
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    format_validation_errors,
)
from app.models import Account
from app.models.requests import REQUEST_STATES, STATE_APPROVED, STATE_PENDING, STATE_REJECTED
from app.schemas.requests import MOTIVO_MAX_LEN, MOTIVO_MIN_LEN, RequestOut
from app.services import audit
from app.services.access import Capability, ensure_allowed

logger = logging.getLogger(__name__)

MSG_NOT_FOUND = "Solicitud no encontrada"
MSG_ALREADY_PROCESSED = "La solicitud ya fue procesada"
MSG_OWN_REQUEST = "No puedes revisar tu propia solicitud"


class Decision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class RequestKind(ABC):
    """
    Descriptor for one request kind (strategy object used by WorkflowEngine).

    Subclasses set the class attributes and implement build (eligibility checks
    plus the new row), same_target (what counts as a duplicate pending request)
    and apply (the mutation performed on approval).
    """

    slug: ClassVar[str]
    # Suffix of the audit action types: solicitud_<label>, aprobacion_<label>, rechazo_<label>.
    label: ClassVar[str]
    model: ClassVar[type]
    payload_model: ClassVar[type[pydantic.BaseModel]]
    out_model: ClassVar[type[RequestOut]]
    # Public kinds can be submitted without a session (the submitter has no usable account).
    public: ClassVar[bool] = False
    # Reviewer may not review a request they submitted.
    requires_separation_of_duties: ClassVar[bool] = True
    submit_capability: ClassVar[Capability | None] = None
    duplicate_message: ClassVar[str] = "Ya existe una solicitud pendiente para este usuario"
    submitted_message: ClassVar[str] = (
        "Solicitud enviada. Pendiente de aprobación por un administrador."
    )
    approved_message: ClassVar[str] = "Solicitud aprobada"
    rejected_message: ClassVar[str] = "Solicitud rechazada"

    @property
    def submit_action(self) -> str:
        return f"solicitud_{self.label}"

    @property
    def approve_action(self) -> str:
        return f"aprobacion_{self.label}"

    @property
    def reject_action(self) -> str:
        return f"rechazo_{self.label}"

    def parse(self, payload: pydantic.BaseModel | Mapping[str, Any]) -> pydantic.BaseModel:
        """Validate a raw payload against payload_model; pydantic errors become ValidationError."""
        if isinstance(payload, self.payload_model):
            return payload
        try:
            return self.payload_model.model_validate(payload)
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Errores de validación",
                errors=format_validation_errors(e.errors()),
            ) from e

    @abstractmethod
    def build(self, session: Session, payload: Any, submitter: Account | None) -> Any:
        """Check eligibility and return an unsaved request row (state is set by the engine)."""

    @abstractmethod
    def same_target(self, request: Any) -> Any:
        """SQL criterion matching other requests aimed at the same target as request."""

    @abstractmethod
    def apply(self, session: Session, request: Any, reviewer: Account) -> dict[str, Any]:
        """Mutate the target for an approved request; return extra audit data."""

    def describe_submission(self, request: Any) -> str:
        return f"Solicitud de {self.label} enviada"

    def describe_approval(self, request: Any) -> str:
        return f"Solicitud de {self.label} aprobada (ID {request.id})"

    def describe_rejection(self, request: Any) -> str:
        return f"Solicitud de {self.label} rechazada (ID {request.id})"


def _clean_review_comment(decision: Decision, comment: str | None) -> str | None:
    text = comment.strip() if comment else ""
    if decision is Decision.REJECT:
        if not text:
            raise ValidationError("El motivo del rechazo es obligatorio")
        if not (MOTIVO_MIN_LEN <= len(text) <= MOTIVO_MAX_LEN):
            raise ValidationError(
                f"El motivo debe tener entre {MOTIVO_MIN_LEN} y {MOTIVO_MAX_LEN} caracteres"
            )
        return text
    if len(text) > MOTIVO_MAX_LEN:
        raise ValidationError(f"El comentario no puede exceder {MOTIVO_MAX_LEN} caracteres")
    return text or None


class WorkflowEngine:
    """Runs the submit/list/review protocol for any RequestKind on one DB session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def submit(
        self,
        kind: RequestKind,
        payload: pydantic.BaseModel | Mapping[str, Any],
        submitter: Account | None = None,
    ) -> Any:
        """
        Create a request in state 'pendiente'.

        Raises ValidationError for bad input, NotFoundError when the target does
        not exist, ConflictError for ineligible targets or a duplicate pending
        request, AuthenticationError/AuthorizationError for non-public kinds.
        """
        data = kind.parse(payload)
        if not kind.public:
            if submitter is None:
                raise AuthenticationError("No autenticado")
            if kind.submit_capability is not None:
                ensure_allowed(submitter.role_name, kind.submit_capability)

        try:
            request = kind.build(self.session, data, submitter)
            duplicate = (
                self.session.query(kind.model)
                .filter(kind.model.state == STATE_PENDING, kind.same_target(request))
                .first()
            )
            if duplicate is not None:
                raise ConflictError(kind.duplicate_message)

            request.state = STATE_PENDING
            request.submitter_id = submitter.id if submitter is not None else None
            self.session.add(request)
            self.session.flush()

            if submitter is not None:
                audit.record(
                    self.session,
                    submitter.id,
                    kind.submit_action,
                    kind.describe_submission(request),
                    {"request_id": request.id, "target_account_id": request.target_account_id},
                )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "Request submitted",
            extra={
                "request_kind": kind.slug,
                "request_id": request.id,
                "submitter_id": request.submitter_id,
            },
        )
        return request

    def list_pending(self, kind: RequestKind) -> list[Any]:
        """Pending requests of one kind, newest first."""
        return self.list_requests(kind, STATE_PENDING)

    def list_requests(self, kind: RequestKind, state: str | None) -> list[Any]:
        """Requests of one kind in the given state (every state when None), newest first."""
        if state is not None and state not in REQUEST_STATES:
            raise ValidationError("Estado de solicitud inválido")
        model = kind.model
        query = self.session.query(model)
        if state is not None:
            query = query.filter(model.state == state)
        return query.order_by(model.submitted_at.desc(), model.id.desc()).all()

    def get(self, kind: RequestKind, request_id: int) -> Any:
        request = self.session.get(kind.model, request_id)
        if request is None:
            raise NotFoundError(MSG_NOT_FOUND)
        return request

    def review(
        self,
        kind: RequestKind,
        request_id: int,
        decision: Decision,
        reviewer: Account,
        comment: str | None = None,
    ) -> Any:
        """
        Approve or reject a pending request.

        Approval applies the kind's mutation; rejection only records the
        decision and the reason (10-500 characters). Either way the state change
        and the audit entry commit atomically; on any error the request stays
        'pendiente'.
        """
        ensure_allowed(reviewer.role_name, Capability.REVIEW_REQUESTS)
        comment = _clean_review_comment(decision, comment)
        model = kind.model

        try:
            request = self.get(kind, request_id)
            if request.state != STATE_PENDING:
                raise ConflictError(MSG_ALREADY_PROCESSED)
            if kind.requires_separation_of_duties and request.submitter_id == reviewer.id:
                raise ConflictError(MSG_OWN_REQUEST)

            new_state = STATE_APPROVED if decision is Decision.APPROVE else STATE_REJECTED
            claimed = self.session.execute(
                update(model)
                .where(model.id == request_id, model.state == STATE_PENDING)
                .values(
                    state=new_state,
                    reviewed_at=datetime.now(UTC),
                    reviewer_id=reviewer.id,
                    review_comment=comment,
                )
                .execution_options(synchronize_session=False)
            ).rowcount
            if claimed != 1:
                raise ConflictError(MSG_ALREADY_PROCESSED)

            if decision is Decision.APPROVE:
                extra = kind.apply(self.session, request, reviewer)
                action = kind.approve_action
                description = kind.describe_approval(request)
            else:
                extra = {"motivo": comment}
                action = kind.reject_action
                description = kind.describe_rejection(request)

            audit.record(
                self.session,
                reviewer.id,
                action,
                description,
                {"request_id": request.id, **extra},
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "Request reviewed",
            extra={
                "request_kind": kind.slug,
                "request_id": request_id,
                "decision": decision.value,
                "reviewer_id": reviewer.id,
            },
        )
        return request
