"""
Approval-request endpoints, one router per request kind.

build_kind_router generates the same five routes for every kind:
submit, list (pending by default, any state on request), detail,
approve and reject.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_account, require_capability
from app.core.database import get_db
from app.models import Account
from app.schemas.common import ApiResponse
from app.schemas.requests import ApproveIn, RejectIn
from app.services.access import Capability
from app.services.request_kinds import KINDS
from app.services.workflow import Decision, RequestKind, WorkflowEngine

# "todas" lists every state.
StateFilter = Literal["pendiente", "aprobada", "rechazada", "todas"]

Reviewer = Annotated[Account, Depends(require_capability(Capability.REVIEW_REQUESTS))]
DbSession = Annotated[Session, Depends(get_db)]


def build_kind_router(kind: RequestKind) -> APIRouter:
    router = APIRouter()
    payload_model = kind.payload_model
    out_model = kind.out_model

    if kind.public:

        @router.post(
            "",
            response_model=ApiResponse[out_model],
            status_code=status.HTTP_201_CREATED,
        )
        def submit_public(body: payload_model, db: DbSession) -> ApiResponse[out_model]:
            request = WorkflowEngine(db).submit(kind, body)
            return ApiResponse(
                message=kind.submitted_message,
                data=out_model.model_validate(request),
            )

    else:

        @router.post(
            "",
            response_model=ApiResponse[out_model],
            status_code=status.HTTP_201_CREATED,
        )
        def submit(
            body: payload_model,
            account: Annotated[Account, Depends(get_current_account)],
            db: DbSession,
        ) -> ApiResponse[out_model]:
            request = WorkflowEngine(db).submit(kind, body, submitter=account)
            return ApiResponse(
                message=kind.submitted_message,
                data=out_model.model_validate(request),
            )

    @router.get("", response_model=ApiResponse[list[out_model]])
    def list_requests(
        _reviewer: Reviewer,
        db: DbSession,
        state: Annotated[StateFilter, Query(description="Request state, or todas")] = "pendiente",
    ) -> ApiResponse[list[out_model]]:
        requests = WorkflowEngine(db).list_requests(kind, None if state == "todas" else state)
        return ApiResponse(data=[out_model.model_validate(r) for r in requests])

    @router.get("/{request_id}", response_model=ApiResponse[out_model])
    def get_request(request_id: int, _reviewer: Reviewer, db: DbSession) -> ApiResponse[out_model]:
        request = WorkflowEngine(db).get(kind, request_id)
        return ApiResponse(data=out_model.model_validate(request))

    @router.put("/{request_id}/approve", response_model=ApiResponse[out_model])
    def approve(
        request_id: int,
        reviewer: Reviewer,
        db: DbSession,
        body: Annotated[ApproveIn | None, Body()] = None,
    ) -> ApiResponse[out_model]:
        comment = body.comentario if body is not None else None
        request = WorkflowEngine(db).review(kind, request_id, Decision.APPROVE, reviewer, comment)
        return ApiResponse(
            message=kind.approved_message,
            data=out_model.model_validate(request),
        )

    @router.put("/{request_id}/reject", response_model=ApiResponse[out_model])
    def reject(
        request_id: int,
        body: RejectIn,
        reviewer: Reviewer,
        db: DbSession,
    ) -> ApiResponse[out_model]:
        request = WorkflowEngine(db).review(kind, request_id, Decision.REJECT, reviewer, body.motivo)
        return ApiResponse(
            message=kind.rejected_message,
            data=out_model.model_validate(request),
        )

    return router


router = APIRouter()
for _slug, _kind in KINDS.items():
    router.include_router(build_kind_router(_kind), prefix=f"/{_slug}")
