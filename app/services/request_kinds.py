"""
The five request kinds handled by WorkflowEngine.

Each class holds the eligibility rules checked at submission, the duplicate
rule, and the mutation applied on approval. KINDS maps URL slugs to instances.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from app.core.security import hash_password, password_strength_errors
from app.models import (
    Account,
    DeactivationRequest,
    House,
    InfoEditRequest,
    ReactivationRequest,
    RegistrationRequest,
    Role,
    RoleChangeRequest,
)
from app.models.account import ACCOUNT_ACTIVE, ACCOUNT_SUSPENDED
from app.models.requests import CHANGE_ASSIGN_ADMIN
from app.models.role import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_VECINO
from app.schemas.requests import (
    DeactivationIn,
    DeactivationOut,
    InfoEditIn,
    InfoEditOut,
    ReactivationIn,
    ReactivationOut,
    RegistrationIn,
    RegistrationOut,
    RoleChangeIn,
    RoleChangeOut,
)
from app.services.access import Capability, is_reviewer
from app.services.workflow import RequestKind


def _find_account_by_email(session: Session, email: str) -> Account | None:
    return session.query(Account).filter(Account.email == email).first()


def _find_house(session: Session, house_number: str) -> House | None:
    return session.query(House).filter(House.house_number == house_number).first()


def _get_account(session: Session, account_id: int | None, message: str) -> Account:
    account = session.get(Account, account_id) if account_id is not None else None
    if account is None:
        raise NotFoundError(message)
    return account


class RegistrationKind(RequestKind):
    """New resident sign-up; approval creates an active vecino account."""

    slug = "registration"
    label = "registro"
    model = RegistrationRequest
    payload_model = RegistrationIn
    out_model = RegistrationOut
    public = True
    requires_separation_of_duties = False
    duplicate_message = "Ya existe una solicitud pendiente con este correo electrónico"
    submitted_message = (
        "Solicitud de registro enviada exitosamente. "
        "Un administrador revisará tu solicitud pronto."
    )
    approved_message = "Solicitud aprobada exitosamente. Se ha creado la cuenta de usuario."

    def build(self, session: Session, payload: RegistrationIn, submitter: Account | None) -> RegistrationRequest:
        errors = password_strength_errors(payload.password)
        if errors:
            raise ValidationError(
                "La contraseña no cumple con los requisitos de seguridad",
                errors=[{"field": "password", "message": e} for e in errors],
            )
        if _find_account_by_email(session, payload.email) is not None:
            raise ConflictError("El correo electrónico ya está registrado")
        if payload.house_number and _find_house(session, payload.house_number) is None:
            raise ValidationError("Número de casa inválido")
        return RegistrationRequest(
            full_name=payload.full_name,
            email=payload.email,
            phone=payload.phone,
            password_hash=hash_password(payload.password),
            house_number=payload.house_number,
        )

    def same_target(self, request: RegistrationRequest) -> Any:
        return RegistrationRequest.email == request.email

    def apply(self, session: Session, request: RegistrationRequest, reviewer: Account) -> dict[str, Any]:
        if _find_account_by_email(session, request.email) is not None:
            raise ConflictError("El correo electrónico ya está registrado")
        role = session.query(Role).filter(Role.name == ROLE_VECINO).first()
        if role is None:
            raise InternalError("Error: Rol de vecino no encontrado")
        # A house removed since submission leaves the account without a house.
        house = _find_house(session, request.house_number) if request.house_number else None

        account = Account(
            full_name=request.full_name,
            email=request.email,
            phone=request.phone,
            password_hash=request.password_hash,
            role=role,
            house_id=house.id if house is not None else None,
            status=ACCOUNT_ACTIVE,
            failed_login_attempts=0,
            approved_at=datetime.now(UTC),
        )
        session.add(account)
        session.flush()
        request.target_account_id = account.id
        return {"created_account_id": account.id}

    def describe_approval(self, request: RegistrationRequest) -> str:
        return f"Solicitud de registro aprobada para {request.email}"

    def describe_rejection(self, request: RegistrationRequest) -> str:
        return f"Solicitud de registro rechazada para {request.email}"


class InfoEditKind(RequestKind):
    """
    Account holder proposing new values for their own name, email or phone.

    Only fields that differ from the current value at submission time are
    captured; approval writes exactly those.
    """

    slug = "info-edit"
    label = "edicion_info"
    model = InfoEditRequest
    payload_model = InfoEditIn
    out_model = InfoEditOut
    submit_capability = Capability.SUBMIT_INFO_EDIT
    duplicate_message = "Ya tienes una solicitud de edición pendiente"
    submitted_message = "Solicitud de edición enviada. Pendiente de aprobación por un administrador."
    approved_message = "Solicitud aprobada. Información actualizada exitosamente."

    def build(self, session: Session, payload: InfoEditIn, submitter: Account | None) -> InfoEditRequest:
        account = _get_account(session, submitter.id if submitter else None, "Usuario no encontrado")

        new_full_name = payload.full_name if payload.full_name not in (None, account.full_name) else None
        new_email = payload.email if payload.email not in (None, account.email) else None
        new_phone = payload.phone if payload.phone not in (None, account.phone) else None
        if new_full_name is None and new_email is None and new_phone is None:
            raise ValidationError("No hay cambios para solicitar")

        if new_email is not None and self._email_taken(session, new_email, account.id):
            raise ConflictError("El correo electrónico ya está en uso por otro usuario")

        return InfoEditRequest(
            target_account_id=account.id,
            current_full_name=account.full_name,
            new_full_name=new_full_name,
            current_email=account.email,
            new_email=new_email,
            current_phone=account.phone,
            new_phone=new_phone,
        )

    @staticmethod
    def _email_taken(session: Session, email: str, account_id: int) -> bool:
        other = (
            session.query(Account)
            .filter(Account.email == email, Account.id != account_id)
            .first()
        )
        return other is not None

    def same_target(self, request: InfoEditRequest) -> Any:
        return InfoEditRequest.target_account_id == request.target_account_id

    def apply(self, session: Session, request: InfoEditRequest, reviewer: Account) -> dict[str, Any]:
        account = _get_account(session, request.target_account_id, "Usuario no encontrado")
        changes: dict[str, str] = {}
        if request.new_full_name is not None:
            changes["full_name"] = request.new_full_name
        if request.new_email is not None:
            if self._email_taken(session, request.new_email, account.id):
                raise ConflictError("El correo electrónico ya está en uso por otro usuario")
            changes["email"] = request.new_email
        if request.new_phone is not None:
            changes["phone"] = request.new_phone

        for field, value in changes.items():
            setattr(account, field, value)
        return {"account_id": account.id, "applied_changes": changes}

    def describe_submission(self, request: InfoEditRequest) -> str:
        return "Usuario solicitó editar su información personal"

    def describe_approval(self, request: InfoEditRequest) -> str:
        return f"Aprobada solicitud de edición para usuario ID {request.target_account_id}"

    def describe_rejection(self, request: InfoEditRequest) -> str:
        return f"Rechazada solicitud de edición para usuario ID {request.target_account_id}"


class DeactivationKind(RequestKind):
    """A resident (same house) or an administrator asking to suspend an account."""

    slug = "deactivation"
    label = "desactivacion"
    model = DeactivationRequest
    payload_model = DeactivationIn
    out_model = DeactivationOut
    submit_capability = Capability.SUBMIT_DEACTIVATION
    duplicate_message = "Ya existe una solicitud de desactivación pendiente para este usuario"
    approved_message = "Solicitud aprobada. Usuario desactivado exitosamente."

    def build(self, session: Session, payload: DeactivationIn, submitter: Account | None) -> DeactivationRequest:
        target = _get_account(session, payload.account_id, "Usuario a desactivar no encontrado")

        same_house = target.house_id is not None and submitter.house_id == target.house_id
        if not (is_reviewer(submitter.role_name) or same_house):
            raise AuthorizationError(
                "No tienes permiso para solicitar la desactivación de este usuario"
            )
        if target.id == submitter.id:
            raise ValidationError(
                "No puedes solicitar tu propia desactivación directamente. "
                "Contacta con un administrador."
            )
        if target.status == ACCOUNT_SUSPENDED:
            raise ConflictError("Este usuario ya está desactivado")
        if target.status != ACCOUNT_ACTIVE:
            raise ConflictError("La cuenta de este usuario no está activa")

        return DeactivationRequest(target_account_id=target.id, motivo=payload.motivo)

    def same_target(self, request: DeactivationRequest) -> Any:
        return DeactivationRequest.target_account_id == request.target_account_id

    def apply(self, session: Session, request: DeactivationRequest, reviewer: Account) -> dict[str, Any]:
        account = _get_account(session, request.target_account_id, "Usuario no encontrado")
        account.status = ACCOUNT_SUSPENDED
        return {"deactivated_account_id": account.id}

    def describe_submission(self, request: DeactivationRequest) -> str:
        return f"Usuario solicitó desactivar cuenta ID {request.target_account_id}"

    def describe_approval(self, request: DeactivationRequest) -> str:
        return f"Aprobada desactivación de usuario ID {request.target_account_id}"

    def describe_rejection(self, request: DeactivationRequest) -> str:
        return (
            "Rechazada solicitud de desactivación para usuario ID "
            f"{request.target_account_id}"
        )


class ReactivationKind(RequestKind):
    """Suspended resident asking (without a session) to be reactivated into a house."""

    slug = "reactivation"
    label = "reactivacion"
    model = ReactivationRequest
    payload_model = ReactivationIn
    out_model = ReactivationOut
    public = True
    requires_separation_of_duties = False
    duplicate_message = "Ya existe una solicitud de reactivación pendiente para este usuario"
    submitted_message = (
        "Solicitud de reactivación enviada. Pendiente de aprobación por un administrador."
    )
    approved_message = "Solicitud aprobada. Usuario reactivado exitosamente."

    def build(self, session: Session, payload: ReactivationIn, submitter: Account | None) -> ReactivationRequest:
        account = _find_account_by_email(session, payload.email)
        if account is None:
            raise NotFoundError("Usuario no encontrado")
        if account.status != ACCOUNT_SUSPENDED:
            raise ConflictError("Esta cuenta no está suspendida")
        if _find_house(session, payload.house_number) is None:
            raise ValidationError("Número de casa inválido")
        return ReactivationRequest(
            target_account_id=account.id,
            motivo=payload.motivo,
            house_number=payload.house_number,
        )

    def same_target(self, request: ReactivationRequest) -> Any:
        return ReactivationRequest.target_account_id == request.target_account_id

    def apply(self, session: Session, request: ReactivationRequest, reviewer: Account) -> dict[str, Any]:
        # House data may have changed since submission.
        house = _find_house(session, request.house_number)
        if house is None:
            raise ConflictError("Casa no encontrada")
        account = _get_account(session, request.target_account_id, "Usuario no encontrado")
        account.status = ACCOUNT_ACTIVE
        account.house_id = house.id
        return {
            "reactivated_account_id": account.id,
            "house_number": house.house_number,
        }

    def describe_approval(self, request: ReactivationRequest) -> str:
        return (
            f"Aprobada reactivación de usuario ID {request.target_account_id} "
            f"en casa {request.house_number}"
        )

    def describe_rejection(self, request: ReactivationRequest) -> str:
        return (
            "Rechazada solicitud de reactivación para usuario ID "
            f"{request.target_account_id}"
        )


class RoleChangeKind(RequestKind):
    """Grant or remove the administrador role; never applies to super_admin accounts."""

    slug = "role-change"
    label = "cambio_rol"
    model = RoleChangeRequest
    payload_model = RoleChangeIn
    out_model = RoleChangeOut
    submit_capability = Capability.SUBMIT_ROLE_CHANGE
    duplicate_message = "Ya existe una solicitud de cambio de rol pendiente para este usuario"
    submitted_message = "Solicitud de cambio de rol creada exitosamente"
    approved_message = "Solicitud aprobada. El cambio de rol ha sido aplicado exitosamente."

    def build(self, session: Session, payload: RoleChangeIn, submitter: Account | None) -> RoleChangeRequest:
        target = _get_account(session, payload.account_id, "Usuario no encontrado")
        current_role = target.role_name
        if current_role == ROLE_SUPER_ADMIN:
            raise ConflictError("No se puede cambiar el rol de un super administrador")

        assign = payload.change_type == CHANGE_ASSIGN_ADMIN
        is_admin = current_role == ROLE_ADMIN
        if assign and is_admin:
            raise ConflictError("El usuario ya es administrador")
        if not assign and not is_admin:
            raise ConflictError("El usuario no es administrador")

        return RoleChangeRequest(
            target_account_id=target.id,
            current_role=current_role,
            new_role=ROLE_ADMIN if assign else ROLE_VECINO,
            change_type=payload.change_type,
            motivo=payload.motivo or None,
        )

    def same_target(self, request: RoleChangeRequest) -> Any:
        return RoleChangeRequest.target_account_id == request.target_account_id

    def apply(self, session: Session, request: RoleChangeRequest, reviewer: Account) -> dict[str, Any]:
        role = session.query(Role).filter(Role.name == request.new_role).first()
        if role is None:
            raise InternalError("Rol no encontrado en el sistema")
        account = _get_account(session, request.target_account_id, "Usuario no encontrado")
        previous_role = account.role_name
        account.role = role
        return {
            "account_id": account.id,
            "previous_role": previous_role,
            "new_role": role.name,
        }

    def describe_submission(self, request: RoleChangeRequest) -> str:
        return (
            f"Usuario solicitó cambiar el rol de la cuenta ID {request.target_account_id} "
            f"a {request.new_role}"
        )

    def describe_approval(self, request: RoleChangeRequest) -> str:
        return (
            f"Aprobado cambio de rol de usuario ID {request.target_account_id}: "
            f"{request.current_role} -> {request.new_role}"
        )

    def describe_rejection(self, request: RoleChangeRequest) -> str:
        return f"Rechazado cambio de rol para usuario ID {request.target_account_id}"


REGISTRATION = RegistrationKind()
INFO_EDIT = InfoEditKind()
DEACTIVATION = DeactivationKind()
REACTIVATION = ReactivationKind()
ROLE_CHANGE = RoleChangeKind()

KINDS: dict[str, RequestKind] = {
    kind.slug: kind
    for kind in (REGISTRATION, INFO_EDIT, DEACTIVATION, REACTIVATION, ROLE_CHANGE)
}


def get_kind(slug: str) -> RequestKind:
    try:
        return KINDS[slug]
    except KeyError:
        raise NotFoundError(f"Tipo de solicitud desconocido: {slug}") from None
