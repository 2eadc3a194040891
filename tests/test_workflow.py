"""Tests for the approval workflow engine across all five request kinds."""

import unittest

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.security import verify_password
from app.models import Account, House, RoleChangeRequest
from app.models.account import ACCOUNT_ACTIVE, ACCOUNT_SUSPENDED
from app.models.requests import STATE_APPROVED, STATE_PENDING, STATE_REJECTED
from app.models.role import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_VECINO
from app.services.request_kinds import (
    DEACTIVATION,
    INFO_EDIT,
    KINDS,
    REACTIVATION,
    REGISTRATION,
    ROLE_CHANGE,
    get_kind,
)
from app.services.workflow import Decision, WorkflowEngine
from tests.support import DatabaseTestCase, make_account

MOTIVO = "Ya no vive en la casa"
REJECT_MOTIVO = "No procede por ahora"


class WorkflowTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = make_account(self.session, "admin@example.com", ROLE_ADMIN, house_number="0")
        self.root = make_account(self.session, "root@example.com", ROLE_SUPER_ADMIN, house_number="0")
        self.alice = make_account(
            self.session, "alice@example.com", house_number="12", phone="5551234567"
        )
        self.bob = make_account(self.session, "bob@example.com", house_number="12")
        self.carol = make_account(self.session, "carol@example.com", house_number="30")
        self.workflow = WorkflowEngine(self.session)

    def reload(self, account: Account) -> Account:
        self.session.expire_all()
        return self.session.get(Account, account.id)


class TestKindRegistry(unittest.TestCase):
    def test_all_kinds_registered_by_slug(self) -> None:
        self.assertEqual(
            set(KINDS),
            {"registration", "info-edit", "deactivation", "reactivation", "role-change"},
        )
        self.assertIs(get_kind("role-change"), ROLE_CHANGE)

    def test_unknown_kind_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            get_kind("payment")


class TestSubmitAndList(WorkflowTestCase):
    def test_submitted_request_is_listed_as_pending(self) -> None:
        request = self.workflow.submit(
            DEACTIVATION, {"account_id": self.bob.id, "motivo": MOTIVO}, submitter=self.alice
        )
        pending = self.workflow.list_pending(DEACTIVATION)
        self.assertEqual([r.id for r in pending], [request.id])
        self.assertEqual(pending[0].state, STATE_PENDING)
        self.assertEqual(pending[0].submitter_id, self.alice.id)

        entries = self.audit_entries("solicitud_desactivacion")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].actor_account_id, self.alice.id)
        self.assertEqual(entries[0].extra_data["request_id"], request.id)

    def test_list_pending_newest_first_and_excludes_reviewed(self) -> None:
        first = self.workflow.submit(INFO_EDIT, {"full_name": "Alice Uno"}, submitter=self.alice)
        second = self.workflow.submit(INFO_EDIT, {"full_name": "Bob Dos"}, submitter=self.bob)
        self.assertEqual(
            [r.id for r in self.workflow.list_pending(INFO_EDIT)], [second.id, first.id]
        )
        self.workflow.review(INFO_EDIT, first.id, Decision.APPROVE, self.admin)
        self.assertEqual([r.id for r in self.workflow.list_pending(INFO_EDIT)], [second.id])

    def test_list_by_state_includes_reviewed_history(self) -> None:
        approved = self.workflow.submit(INFO_EDIT, {"full_name": "Alice Uno"}, submitter=self.alice)
        rejected = self.workflow.submit(INFO_EDIT, {"full_name": "Bob Dos"}, submitter=self.bob)
        pending = self.workflow.submit(INFO_EDIT, {"full_name": "Carol Tres"}, submitter=self.carol)
        self.workflow.review(INFO_EDIT, approved.id, Decision.APPROVE, self.admin)
        self.workflow.review(INFO_EDIT, rejected.id, Decision.REJECT, self.admin, REJECT_MOTIVO)

        self.assertEqual(
            [r.id for r in self.workflow.list_requests(INFO_EDIT, STATE_APPROVED)], [approved.id]
        )
        self.assertEqual(
            [r.id for r in self.workflow.list_requests(INFO_EDIT, STATE_REJECTED)], [rejected.id]
        )
        self.assertEqual(
            [r.id for r in self.workflow.list_requests(INFO_EDIT, None)],
            [pending.id, rejected.id, approved.id],
        )

    def test_list_unknown_state_is_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            self.workflow.list_requests(INFO_EDIT, "archivada")

    def test_get_unknown_request_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.workflow.get(DEACTIVATION, 999)

    def test_non_public_kind_requires_submitter(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.workflow.submit(INFO_EDIT, {"full_name": "Alguien Nuevo"})


class TestReview(WorkflowTestCase):
    def _deactivation(self):
        return self.workflow.submit(
            DEACTIVATION, {"account_id": self.bob.id, "motivo": MOTIVO}, submitter=self.alice
        )

    def test_second_approval_conflicts_and_mutates_once(self) -> None:
        request = self._deactivation()
        self.workflow.review(DEACTIVATION, request.id, Decision.APPROVE, self.admin)
        with self.assertRaises(ConflictError):
            self.workflow.review(DEACTIVATION, request.id, Decision.APPROVE, self.root)

        self.assertEqual(self.reload(self.bob).status, ACCOUNT_SUSPENDED)
        self.assertEqual(len(self.audit_entries("aprobacion_desactivacion")), 1)
        reviewed = self.workflow.get(DEACTIVATION, request.id)
        self.assertEqual(reviewed.state, STATE_APPROVED)
        self.assertEqual(reviewed.reviewer_id, self.admin.id)
        self.assertIsNotNone(reviewed.reviewed_at)

    def test_reject_leaves_target_unchanged(self) -> None:
        request = self._deactivation()
        self.workflow.review(
            DEACTIVATION, request.id, Decision.REJECT, self.admin, comment=REJECT_MOTIVO
        )
        self.assertEqual(self.reload(self.bob).status, ACCOUNT_ACTIVE)
        reviewed = self.workflow.get(DEACTIVATION, request.id)
        self.assertEqual(reviewed.state, STATE_REJECTED)
        self.assertEqual(reviewed.review_comment, REJECT_MOTIVO)
        entries = self.audit_entries("rechazo_desactivacion")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].extra_data["motivo"], REJECT_MOTIVO)

    def test_reject_requires_reason_of_ten_characters(self) -> None:
        request = self._deactivation()
        for comment in (None, "   ", "corto"):
            with self.assertRaises(ValidationError):
                self.workflow.review(
                    DEACTIVATION, request.id, Decision.REJECT, self.admin, comment=comment
                )
        self.assertEqual(self.workflow.get(DEACTIVATION, request.id).state, STATE_PENDING)

    def test_resident_cannot_review(self) -> None:
        request = self._deactivation()
        with self.assertRaises(AuthorizationError):
            self.workflow.review(DEACTIVATION, request.id, Decision.APPROVE, self.carol)
        self.assertEqual(self.reload(self.bob).status, ACCOUNT_ACTIVE)

    def test_review_unknown_request_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.workflow.review(DEACTIVATION, 999, Decision.APPROVE, self.admin)


class TestRegistration(WorkflowTestCase):
    payload = {
        "full_name": "Nuevo Vecino",
        "email": "New@Example.com",
        "password": "Secret123",
        "house_number": "12",
    }

    def test_approved_registration_creates_active_resident(self) -> None:
        request = self.workflow.submit(REGISTRATION, self.payload)
        self.assertIsNone(request.submitter_id)
        self.assertEqual(request.email, "new@example.com")
        self.assertEqual(self.audit_entries("solicitud_registro"), [])

        self.workflow.review(REGISTRATION, request.id, Decision.APPROVE, self.admin)

        account = self.session.query(Account).filter(Account.email == "new@example.com").one()
        self.assertEqual(account.status, ACCOUNT_ACTIVE)
        self.assertEqual(account.role_name, ROLE_VECINO)
        self.assertEqual(account.house_number, "12")
        self.assertTrue(verify_password("Secret123", account.password_hash))
        self.assertIsNotNone(account.approved_at)
        self.assertEqual(self.workflow.get(REGISTRATION, request.id).target_account_id, account.id)

        entries = self.audit_entries("aprobacion_registro")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].extra_data["request_id"], request.id)
        self.assertEqual(entries[0].actor_account_id, self.admin.id)

    def test_weak_password_is_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.workflow.submit(REGISTRATION, {**self.payload, "password": "sinmayusc1"})
        self.assertTrue(ctx.exception.errors)

    def test_registered_email_conflicts(self) -> None:
        with self.assertRaises(ConflictError):
            self.workflow.submit(REGISTRATION, {**self.payload, "email": "alice@example.com"})

    def test_duplicate_pending_registration_conflicts(self) -> None:
        self.workflow.submit(REGISTRATION, self.payload)
        with self.assertRaises(ConflictError):
            self.workflow.submit(REGISTRATION, self.payload)
        self.assertEqual(len(self.workflow.list_pending(REGISTRATION)), 1)

    def test_unknown_house_is_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            self.workflow.submit(REGISTRATION, {**self.payload, "house_number": "999"})

    def test_malformed_email_is_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            self.workflow.submit(REGISTRATION, {**self.payload, "email": "no-es-correo"})

    def test_email_taken_before_approval_conflicts(self) -> None:
        request = self.workflow.submit(REGISTRATION, self.payload)
        make_account(self.session, "new@example.com", house_number="40")
        with self.assertRaises(ConflictError):
            self.workflow.review(REGISTRATION, request.id, Decision.APPROVE, self.admin)
        self.assertEqual(self.workflow.get(REGISTRATION, request.id).state, STATE_PENDING)
        self.assertEqual(self.audit_entries("aprobacion_registro"), [])


class TestInfoEdit(WorkflowTestCase):
    def test_approval_changes_exactly_the_captured_fields(self) -> None:
        request = self.workflow.submit(
            INFO_EDIT, {"full_name": "Alice Actualizada"}, submitter=self.alice
        )
        self.assertIsNone(request.new_email)
        self.assertIsNone(request.new_phone)
        self.workflow.review(INFO_EDIT, request.id, Decision.APPROVE, self.admin)

        alice = self.reload(self.alice)
        self.assertEqual(alice.full_name, "Alice Actualizada")
        self.assertEqual(alice.email, "alice@example.com")
        self.assertEqual(alice.phone, "5551234567")
        entry = self.audit_entries("aprobacion_edicion_info")[0]
        self.assertEqual(entry.extra_data["applied_changes"], {"full_name": "Alice Actualizada"})

    def test_email_and_phone_change(self) -> None:
        request = self.workflow.submit(
            INFO_EDIT,
            {"email": "alice.new@example.com", "phone": "5559876543"},
            submitter=self.alice,
        )
        self.workflow.review(INFO_EDIT, request.id, Decision.APPROVE, self.admin)
        alice = self.reload(self.alice)
        self.assertEqual(alice.email, "alice.new@example.com")
        self.assertEqual(alice.phone, "5559876543")

    def test_phone_changed_after_submission_survives_name_only_approval(self) -> None:
        request = self.workflow.submit(
            INFO_EDIT, {"full_name": "Alice Renombrada"}, submitter=self.alice
        )
        self.alice.phone = "5550000000"
        self.session.commit()

        self.workflow.review(INFO_EDIT, request.id, Decision.APPROVE, self.admin)
        alice = self.reload(self.alice)
        self.assertEqual(alice.full_name, "Alice Renombrada")
        self.assertEqual(alice.phone, "5550000000")

    def test_unchanged_values_are_not_a_request(self) -> None:
        with self.assertRaises(ValidationError):
            self.workflow.submit(
                INFO_EDIT,
                {"full_name": self.alice.full_name, "email": "alice@example.com"},
                submitter=self.alice,
            )

    def test_email_of_another_account_conflicts(self) -> None:
        with self.assertRaises(ConflictError):
            self.workflow.submit(INFO_EDIT, {"email": "bob@example.com"}, submitter=self.alice)

    def test_second_pending_edit_conflicts(self) -> None:
        self.workflow.submit(INFO_EDIT, {"full_name": "Alice Uno"}, submitter=self.alice)
        with self.assertRaises(ConflictError):
            self.workflow.submit(INFO_EDIT, {"full_name": "Alice Dos"}, submitter=self.alice)

    def test_submitter_cannot_review_own_edit(self) -> None:
        request = self.workflow.submit(INFO_EDIT, {"full_name": "Admin Nuevo"}, submitter=self.admin)
        with self.assertRaises(ConflictError):
            self.workflow.review(INFO_EDIT, request.id, Decision.APPROVE, self.admin)
        self.workflow.review(INFO_EDIT, request.id, Decision.APPROVE, self.root)
        self.assertEqual(self.reload(self.admin).full_name, "Admin Nuevo")


class TestDeactivationEligibility(WorkflowTestCase):
    def test_suspended_account_conflicts(self) -> None:
        dave = make_account(
            self.session, "dave@example.com", house_number="12", status=ACCOUNT_SUSPENDED
        )
        with self.assertRaises(ConflictError):
            self.workflow.submit(
                DEACTIVATION, {"account_id": dave.id, "motivo": MOTIVO}, submitter=self.alice
            )

    def test_short_motivo_is_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            self.workflow.submit(
                DEACTIVATION, {"account_id": self.bob.id, "motivo": "corto"}, submitter=self.alice
            )
        self.assertEqual(self.workflow.list_pending(DEACTIVATION), [])

    def test_own_account_is_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            self.workflow.submit(
                DEACTIVATION, {"account_id": self.alice.id, "motivo": MOTIVO}, submitter=self.alice
            )

    def test_unknown_target_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.workflow.submit(
                DEACTIVATION, {"account_id": 999, "motivo": MOTIVO}, submitter=self.alice
            )

    def test_resident_of_another_house_is_forbidden(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.workflow.submit(
                DEACTIVATION, {"account_id": self.bob.id, "motivo": MOTIVO}, submitter=self.carol
            )

    def test_administrator_may_target_any_house(self) -> None:
        request = self.workflow.submit(
            DEACTIVATION, {"account_id": self.carol.id, "motivo": MOTIVO}, submitter=self.admin
        )
        with self.assertRaises(ConflictError):
            self.workflow.review(DEACTIVATION, request.id, Decision.APPROVE, self.admin)
        self.workflow.review(DEACTIVATION, request.id, Decision.APPROVE, self.root)
        self.assertEqual(self.reload(self.carol).status, ACCOUNT_SUSPENDED)


class TestReactivation(WorkflowTestCase):
    def _suspend_bob(self) -> None:
        self.bob.status = ACCOUNT_SUSPENDED
        self.session.commit()

    def test_active_account_conflicts(self) -> None:
        with self.assertRaises(ConflictError):
            self.workflow.submit(
                REACTIVATION,
                {"email": "bob@example.com", "motivo": "Regresé a la comunidad", "house_number": "12"},
            )

    def test_unknown_email_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.workflow.submit(
                REACTIVATION,
                {"email": "nadie@example.com", "motivo": "Regresé a la comunidad", "house_number": "12"},
            )

    def test_approval_reactivates_into_requested_house(self) -> None:
        self._suspend_bob()
        request = self.workflow.submit(
            REACTIVATION,
            {"email": "BOB@example.com", "motivo": "Regresé a la comunidad", "house_number": "45"},
        )
        self.assertEqual(request.target_account_id, self.bob.id)
        self.workflow.review(REACTIVATION, request.id, Decision.APPROVE, self.admin)

        bob = self.reload(self.bob)
        self.assertEqual(bob.status, ACCOUNT_ACTIVE)
        self.assertEqual(bob.house_number, "45")
        self.assertEqual(len(self.audit_entries("aprobacion_reactivacion")), 1)

    def test_house_deleted_before_approval_conflicts_and_stays_pending(self) -> None:
        self._suspend_bob()
        request = self.workflow.submit(
            REACTIVATION,
            {"email": "bob@example.com", "motivo": "Regresé a la comunidad", "house_number": "77"},
        )
        house = self.session.query(House).filter(House.house_number == "77").one()
        self.session.delete(house)
        self.session.commit()

        with self.assertRaises(ConflictError):
            self.workflow.review(REACTIVATION, request.id, Decision.APPROVE, self.admin)

        self.session.expire_all()
        self.assertEqual(self.workflow.get(REACTIVATION, request.id).state, STATE_PENDING)
        self.assertEqual(self.reload(self.bob).status, ACCOUNT_SUSPENDED)
        self.assertEqual(self.audit_entries("aprobacion_reactivacion"), [])

    def test_unknown_house_is_invalid(self) -> None:
        self._suspend_bob()
        with self.assertRaises(ValidationError):
            self.workflow.submit(
                REACTIVATION,
                {"email": "bob@example.com", "motivo": "Regresé a la comunidad", "house_number": "500"},
            )


class TestRoleChange(WorkflowTestCase):
    def test_submitter_cannot_review_own_role_change(self) -> None:
        request = self.workflow.submit(
            ROLE_CHANGE,
            {"account_id": self.alice.id, "change_type": "asignar_admin"},
            submitter=self.admin,
        )
        with self.assertRaises(ConflictError):
            self.workflow.review(ROLE_CHANGE, request.id, Decision.APPROVE, self.admin)
        self.assertEqual(self.workflow.get(ROLE_CHANGE, request.id).state, STATE_PENDING)
        self.assertEqual(self.reload(self.alice).role_name, ROLE_VECINO)

    def test_approval_assigns_administrator_role(self) -> None:
        request = self.workflow.submit(
            ROLE_CHANGE,
            {"account_id": self.alice.id, "change_type": "asignar_admin", "motivo": "Apoyo"},
            submitter=self.bob,
        )
        self.assertEqual(request.current_role, ROLE_VECINO)
        self.assertEqual(request.new_role, ROLE_ADMIN)
        self.workflow.review(ROLE_CHANGE, request.id, Decision.APPROVE, self.admin)
        self.assertEqual(self.reload(self.alice).role_name, ROLE_ADMIN)

    def test_incoherent_change_type_conflicts(self) -> None:
        with self.assertRaises(ConflictError):
            self.workflow.submit(
                ROLE_CHANGE,
                {"account_id": self.alice.id, "change_type": "remover_admin"},
                submitter=self.bob,
            )
        with self.assertRaises(ConflictError):
            self.workflow.submit(
                ROLE_CHANGE,
                {"account_id": self.admin.id, "change_type": "asignar_admin"},
                submitter=self.bob,
            )

    def test_super_admin_role_is_not_changeable(self) -> None:
        with self.assertRaises(ConflictError):
            self.workflow.submit(
                ROLE_CHANGE,
                {"account_id": self.root.id, "change_type": "remover_admin"},
                submitter=self.admin,
            )

    def test_unknown_change_type_is_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            self.workflow.submit(
                ROLE_CHANGE,
                {"account_id": self.alice.id, "change_type": "hacer_rey"},
                submitter=self.bob,
            )

    def test_concurrent_approvals_have_one_winner(self) -> None:
        request = self.workflow.submit(
            ROLE_CHANGE,
            {"account_id": self.alice.id, "change_type": "asignar_admin"},
            submitter=self.bob,
        )
        session_a = self.Session()
        session_b = self.Session()
        try:
            engine_a = WorkflowEngine(session_a)
            # Reviewer A has already read the request while it was pending.
            self.assertEqual(engine_a.get(ROLE_CHANGE, request.id).state, STATE_PENDING)

            WorkflowEngine(session_b).review(
                ROLE_CHANGE, request.id, Decision.APPROVE, session_b.get(Account, self.root.id)
            )
            with self.assertRaises(ConflictError):
                engine_a.review(
                    ROLE_CHANGE, request.id, Decision.APPROVE, session_a.get(Account, self.admin.id)
                )
        finally:
            session_a.close()
            session_b.close()

        stored = self.session.get(RoleChangeRequest, request.id)
        self.session.refresh(stored)
        self.assertEqual(stored.state, STATE_APPROVED)
        self.assertEqual(stored.reviewer_id, self.root.id)
        self.assertEqual(self.reload(self.alice).role_name, ROLE_ADMIN)
        self.assertEqual(len(self.audit_entries("aprobacion_cambio_rol")), 1)
