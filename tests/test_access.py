"""Unit tests for the role-based access gate."""

import unittest

from app.core.exceptions import AuthorizationError
from app.models.role import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_VECINO
from app.services.access import Capability, ensure_allowed, is_allowed, is_reviewer


class TestSuperAdmin(unittest.TestCase):
    def test_passes_every_check(self) -> None:
        for capability in Capability:
            self.assertTrue(is_allowed(ROLE_SUPER_ADMIN, capability), capability)


class TestAdministrator(unittest.TestCase):
    def test_may_review_and_manage(self) -> None:
        for capability in (
            Capability.REVIEW_REQUESTS,
            Capability.LIST_ACCOUNTS,
            Capability.EDIT_PAYMENT_STATUS,
            Capability.MANAGE_FINANCES,
            Capability.SUBMIT_ROLE_CHANGE,
        ):
            self.assertTrue(is_allowed(ROLE_ADMIN, capability), capability)
        self.assertTrue(is_reviewer(ROLE_ADMIN))


class TestResident(unittest.TestCase):
    def test_may_submit_but_not_review(self) -> None:
        self.assertTrue(is_allowed(ROLE_VECINO, Capability.SUBMIT_INFO_EDIT))
        self.assertTrue(is_allowed(ROLE_VECINO, Capability.SUBMIT_DEACTIVATION))
        self.assertTrue(is_allowed(ROLE_VECINO, Capability.VIEW_HOUSES))
        self.assertFalse(is_allowed(ROLE_VECINO, Capability.REVIEW_REQUESTS))
        self.assertFalse(is_allowed(ROLE_VECINO, Capability.EDIT_PAYMENT_STATUS))
        self.assertTrue(is_allowed(ROLE_VECINO, Capability.VIEW_OWN_PAYMENTS))
        self.assertTrue(is_allowed(ROLE_VECINO, Capability.CONFIRM_PAYMENT))
        self.assertFalse(is_allowed(ROLE_VECINO, Capability.MANAGE_FINANCES))
        self.assertFalse(is_reviewer(ROLE_VECINO))

    def test_ensure_allowed_raises_forbidden(self) -> None:
        with self.assertRaises(AuthorizationError) as ctx:
            ensure_allowed(ROLE_VECINO, Capability.LIST_ACCOUNTS)
        self.assertEqual(ctx.exception.status_code, 403)


class TestUnknownRole(unittest.TestCase):
    def test_has_no_capabilities(self) -> None:
        self.assertFalse(is_allowed("invitado", Capability.VIEW_HOUSES))
