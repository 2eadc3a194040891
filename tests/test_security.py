"""Tests for password hashing, password rules and JWT handling."""

import unittest

import jwt

from app.core.security import (
    create_access_token,
    decode_access_token,
    generate_reset_token,
    hash_password,
    password_strength_errors,
    verify_password,
)


class TestPasswordHashing(unittest.TestCase):
    def test_hash_verifies_and_is_salted(self) -> None:
        first = hash_password("Secret123")
        second = hash_password("Secret123")
        self.assertNotEqual(first, second)
        self.assertTrue(verify_password("Secret123", first))
        self.assertFalse(verify_password("secret123", first))

    def test_malformed_hash_does_not_verify(self) -> None:
        self.assertFalse(verify_password("Secret123", "not-a-bcrypt-hash"))


class TestPasswordStrength(unittest.TestCase):
    def test_strong_password_has_no_errors(self) -> None:
        self.assertEqual(password_strength_errors("Secret123"), [])

    def test_each_missing_rule_is_reported(self) -> None:
        self.assertEqual(len(password_strength_errors("Ab1")), 1)
        self.assertEqual(len(password_strength_errors("secret123")), 1)
        self.assertEqual(len(password_strength_errors("SECRET123")), 1)
        self.assertEqual(len(password_strength_errors("SecretSecret")), 1)
        self.assertEqual(len(password_strength_errors("abc")), 3)


class TestAccessToken(unittest.TestCase):
    def test_round_trip_carries_subject_and_role(self) -> None:
        payload = decode_access_token(create_access_token(sub=7, role="administrador"))
        self.assertEqual(payload["sub"], "7")
        self.assertEqual(payload["role"], "administrador")
        self.assertIn("exp", payload)

    def test_token_signed_with_another_secret_is_rejected(self) -> None:
        forged = jwt.encode(
            {"sub": "7", "role": "super_admin"},
            "otro-secreto-que-no-es-el-de-la-api-00",
            algorithm="HS256",
        )
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token(forged)


class TestResetToken(unittest.TestCase):
    def test_tokens_are_unique_hex(self) -> None:
        first, second = generate_reset_token(), generate_reset_token()
        self.assertEqual(len(first), 64)
        int(first, 16)
        self.assertNotEqual(first, second)
