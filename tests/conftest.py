"""Test environment: must run before any app module reads settings."""

import os

os.environ.setdefault("APP_ENV", "dev")
# Minimum cost factor keeps password hashing fast in tests.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-residencial-api-tests")
