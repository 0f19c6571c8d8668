"""
Unit tests for teamspace/core/security.py

Tests password hashing, session tokens and invitation tokens without database.
"""

import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from jose import jwt, JWTError

from teamspace.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_session_token,
    decode_access_token,
    generate_invitation_token,
    SECRET_KEY,
    ALGORITHM,
)


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_password(self):
        """Test that password is hashed with bcrypt."""
        password = "MySecurePassword123!"
        hashed = get_password_hash(password)

        assert hashed != password
        assert len(hashed) == 60
        assert hashed.startswith("$2b$")  # bcrypt prefix

    def test_verify_correct_password(self):
        password = "MySecurePassword123!"
        hashed = get_password_hash(password)

        assert verify_password(password, hashed) is True

    def test_verify_incorrect_password(self):
        password = "MySecurePassword123!"
        hashed = get_password_hash(password)

        assert verify_password("WrongPassword", hashed) is False
        assert verify_password("", hashed) is False
        assert verify_password("MySecurePassword123", hashed) is False  # Missing !

    def test_user_without_password_never_verifies(self):
        """Accounts created without credentials cannot log in with a password."""
        assert verify_password("anything", None) is False
        assert verify_password("anything", "") is False

    def test_malformed_hash_does_not_raise(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_different_passwords_produce_different_hashes(self):
        """Same password produces different hashes (salt)."""
        password = "MySecurePassword123!"
        hash1 = get_password_hash(password)
        hash2 = get_password_hash(password)

        assert hash1 != hash2
        assert verify_password(password, hash1) is True
        assert verify_password(password, hash2) is True


class TestSessionTokens:
    """Test session token creation and validation."""

    def test_create_access_token(self):
        token = create_access_token({"sub": "123"})
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])

        assert payload["sub"] == "123"
        assert "exp" in payload
        assert "iat" in payload
        assert payload["jti"]

    def test_each_token_has_unique_id(self):
        first = decode_access_token(create_access_token({"sub": "1"}))
        second = decode_access_token(create_access_token({"sub": "1"}))

        assert first["jti"] != second["jti"]

    def test_default_lifetime_is_thirty_days(self):
        payload = decode_access_token(create_access_token({"sub": "123"}))
        exp_time = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        time_diff = exp_time - datetime.now(timezone.utc)

        assert timedelta(days=29, hours=23) < time_diff <= timedelta(days=30)

    def test_token_expiration(self):
        """Expired tokens are rejected."""
        token = create_access_token({"sub": "123"}, expires_delta=timedelta(seconds=-10))

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_invalid_token_signature(self):
        token = jwt.encode({"sub": "123"}, "another-secret", algorithm=ALGORITHM)

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_session_token_carries_user_identity(self):
        user = SimpleNamespace(
            id=42,
            email="alice@acme.com",
            display_name="Alice",
            profile_image_url="https://cdn.acme.com/alice.png",
        )
        payload = decode_access_token(create_session_token(user))

        assert payload["sub"] == "42"
        assert payload["email"] == "alice@acme.com"
        assert payload["name"] == "Alice"
        assert payload["picture"] == "https://cdn.acme.com/alice.png"

    def test_session_token_omits_missing_profile_fields(self):
        user = SimpleNamespace(id=7, email="bob@x.com", display_name=None, profile_image_url=None)
        payload = decode_access_token(create_session_token(user))

        assert "name" not in payload
        assert "picture" not in payload


class TestInvitationTokens:

    def test_tokens_are_url_safe_and_long(self):
        token = generate_invitation_token()

        assert len(token) >= 43
        assert all(c.isalnum() or c in "-_" for c in token)

    def test_tokens_are_unique(self):
        tokens = {generate_invitation_token() for _ in range(100)}
        assert len(tokens) == 100
