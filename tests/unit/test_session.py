"""
Unit tests for the single-password session gate.
"""

import re

import pytest

from src.core.auth.session import AuthConfigurationError, AuthorizationError, SessionGate


@pytest.fixture
def gate() -> SessionGate:
    return SessionGate(admin_password="hunter2", signing_key="signing-key", max_age_seconds=3600)


class TestLogin:
    """Tests for password login."""

    def test_correct_password_issues_token(self, gate):
        """A correct password yields a signed token."""
        token = gate.login("hunter2")

        random_part, issued_at, signature = token.split(".")
        assert re.fullmatch(r"[0-9a-f]{64}", random_part)
        assert issued_at.isdigit()
        assert re.fullmatch(r"[0-9a-f]{64}", signature)

    def test_tokens_are_unique(self, gate):
        """Each login gets a fresh token."""
        assert gate.login("hunter2") != gate.login("hunter2")

    def test_wrong_password_is_rejected(self, gate):
        """A wrong password raises AuthorizationError."""
        with pytest.raises(AuthorizationError, match="Invalid password"):
            gate.login("hunter3")

    def test_unconfigured_password_is_a_server_error(self):
        """No configured password is a configuration error."""
        with pytest.raises(AuthConfigurationError):
            SessionGate(admin_password="").login("")


class TestVerify:
    """Tests for token verification."""

    def test_missing_or_empty_cookie_is_unauthenticated(self, gate):
        """No cookie is not a session."""
        assert not gate.is_authenticated(None)
        assert not gate.is_authenticated("")

    def test_fresh_token_is_authenticated(self, gate):
        """A token from login verifies."""
        assert gate.is_authenticated(gate.login("hunter2"))

    def test_arbitrary_value_is_not_enough(self, gate):
        """Presence of a cookie alone does not grant access."""
        assert not gate.is_authenticated("0" * 64)
        assert not gate.is_authenticated("not.a.token")

    def test_tampered_signature_is_rejected(self, gate):
        """Any change to the signature invalidates it."""
        token = gate.login("hunter2")
        tampered = token[:-1] + ("0" if token[-1] != "0" else "1")

        assert not gate.is_authenticated(tampered)

    def test_token_from_other_key_is_rejected(self, gate):
        """Tokens signed with another key fail."""
        other = SessionGate(admin_password="hunter2", signing_key="different-key")

        assert not gate.is_authenticated(other.login("hunter2"))

    def test_expired_token_is_rejected(self, gate):
        """Tokens expire after max_age_seconds."""
        token = gate.login("hunter2", now=1_000_000)

        assert gate.is_authenticated(token, now=1_000_000 + 3600)
        assert not gate.is_authenticated(token, now=1_000_000 + 3601)

    def test_require_raises_without_session(self, gate):
        """require raises when not authenticated."""
        with pytest.raises(AuthorizationError, match="Authentication required"):
            gate.require(None)
