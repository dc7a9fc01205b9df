"""
Single-password session gate.

There are no user accounts: whoever knows the admin password receives a
session cookie. The server keeps no session table, so the cookie value is
self-verifying:

    <32 random bytes as hex>.<issued-at unix seconds>.<hmac-sha256 hex>

A cookie is accepted only if the signature matches and it is younger than
the configured maximum age.
"""

import hashlib
import hmac
import secrets
import time
from typing import Optional

SESSION_COOKIE_NAME = "auth-token"


class AuthorizationError(Exception):
    """Raised when a password or session is rejected."""
    pass


class AuthConfigurationError(Exception):
    """Raised when no admin password has been configured."""
    pass


class SessionGate:
    """Issues and checks session tokens for the shared admin password."""

    def __init__(
        self,
        admin_password: str,
        signing_key: Optional[str] = None,
        max_age_seconds: int = 24 * 60 * 60,
    ) -> None:
        self._admin_password = admin_password
        self._signing_key = (signing_key or admin_password).encode("utf-8")
        self.max_age_seconds = max_age_seconds

    def login(self, password: str, now: Optional[float] = None) -> str:
        """Exchange the admin password for a new session token."""
        if not self._admin_password:
            raise AuthConfigurationError("Server configuration error: ADMIN_PASSWORD not set")

        if not hmac.compare_digest(
            password.encode("utf-8"),
            self._admin_password.encode("utf-8"),
        ):
            raise AuthorizationError("Invalid password")

        issued_at = int(now if now is not None else time.time())
        payload = f"{secrets.token_hex(32)}.{issued_at}"
        return f"{payload}.{self._sign(payload)}"

    def is_authenticated(self, token: Optional[str], now: Optional[float] = None) -> bool:
        if not token or not self._admin_password:
            return False

        payload, _, signature = token.rpartition(".")
        if not payload or not hmac.compare_digest(
            signature.encode("utf-8"),
            self._sign(payload).encode("utf-8"),
        ):
            return False

        _, _, issued_at = payload.rpartition(".")
        try:
            age = (now if now is not None else time.time()) - int(issued_at)
        except ValueError:
            return False
        return 0 <= age <= self.max_age_seconds

    def require(self, token: Optional[str]) -> None:
        if not self.is_authenticated(token):
            raise AuthorizationError("Authentication required")

    def _sign(self, payload: str) -> str:
        return hmac.new(self._signing_key, payload.encode("utf-8"), hashlib.sha256).hexdigest()
