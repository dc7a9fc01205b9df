"""
Admin session handling.
"""

from .session import (
    SESSION_COOKIE_NAME,
    AuthConfigurationError,
    AuthorizationError,
    SessionGate,
)

__all__ = [
    "SESSION_COOKIE_NAME",
    "AuthConfigurationError",
    "AuthorizationError",
    "SessionGate",
]
