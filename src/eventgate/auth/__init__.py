"""EventGate authentication module."""

from eventgate.auth.identity import (
    AuthError,
    JwtIdentityProvider,
    classify_role,
    load_verification_key,
    validate_auth_config,
)

__all__ = [
    "AuthError",
    "JwtIdentityProvider",
    "classify_role",
    "load_verification_key",
    "validate_auth_config",
]
