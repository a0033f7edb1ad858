"""Identity provider - verifies bearer tokens issued by the external IdP.

The provider only consumes tokens; issuing them, sign-in flows and
account management belong to the external identity service. Role is
never read from the token: it derives from the configured moderator
email list.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from eventgate.config import Environment, Settings
from eventgate.engine.errors import EventGateError
from eventgate.models import Principal, Role

logger = logging.getLogger(__name__)


class AuthError(EventGateError):
    """Credentials missing, malformed, expired or not verifiable."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, "AUTH_ERROR")


def classify_role(email: str, moderator_emails: Iterable[str]) -> Role:
    """Moderator iff the email is on the configured list (case-insensitive)."""
    allowed = {e.strip().lower() for e in moderator_emails}
    return Role.MODERATOR if email.strip().lower() in allowed else Role.USER


def load_verification_key(config: Settings) -> Optional[str]:
    """Public key file wins over a shared secret."""
    if config.jwt_public_key_path:
        with open(config.jwt_public_key_path, "r", encoding="utf-8") as handle:
            return handle.read()
    return config.jwt_secret


class JwtIdentityProvider:
    """Turns a bearer token into a Principal."""

    def __init__(
        self,
        key: Optional[str],
        algorithm: str = "HS256",
        audience: Optional[str] = None,
        moderator_emails: Iterable[str] = (),
    ):
        self.key = key
        self.algorithm = algorithm
        self.audience = audience
        self.moderator_emails = [e.lower() for e in moderator_emails]

    @classmethod
    def from_settings(cls, config: Settings) -> "JwtIdentityProvider":
        return cls(
            key=load_verification_key(config),
            algorithm=config.jwt_algorithm,
            audience=config.jwt_audience,
            moderator_emails=config.moderator_emails,
        )

    def authenticate(self, token: str) -> Principal:
        if not token:
            raise AuthError("Missing authorization token")
        if not self.key:
            raise AuthError("Token verification key not configured")

        try:
            payload = jwt.decode(
                token,
                self.key,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except ExpiredSignatureError as exc:
            raise AuthError("Token expired") from exc
        except JWTError as exc:
            raise AuthError(f"Invalid token: {exc}") from exc

        subject = payload.get("sub")
        email = payload.get("email")
        if not subject or not email:
            raise AuthError("Token must carry sub and email claims")

        return Principal(
            id=str(subject),
            email=email,
            display_name=payload.get("name"),
            role=classify_role(email, self.moderator_emails),
        )


def validate_auth_config(config: Settings) -> None:
    """
    Validate identity configuration at startup.

    Deployed environments cannot start without a verification key (the
    settings validator already enforces that); development logs loudly
    instead so anonymous browsing still works locally.
    """
    if config.jwt_public_key_path:
        # Fail at startup rather than on the first request
        load_verification_key(config)

    if not config.jwt_secret and not config.jwt_public_key_path:
        if config.env != Environment.DEVELOPMENT:
            raise RuntimeError(
                f"Token verification key required in {config.env.value} environment"
            )
        logger.warning(
            "No token verification key configured; every authenticated request "
            "will be rejected and callers are treated as anonymous only"
        )

    if not config.moderator_emails:
        logger.warning("No moderator emails configured; moderation endpoints are unreachable")
    else:
        logger.info(f"Identity provider: {len(config.moderator_emails)} moderator emails configured")
