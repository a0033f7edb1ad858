"""
Identity provider tests: token verification and role classification.
"""

import pytest

from eventgate.auth.identity import (
    AuthError,
    JwtIdentityProvider,
    classify_role,
    load_verification_key,
)
from eventgate.config import Settings
from eventgate.models import Role


def test_classify_role_is_case_insensitive():
    moderators = ["Mod@Example.org"]

    assert classify_role("mod@example.org", moderators) == Role.MODERATOR
    assert classify_role(" MOD@EXAMPLE.ORG ", moderators) == Role.MODERATOR
    assert classify_role("alice@example.org", moderators) == Role.USER
    assert classify_role("alice@example.org", []) == Role.USER


def test_authenticate_user(identity_provider, token_factory):
    principal = identity_provider.authenticate(
        token_factory("user-1", "alice@example.org", "Alice")
    )

    assert principal.id == "user-1"
    assert principal.email == "alice@example.org"
    assert principal.display_name == "Alice"
    assert principal.role == Role.USER


def test_authenticate_moderator_by_email(identity_provider, token_factory):
    principal = identity_provider.authenticate(token_factory("mod-1", "MOD@example.org"))

    assert principal.is_moderator


def test_role_claim_in_token_is_ignored(identity_provider, token_factory):
    token = token_factory("user-1", "alice@example.org", role="moderator", admin=True)

    assert identity_provider.authenticate(token).role == Role.USER


@pytest.mark.parametrize(
    "kwargs",
    [
        {"expires_in": -60},
        {"secret": "some-other-secret"},
    ],
)
def test_authenticate_rejects_bad_tokens(identity_provider, token_factory, kwargs):
    with pytest.raises(AuthError):
        identity_provider.authenticate(token_factory("user-1", "alice@example.org", **kwargs))


def test_authenticate_rejects_garbage(identity_provider):
    with pytest.raises(AuthError):
        identity_provider.authenticate("not-a-token")
    with pytest.raises(AuthError):
        identity_provider.authenticate("")


def test_authenticate_requires_email_claim(identity_provider, token_factory):
    with pytest.raises(AuthError) as exc_info:
        identity_provider.authenticate(token_factory("user-1", ""))

    assert "email" in exc_info.value.message


def test_authenticate_without_key_fails_closed(token_factory):
    provider = JwtIdentityProvider(key=None)

    with pytest.raises(AuthError):
        provider.authenticate(token_factory("user-1", "alice@example.org"))


def test_audience_is_enforced_when_configured(token_factory):
    provider = JwtIdentityProvider(key="eventgate-test-secret", audience="eventgate")

    good = token_factory("user-1", "alice@example.org", aud="eventgate")
    bad = token_factory("user-1", "alice@example.org", aud="someone-else")

    assert provider.authenticate(good).id == "user-1"
    with pytest.raises(AuthError):
        provider.authenticate(bad)


def test_provider_from_settings_reads_public_key_file(tmp_path):
    key_file = tmp_path / "idp.pem"
    key_file.write_text("-----BEGIN PUBLIC KEY-----\nabc\n-----END PUBLIC KEY-----\n")
    config = Settings(
        _env_file=None,
        jwt_algorithm="RS256",
        jwt_secret="ignored",
        jwt_public_key_path=str(key_file),
        moderator_emails="Mod@Example.org",
    )

    provider = JwtIdentityProvider.from_settings(config)

    assert load_verification_key(config).startswith("-----BEGIN PUBLIC KEY-----")
    assert provider.key == load_verification_key(config)
    assert provider.algorithm == "RS256"
    assert provider.moderator_emails == ["mod@example.org"]
