from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from jose import jwt

from src.app.services.token_service import TokenService
from src.domain.entities import TokenKind
from src.domain.errors import (
    ConfigError,
    ExpiredError,
    InvalidSignatureError,
    MalformedError,
    TokenError,
)


@pytest.mark.parametrize("two_factor_verified", [True, False])
def test_issue_then_verify_returns_matching_claims(token_service, two_factor_verified):
    subject_id = uuid4()

    tokens = token_service.issue(subject_id, two_factor_verified)

    access = token_service.verify(tokens.access_token, TokenKind.access)
    refresh = token_service.verify(tokens.refresh_token, TokenKind.refresh)

    assert access.subject_id == subject_id
    assert access.kind == TokenKind.access
    assert access.two_factor_verified is two_factor_verified
    assert refresh.subject_id == subject_id
    assert refresh.kind == TokenKind.refresh
    # Pair minted together always agrees on the 2FA flag
    assert refresh.two_factor_verified == access.two_factor_verified


def test_issue_reports_lifetimes():
    service = TokenService(
        "a-secret", "r-secret", timedelta(minutes=15), timedelta(days=7)
    )

    tokens = service.issue(uuid4(), False)

    assert tokens.access_ttl_seconds == 15 * 60
    assert tokens.refresh_ttl_seconds == 7 * 24 * 60 * 60


def test_access_and_refresh_expiries_differ(token_service):
    tokens = token_service.issue(uuid4(), False)

    access = token_service.verify(tokens.access_token, TokenKind.access)
    refresh = token_service.verify(tokens.refresh_token, TokenKind.refresh)

    assert access.expires_at - access.issued_at == timedelta(minutes=15)
    assert refresh.expires_at - refresh.issued_at == timedelta(days=7)


def test_expired_access_token_fails(token_service):
    issued = datetime.now(UTC) - timedelta(hours=1)
    tokens = token_service.issue(uuid4(), True, now=issued)

    with pytest.raises(ExpiredError):
        token_service.verify(tokens.access_token, TokenKind.access)

    # Refresh token from the same pair is still within its lifetime
    claims = token_service.verify(tokens.refresh_token, TokenKind.refresh)
    assert claims.two_factor_verified is True


def test_expired_refresh_token_fails(token_service):
    issued = datetime.now(UTC) - timedelta(days=8)
    tokens = token_service.issue(uuid4(), False, now=issued)

    with pytest.raises(ExpiredError):
        token_service.verify(tokens.refresh_token, TokenKind.refresh)


def test_access_token_never_verifies_as_refresh(token_service):
    tokens = token_service.issue(uuid4(), False)

    with pytest.raises(InvalidSignatureError):
        token_service.verify(tokens.access_token, TokenKind.refresh)


def test_refresh_token_never_verifies_as_access(token_service):
    tokens = token_service.issue(uuid4(), False)

    with pytest.raises(InvalidSignatureError):
        token_service.verify(tokens.refresh_token, TokenKind.access)


def test_kind_isolation_holds_even_with_shared_secret():
    service = TokenService("same-secret", "same-secret")
    tokens = service.issue(uuid4(), False)

    with pytest.raises(InvalidSignatureError):
        service.verify(tokens.access_token, TokenKind.refresh)


def test_token_from_other_issuer_fails(token_service):
    other = TokenService("other-access", "other-refresh")
    tokens = other.issue(uuid4(), True)

    with pytest.raises(InvalidSignatureError):
        token_service.verify(tokens.access_token, TokenKind.access)


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c", "....."])
def test_malformed_tokens(token_service, token):
    with pytest.raises(MalformedError):
        token_service.verify(token, TokenKind.access)


def test_missing_claims_is_malformed(token_service):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": str(uuid4()), "type": "access", "iat": now, "exp": now + timedelta(minutes=5)},
        "unit-access-secret",
        algorithm="HS256",
    )

    with pytest.raises(MalformedError):
        token_service.verify(token, TokenKind.access)


def test_token_errors_carry_codes():
    assert ExpiredError().code == "TOKEN_EXPIRED"
    assert InvalidSignatureError().code == "INVALID_TOKEN"
    assert MalformedError().code == "MALFORMED_TOKEN"
    assert issubclass(ExpiredError, TokenError)


@pytest.mark.parametrize(
    "access_secret, refresh_secret",
    [("", "refresh"), ("access", ""), (None, "refresh"), ("access", None)],
)
def test_missing_secret_is_config_error(access_secret, refresh_secret):
    with pytest.raises(ConfigError):
        TokenService(access_secret, refresh_secret)


def test_from_config_reads_secrets_and_lifetimes():
    class Config:
        ACCESS_TOKEN_SECRET = "cfg-access"
        REFRESH_TOKEN_SECRET = "cfg-refresh"
        ACCESS_TOKEN_TTL_MINUTES = 5
        REFRESH_TOKEN_TTL_DAYS = 2
        JWT_ALGORITHM = "HS256"

    service = TokenService.from_config(Config)

    assert service.access_ttl_seconds == 300
    assert service.refresh_ttl_seconds == 2 * 86400


def test_from_config_without_secret_fails():
    class Config:
        ACCESS_TOKEN_SECRET = ""
        REFRESH_TOKEN_SECRET = "cfg-refresh"
        ACCESS_TOKEN_TTL_MINUTES = 5
        REFRESH_TOKEN_TTL_DAYS = 2
        JWT_ALGORITHM = "HS256"

    with pytest.raises(ConfigError):
        TokenService.from_config(Config)
