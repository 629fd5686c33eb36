"""JWTCredentialService 单元测试"""

from datetime import timedelta

import jwt
import pytest

from scrawl.domain.exceptions import InvalidTokenError
from scrawl.domain.value_objects.identity import Identity
from scrawl.infrastructure.auth.jwt_credential_service import JWTCredentialService

SECRET = "unit-test-secret"


@pytest.fixture
def service() -> JWTCredentialService:
    return JWTCredentialService(secret_key=SECRET, algorithm="HS256", expire_minutes=30)


def test_issue_and_resolve_identity(service):
    """测试：签发的令牌可以解析回相同身份"""
    token = service.issue_token(Identity(user_id="u1", email="u1@example.com"))

    identity = service.resolve_identity(token)

    assert identity == Identity(user_id="u1", email="u1@example.com")


def test_token_contains_standard_claims(service):
    token = service.issue_token(Identity(user_id="u1"))

    payload = jwt.decode(token, SECRET, algorithms=["HS256"])

    assert payload["sub"] == "u1"
    assert "exp" in payload
    assert "iat" in payload
    assert "email" not in payload


def test_expired_token_is_rejected(service):
    token = service.issue_token(Identity(user_id="u1"), expires_delta=timedelta(seconds=-5))

    with pytest.raises(InvalidTokenError, match="过期"):
        service.resolve_identity(token)


def test_token_signed_with_other_secret_is_rejected(service):
    other = JWTCredentialService(secret_key="another-secret", algorithm="HS256")
    token = other.issue_token(Identity(user_id="u1"))

    with pytest.raises(InvalidTokenError):
        service.resolve_identity(token)


def test_token_without_subject_is_rejected(service):
    token = jwt.encode({"email": "x@example.com"}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        service.resolve_identity(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens_are_rejected(service, token):
    with pytest.raises(InvalidTokenError):
        service.resolve_identity(token)
