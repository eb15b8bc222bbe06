from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from app.services import token_service


def test_round_trip_carries_subject_and_roles() -> None:
    token = token_service.create_access_token(sub="learner-7", roles=["admin"])
    claims = token_service.decode_access_token(token)
    assert claims["sub"] == "learner-7"
    assert claims["roles"] == ["admin"]
    assert claims["iss"] == token_service.ISSUER
    assert claims["aud"] == token_service.AUDIENCE


def test_default_role_is_user() -> None:
    claims = token_service.decode_access_token(
        token_service.create_access_token(sub="learner-7")
    )
    assert claims["roles"] == ["user"]


def test_each_token_gets_unique_jti() -> None:
    a = token_service.decode_access_token(token_service.create_access_token(sub="x"))
    b = token_service.decode_access_token(token_service.create_access_token(sub="x"))
    assert a["jti"] != b["jti"]


def test_expired_token_rejected() -> None:
    token = token_service.create_access_token(sub="x", ttl=timedelta(seconds=-30))
    with pytest.raises(jwt.ExpiredSignatureError):
        token_service.decode_access_token(token)


def test_tampered_token_rejected() -> None:
    token = token_service.create_access_token(sub="x")
    header, payload, signature = token.split(".")
    forged = f"{header}.{payload}.{signature[::-1]}"
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token(forged)


def test_wrong_audience_rejected() -> None:
    token = jwt.encode(
        {"sub": "x", "aud": "some-other-service", "iss": token_service.ISSUER},
        token_service._private_key,
        algorithm=token_service.ALGORITHM,
    )
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token(token)


def test_hs256_token_rejected() -> None:
    token = jwt.encode(
        {"sub": "x"}, "shared-secret-that-is-long-enough-32b", algorithm="HS256"
    )
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token(token)
