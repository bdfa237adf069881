from __future__ import annotations

from datetime import timedelta

import jwt as pyjwt
import pytest

from academy_payroll.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, issue_token

CFG = JwtConfig(alg="HS256", issuer="academy-payroll", audience="academy-api", secret="s3cret")


def test_round_trip_keeps_subject_role_and_extras() -> None:
    token = issue_token(
        cfg=CFG,
        subject="user-1",
        role="student",
        ttl=timedelta(minutes=5),
        extra={"studentId": "STU-001", "role": "admin"},
    )
    claims = decode_and_validate(cfg=CFG, token=token)
    assert claims["sub"] == "user-1"
    # Explicit role wins over anything smuggled through extras.
    assert claims["role"] == "student"
    assert claims["studentId"] == "STU-001"


def test_expired_token_is_rejected() -> None:
    token = issue_token(cfg=CFG, subject="user-1", role="admin", ttl=timedelta(seconds=-30))
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=token)


def test_wrong_secret_is_rejected() -> None:
    other = JwtConfig(alg="HS256", issuer=CFG.issuer, audience=CFG.audience, secret="other")
    token = issue_token(cfg=other, subject="user-1", role="admin", ttl=timedelta(minutes=5))
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=token)


def test_tampered_payload_is_rejected() -> None:
    token = issue_token(cfg=CFG, subject="user-1", role="student", ttl=timedelta(minutes=5))
    header, payload, signature = token.split(".")
    forged = pyjwt.encode({"sub": "user-1", "role": "admin"}, "guess", algorithm="HS256")
    forged_payload = forged.split(".")[1]
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=f"{header}.{forged_payload}.{signature}")


def test_token_without_role_is_rejected() -> None:
    token = pyjwt.encode(
        {"iss": CFG.issuer, "aud": CFG.audience, "sub": "user-1", "iat": 0, "exp": 4102444800},
        CFG.secret,
        algorithm="HS256",
    )
    with pytest.raises(JwtValidationError, match="role"):
        decode_and_validate(cfg=CFG, token=token)


def test_garbage_is_rejected() -> None:
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token="not-a-jwt")
