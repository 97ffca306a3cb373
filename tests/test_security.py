import json
import time

import pytest
from conftest import bearer

from agency_api.app.core.config import Settings, settings
from agency_api.app.core.security import (
    _b64_url_encode,
    _sign,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = hash_password("correct horse")
    salt, digest = hashed.split("$")
    assert len(salt) == 32
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong", hashed)
    assert hash_password("correct horse") != hashed


def test_verify_rejects_malformed_hashes():
    assert not verify_password("x", None)
    assert not verify_password("x", "nodollar")
    assert not verify_password("x", "zz$zz")


def test_token_claims():
    claims = decode_access_token(create_access_token("USER05", "u@example.com", "employee"))
    assert claims["sub"] == "USER05"
    assert claims["email"] == "u@example.com"
    assert claims["role"] == "employee"
    assert claims["exp"] > time.time()


def test_tampered_and_expired_tokens_are_rejected():
    token = create_access_token("USER05", "u@example.com", "employee")
    header, payload, signature = token.split(".")
    forged = create_access_token("USER01", "u@example.com", "admin").split(".")[1]
    assert decode_access_token(f"{header}.{forged}.{signature}") is None
    assert decode_access_token("garbage") is None
    assert decode_access_token("a.b.c") is None

    expired = create_access_token("USER05", "u@example.com", "employee", expires_delta=-10)
    assert decode_access_token(expired) is None


def signed_token(header: dict, claims: dict) -> str:
    header_b64 = _b64_url_encode(json.dumps(header).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(claims).encode("utf-8"))
    signature = _sign(f"{header_b64}.{payload_b64}".encode("utf-8"), settings.secret_key)
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(signature)}"


def test_signed_tokens_with_bad_claims_are_rejected(client, admin):
    soon = signed_token({"alg": "HS256", "typ": "JWT"}, {"sub": admin.id, "exp": "soon"})
    assert decode_access_token(soon) is None
    response = client.get(f"/api/v1/users/{admin.id}", headers=bearer(soon))
    assert response.status_code == 401

    as_list = signed_token({"alg": "HS256", "typ": "JWT"}, ["USER01"])
    assert decode_access_token(as_list) is None

    exp = int(time.time()) + 60
    other_alg = signed_token({"alg": "none", "typ": "JWT"}, {"sub": admin.id, "exp": exp})
    assert decode_access_token(other_alg) is None
    assert decode_access_token(signed_token({"alg": "HS256"}, {"sub": admin.id, "exp": exp}))["sub"] == admin.id


def test_only_hs256_is_accepted():
    with pytest.raises(ValueError):
        Settings(algorithm="RS256")
    assert Settings(algorithm="HS256").algorithm == "HS256"
