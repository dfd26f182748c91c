"""Tests for security-critical functionality."""

from datetime import timedelta
from uuid import uuid4

import pytest
from hypothesis import given
from hypothesis import strategies as st
from jose import jwt

from src.scopegate.core.config import get_settings
from src.scopegate.core.security import (
    create_identity_token,
    decode_token,
    generate_access_secret,
    hash_token,
    validate_tenant_slug_format,
)

pytestmark = pytest.mark.unit


class TestAccessSecrets:
    def test_secret_is_64_hex_chars(self):
        secret = generate_access_secret()
        assert len(secret) == 64
        int(secret, 16)

    def test_secrets_are_unique(self):
        assert len({generate_access_secret() for _ in range(50)}) == 50

    def test_hash_is_deterministic_and_not_the_secret(self):
        secret = generate_access_secret()
        assert hash_token(secret) == hash_token(secret)
        assert hash_token(secret) != secret
        assert len(hash_token(secret)) == 64


class TestIdentityTokens:
    def test_round_trip_claims(self):
        subject = uuid4()
        payload = decode_token(create_identity_token(subject))
        assert payload is not None
        assert payload["sub"] == str(subject)
        assert payload["type"] == "access"

    def test_expired_token_is_rejected(self):
        token = create_identity_token(uuid4(), expires_delta=timedelta(seconds=-5))
        assert decode_token(token) is None

    def test_wrong_secret_is_rejected(self):
        token = jwt.encode({"sub": str(uuid4()), "type": "access"}, "x" * 40, algorithm="HS256")
        assert decode_token(token) is None

    def test_garbage_is_rejected(self):
        assert decode_token("not.a.jwt") is None

    def test_uses_configured_algorithm(self):
        token = create_identity_token(uuid4())
        assert jwt.get_unverified_header(token)["alg"] == get_settings().jwt_algorithm


class TestTenantSlugValidation:
    @pytest.mark.parametrize("slug", ["acme", "acme-corp", "acme_corp_2024", "a1"])
    def test_valid_slugs(self, slug):
        assert validate_tenant_slug_format(slug) == slug

    @pytest.mark.parametrize(
        "slug",
        ["Acme", "1acme", "acme--corp", "acme_", "-acme", "acme corp", "acme;drop", ""],
    )
    def test_invalid_slugs(self, slug):
        with pytest.raises(ValueError, match="Slug must start with a letter"):
            validate_tenant_slug_format(slug)


@given(st.from_regex(r"\A[a-z][a-z0-9]{0,10}([-_][a-z0-9]{1,8}){0,3}\Z"))
def test_generated_valid_slugs_pass(slug):
    assert validate_tenant_slug_format(slug) == slug


@given(st.text(alphabet=st.characters(categories=["Lu", "P", "Zs"]), min_size=1))
def test_slugs_with_uppercase_punctuation_or_space_fail(slug):
    with pytest.raises(ValueError):
        validate_tenant_slug_format(slug)
