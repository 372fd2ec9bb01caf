"""Unit tests for the JWT token provider."""

import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from common.auth import JWTAuth


TEST_JWT_SECRET = "test-secret-key"


class TestCreateToken:

    @pytest.mark.asyncio
    async def test_token_carries_identity_claims(self, token_provider, sample_user_id):
        token = await token_provider.create_token(
            user_id=sample_user_id, email="ada@example.com", username="ada"
        )

        claims = await token_provider.verify_token(token)

        assert claims["sub"] == sample_user_id
        assert claims["email"] == "ada@example.com"
        assert claims["username"] == "ada"
        assert "iat" in claims

    @pytest.mark.asyncio
    async def test_no_expiry_by_default(self, token_provider, sample_user_id):
        token = await token_provider.create_token(user_id=sample_user_id)

        claims = await token_provider.verify_token(token)

        assert "exp" not in claims

    @pytest.mark.asyncio
    async def test_expiry_added_when_configured(self, sample_user_id):
        provider = JWTAuth(secret=TEST_JWT_SECRET, access_token_expire_minutes=15)

        token = await provider.create_token(user_id=sample_user_id)
        claims = await provider.verify_token(token)

        assert claims["exp"] - claims["iat"] == 15 * 60

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            JWTAuth(secret="")


class TestVerifyToken:

    @pytest.mark.asyncio
    async def test_tampered_token_rejected(self, token_provider, sample_user_id):
        token = await token_provider.create_token(user_id=sample_user_id)
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{signature[::-1]}"

        with pytest.raises(ValueError):
            await token_provider.verify_token(tampered)

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret_rejected(self, token_provider, sample_user_id):
        other = JWTAuth(secret="another-secret")
        token = await other.create_token(user_id=sample_user_id)

        with pytest.raises(ValueError):
            await token_provider.verify_token(token)

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, token_provider, sample_user_id):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": sample_user_id, "iat": past, "exp": past + timedelta(minutes=5)},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(ValueError):
            await token_provider.verify_token(token)

    @pytest.mark.asyncio
    async def test_token_without_subject_rejected(self, token_provider):
        token = jwt.encode({"email": "ada@example.com"}, TEST_JWT_SECRET, algorithm="HS256")

        with pytest.raises(ValueError, match="subject"):
            await token_provider.verify_token(token)

    @pytest.mark.asyncio
    async def test_garbage_rejected(self, token_provider):
        with pytest.raises(ValueError):
            await token_provider.verify_token("not.a.token")
