"""
Guia Backend — Authentication Tests
=====================================

What we test:
    ✅ Bearer tokens: round trip, expiry, foreign signature, bad payload
    ✅ Password hashing never stores the plain text
    ✅ Mutation guard: open by default, 401/403/allowed when switched on
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from guia.exceptions import ForbiddenError
from guia.services.auth_service import TokenService, hash_password, verify_password

from conftest import TEST_JWT_SECRET


class TestTokenService:

    def setup_method(self):
        self.tokens = TokenService(secret=TEST_JWT_SECRET, expire_minutes=60)

    def test_round_trip(self):
        user_id = uuid.uuid4()
        assert self.tokens.verify(self.tokens.issue(user_id)) == user_id

    def test_payload_shape(self):
        user_id = uuid.uuid4()
        claims = jwt.decode(self.tokens.issue(user_id), TEST_JWT_SECRET, algorithms=["HS256"])
        assert claims["userId"] == str(user_id)
        assert "exp" in claims

    def test_expired(self):
        token = jwt.encode(
            {"userId": str(uuid.uuid4()), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(ForbiddenError, match="expired"):
            self.tokens.verify(token)

    def test_signed_with_another_secret(self):
        other = TokenService(secret="someone-else")
        with pytest.raises(ForbiddenError):
            self.tokens.verify(other.issue(uuid.uuid4()))

    @pytest.mark.parametrize("token", ["", "not.a.jwt", "abc"])
    def test_garbage(self, token):
        with pytest.raises(ForbiddenError):
            self.tokens.verify(token)

    def test_payload_without_user_id(self):
        token = jwt.encode(
            {"sub": "x", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(ForbiddenError):
            self.tokens.verify(token)


class TestPasswords:

    @pytest.mark.asyncio
    async def test_hash_and_verify(self):
        hashed = await hash_password("secret123")
        assert hashed != "secret123"
        assert hashed.startswith("$2")
        assert await verify_password("secret123", hashed) is True
        assert await verify_password("wrong", hashed) is False

    @pytest.mark.asyncio
    async def test_non_bcrypt_value_never_matches(self):
        assert await verify_password("secret123", "secret123") is False


class TestMutationGuard:

    @staticmethod
    def form(owner):
        return {"name": "Gimnasio Titan", "user_id": str(owner.id)}

    @pytest.mark.asyncio
    async def test_open_by_default(self, client, owner):
        response = await client.post("/gyms", data=self.form(owner))
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_missing_token(self, client, context, owner):
        context.settings.require_auth_for_mutations = True
        response = await client.post("/gyms", data=self.form(owner))
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_bad_token(self, client, context, owner):
        context.settings.require_auth_for_mutations = True
        response = await client.post(
            "/gyms", data=self.form(owner), headers={"Authorization": "Bearer forged"}
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_valid_token(self, client, context, owner):
        context.settings.require_auth_for_mutations = True
        token = context.tokens.issue(owner.id)
        response = await client.post(
            "/gyms", data=self.form(owner), headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_reads_stay_open(self, client, context):
        context.settings.require_auth_for_mutations = True
        response = await client.get("/gyms")
        assert response.status_code == 200
