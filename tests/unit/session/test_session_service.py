"""Tests for session credential issuance and verification."""

from datetime import timedelta

import jwt
import pytest

from notevault.core.modules.session.models import Anonymous, Authenticated
from notevault.errors import ExpiredCredentialError, InvalidCredentialError, UserNotFoundError


class TestCreateCredential:
    def test_claims_and_expiry(self, core, clock):
        """Test that the credential embeds sub, iat and exp and expires after the configured TTL."""
        issued = core.services.session.create_credential(7)

        assert issued.user_id == 7
        assert issued.issued_at == clock()
        assert issued.expires_at == clock() + timedelta(hours=core.config.session_ttl_hours)

        claims = jwt.decode(issued.token, options={"verify_signature": False})
        assert claims["sub"] == "7"
        assert claims["exp"] == int(issued.expires_at.timestamp())
        assert claims["iat"] == int(issued.issued_at.timestamp())


class TestVerify:
    async def test_valid_credential(self, core, alice):
        """Test that a fresh credential resolves to its user."""
        issued = core.services.session.create_credential(alice.id)
        assert await core.services.session.verify(issued.token) == alice.id

    async def test_tampered_signature_rejected(self, core, alice):
        """Test that flipping a signature character invalidates the credential."""
        token = core.services.session.create_credential(alice.id).token
        header, payload, signature = token.split(".")
        first = "A" if signature[0] != "A" else "B"
        with pytest.raises(InvalidCredentialError):
            await core.services.session.verify(f"{header}.{payload}.{first}{signature[1:]}")

    async def test_tampered_payload_rejected(self, core, alice, bob):
        """Test that swapping the payload for another user's claims breaks the signature."""
        token = core.services.session.create_credential(alice.id).token
        header, _, signature = token.split(".")
        forged_payload = jwt.encode({"sub": str(bob.id), "iat": 0, "exp": 2**40}, "other-secret-" * 4).split(".")[1]
        with pytest.raises(InvalidCredentialError):
            await core.services.session.verify(f"{header}.{forged_payload}.{signature}")

    async def test_wrong_secret_rejected(self, core, alice, clock):
        """Test that a credential signed with a different secret is rejected."""
        now = int(clock().timestamp())
        token = jwt.encode({"sub": str(alice.id), "iat": now, "exp": now + 3600}, "x" * 40, algorithm="HS256")
        with pytest.raises(InvalidCredentialError):
            await core.services.session.verify(token)

    async def test_missing_claims_rejected(self, core, alice):
        """Test that a correctly signed token without exp is not accepted."""
        token = jwt.encode({"sub": str(alice.id)}, core.config.session_secret_key, algorithm="HS256")
        with pytest.raises(InvalidCredentialError):
            await core.services.session.verify(token)

    async def test_non_numeric_subject_rejected(self, core, clock):
        now = int(clock().timestamp())
        token = jwt.encode({"sub": "alice", "iat": now, "exp": now + 60}, core.config.session_secret_key, algorithm="HS256")
        with pytest.raises(InvalidCredentialError):
            await core.services.session.verify(token)

    @pytest.mark.parametrize("credential", ["", "garbage", "a.b.c", "Bearer xyz"])
    async def test_malformed_rejected(self, core, credential):
        """Test that strings that are not JWTs are rejected."""
        with pytest.raises(InvalidCredentialError):
            await core.services.session.verify(credential)

    async def test_expiry_boundary(self, core, alice, clock):
        """Test that the credential works just before expiry and fails exactly at it."""
        token = core.services.session.create_credential(alice.id).token

        clock.advance(hours=core.config.session_ttl_hours, seconds=-1)
        assert await core.services.session.verify(token) == alice.id

        clock.advance(seconds=1)
        with pytest.raises(ExpiredCredentialError):
            await core.services.session.verify(token)

    async def test_deleted_user_rejected(self, core, alice):
        """Test that a valid credential for a deleted user fails the liveness check."""
        token = core.services.session.create_credential(alice.id).token
        await core.services.user.delete_user(alice.id)
        with pytest.raises(UserNotFoundError):
            await core.services.session.verify(token)

    async def test_rotated_secret_invalidates(self, core, alice, monkeypatch):
        """Test that changing the signing secret invalidates every outstanding credential."""
        token = core.services.session.create_credential(alice.id).token
        monkeypatch.setattr(core.config, "session_secret_key", "rotated-secret-rotated-secret-rotated!")
        with pytest.raises(InvalidCredentialError):
            await core.services.session.verify(token)


class TestIdentify:
    async def test_no_credential_is_anonymous(self, core):
        assert await core.services.session.identify(None) == Anonymous()
        assert await core.services.session.identify("") == Anonymous()

    async def test_valid_credential_is_authenticated(self, core, alice):
        token = core.services.session.create_credential(alice.id).token
        assert await core.services.session.identify(token) == Authenticated(user_id=alice.id)

    async def test_bad_credential_raises(self, core):
        """Test that a present but unusable credential is an error, not an anonymous identity."""
        with pytest.raises(InvalidCredentialError):
            await core.services.session.identify("garbage")
