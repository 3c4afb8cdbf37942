"""
Tests for identity token verification and the authorization gate.

WHY: Every operation trusts only the email from a verified token:
1. Valid tokens resolve to a lower-cased identity
2. Expired, badly signed or email-less tokens are rejected with 401
3. Role and ownership denials are 403 and happen before any side effect
"""

import pytest
from datetime import datetime, timedelta
from jose import jwt

from marketplace.core.auth import (
    Identity,
    JWTIdentityResolver,
    create_identity_token,
    get_identity_resolver,
)
from marketplace.core.authorization import AuthorizationGate
from marketplace.core.config import settings
from marketplace.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    TokenExpiredError,
    TokenInvalidError,
)
from marketplace.dao.user import UserDAO
from marketplace.models.user import UserRole
from tests.factories import UserFactory


class TestJWTIdentityResolver:
    """Token verification."""

    def test_valid_token_resolves_email(self):
        token = create_identity_token("Client@Example.com")

        identity = get_identity_resolver().verify(token)

        assert identity.email == "client@example.com"
        assert identity.claims["email"] == "Client@Example.com"

    def test_expired_token_rejected(self):
        token = create_identity_token("client@example.com", expires_delta=timedelta(seconds=-10))

        with pytest.raises(TokenExpiredError):
            get_identity_resolver().verify(token)

    def test_wrong_signature_rejected(self):
        token = jwt.encode(
            {"email": "client@example.com", "exp": datetime.utcnow() + timedelta(minutes=5)},
            "some-other-secret",
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            get_identity_resolver().verify(token)

    def test_missing_email_claim_rejected(self):
        token = jwt.encode(
            {"sub": "123", "exp": datetime.utcnow() + timedelta(minutes=5)},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(TokenInvalidError):
            get_identity_resolver().verify(token)

    def test_malformed_token_rejected(self):
        with pytest.raises(TokenInvalidError):
            get_identity_resolver().verify("not-a-jwt")

    def test_audience_enforced_when_configured(self):
        resolver = JWTIdentityResolver(settings.JWT_SECRET, audience="marketplace")
        token = jwt.encode(
            {"email": "a@example.com", "aud": "other", "exp": datetime.utcnow() + timedelta(minutes=5)},
            settings.JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            resolver.verify(token)


class TestAuthorizationGate:
    """Role and ownership checks."""

    def test_missing_credential_is_authentication_error(self):
        gate = AuthorizationGate(get_identity_resolver(), user_dao=None)

        with pytest.raises(AuthenticationError):
            gate.authenticate(None)

    @pytest.mark.asyncio
    async def test_authorize_returns_user_with_allowed_role(self, db_session):
        await UserFactory.create_admin(db_session)
        gate = AuthorizationGate(get_identity_resolver(), UserDAO(db_session))

        user = await gate.authorize(Identity(email="admin@example.com"), [UserRole.ADMIN])

        assert user.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_authorize_denies_wrong_role(self, db_session):
        await UserFactory.create(db_session, email="client@example.com")
        gate = AuthorizationGate(get_identity_resolver(), UserDAO(db_session))

        with pytest.raises(AuthorizationError):
            await gate.authorize(Identity(email="client@example.com"), [UserRole.ADMIN])

    @pytest.mark.asyncio
    async def test_authorize_denies_unregistered_identity(self, db_session):
        gate = AuthorizationGate(get_identity_resolver(), UserDAO(db_session))

        with pytest.raises(AuthorizationError):
            await gate.authorize(Identity(email="ghost@example.com"))

    @pytest.mark.asyncio
    async def test_owner_or_admin(self, db_session):
        await UserFactory.create_admin(db_session)
        await UserFactory.create(db_session, email="other@example.com")
        gate = AuthorizationGate(get_identity_resolver(), UserDAO(db_session))
        owners = ("CLIENT@example.com", None)

        await gate.authorize_owner_or_role(Identity(email="client@example.com"), owners)
        await gate.authorize_owner_or_role(Identity(email="admin@example.com"), owners)
        with pytest.raises(AuthorizationError):
            await gate.authorize_owner_or_role(Identity(email="other@example.com"), owners)

    @pytest.mark.asyncio
    async def test_any_listed_owner_is_admitted_without_user_record(self, db_session):
        gate = AuthorizationGate(get_identity_resolver(), UserDAO(db_session))

        await gate.authorize_owner_or_role(
            Identity(email="payer@example.com"), ("client@example.com", "payer@example.com")
        )
        with pytest.raises(AuthorizationError):
            await gate.authorize_owner_or_role(Identity(email="ghost@example.com"), ("client@example.com",))

    def test_require_self(self):
        identity = Identity(email="client@example.com")

        AuthorizationGate.require_self(identity, " Client@Example.com ")
        with pytest.raises(AuthorizationError):
            AuthorizationGate.require_self(identity, "other@example.com")
