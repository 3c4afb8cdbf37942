"""
Identity token verification.

WHY: The marketplace never trusts an email supplied in a request body.
The only source of identity is a bearer token verified here:
1. Signature and expiry are checked with python-jose
2. The verified ``email`` claim becomes the caller's identity
3. Any failure maps to a 401 exception, never to a partial identity
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from marketplace.core.config import settings
from marketplace.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
)


@dataclass(frozen=True)
class Identity:
    """
    A verified caller identity.

    Attributes:
        email: Verified email claim, lower-cased
        claims: Full decoded token payload
    """

    email: str
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)


class JWTIdentityResolver:
    """
    Resolves bearer tokens into identities.

    WHY: Injected into the authorization gate so tests and alternative
    identity providers can swap the verifier without touching routes.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: Optional[str] = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def verify(self, token: str) -> Identity:
        """
        Verify a bearer token and extract the identity.

        Args:
            token: Encoded JWT

        Returns:
            Identity with the verified email

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is malformed, badly signed or has no email
        """
        options = {"verify_aud": self.audience is not None}
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError(message="Token has expired")
        except JWTError as e:
            raise TokenInvalidError(message="Invalid token", error=str(e))

        email = payload.get("email")
        if not email or not isinstance(email, str):
            raise TokenInvalidError(message="Invalid token: missing email claim")

        return Identity(email=email.strip().lower(), claims=payload)


def create_identity_token(
    email: str,
    expires_delta: Optional[timedelta] = None,
    **extra_claims: Any,
) -> str:
    """
    Issue a signed identity token for an email.

    Used by local tooling and tests; production tokens come from the
    identity provider sharing the same key.

    Args:
        email: Email claim to embed
        expires_delta: Optional custom lifetime

    Returns:
        Encoded JWT string
    """
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES))

    to_encode: Dict[str, Any] = {"email": email, **extra_claims}
    to_encode.update({"exp": expire, "iat": now, "nbf": now})
    if settings.JWT_AUDIENCE:
        to_encode.setdefault("aud", settings.JWT_AUDIENCE)

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


_identity_resolver: Optional[JWTIdentityResolver] = None


def get_identity_resolver() -> JWTIdentityResolver:
    """
    Get or create the identity resolver configured from settings.

    Returns:
        JWTIdentityResolver instance
    """
    global _identity_resolver

    if _identity_resolver is None:
        _identity_resolver = JWTIdentityResolver(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            audience=settings.JWT_AUDIENCE,
        )

    return _identity_resolver
