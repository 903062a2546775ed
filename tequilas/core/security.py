"""
Security Primitives

- Password hashing (werkzeug.security, salted scrypt/pbkdf2)
- Bearer token issuing and verification (PyJWT, HS256)
- Claims: the verified identity attached to each authenticated request
- Authorization predicates: pure functions over Claims

Usage:
    from tequilas.core.security import issue_token, decode_token, is_admin

    issued = issue_token(user_id=7, email="a@b.c", user_name="a", roles=["Admin"])
    claims = decode_token(issued.token)
    assert is_admin(claims)

Version: 1.0.0
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from tequilas.core.config import get_settings
from tequilas.core.errors import Unauthenticated

logger = logging.getLogger(__name__)


# =============================================================================
# PASSWORDS
# =============================================================================

def hash_password(password: str) -> str:
    """Return a salted hash suitable for storage."""
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


# =============================================================================
# CLAIMS
# =============================================================================

@dataclass(frozen=True)
class Claims:
    """
    Verified, deserialized token content.

    Attributes:
        subject_id: Stable user identifier (users.id)
        email: Email at the time the token was issued
        user_name: Display name at the time the token was issued
        roles: Role names granted to the subject
        expires_at: UTC expiry of the token
    """
    subject_id: int
    email: str
    user_name: str
    roles: frozenset[str] = field(default_factory=frozenset)
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime
    claims: Claims


def is_authenticated(claims: Optional[Claims]) -> bool:
    """True when a verified, unexpired identity is present."""
    if claims is None:
        return False
    if claims.expires_at is not None and claims.expires_at <= datetime.now(timezone.utc):
        return False
    return True


def has_role(claims: Optional[Claims], role: str) -> bool:
    return is_authenticated(claims) and role in claims.roles


def is_admin(claims: Optional[Claims]) -> bool:
    return has_role(claims, get_settings().admin_role)


# =============================================================================
# TOKENS
# =============================================================================

def issue_token(
    user_id: int,
    email: str,
    user_name: str,
    roles: Iterable[str],
    now: Optional[datetime] = None,
) -> IssuedToken:
    """
    Sign a bearer token for the given identity.

    Args:
        user_id: Subject identifier
        email: Subject email
        user_name: Subject display name
        roles: Role names to embed
        now: Issue time (defaults to the current UTC time)

    Returns:
        IssuedToken: Encoded token with its expiry and claims
    """
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(hours=settings.jwt_expire_hours)
    role_list = sorted(set(roles))

    payload = {
        "sub": str(user_id),
        "email": email,
        "name": user_name,
        "roles": role_list,
        "jti": uuid.uuid4().hex,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    return IssuedToken(
        token=token,
        expires_at=expires_at,
        claims=Claims(
            subject_id=user_id,
            email=email,
            user_name=user_name,
            roles=frozenset(role_list),
            expires_at=expires_at,
        ),
    )


def decode_token(token: str) -> Claims:
    """
    Verify signature, expiry, issuer and audience, then build Claims.

    Raises:
        Unauthenticated: If the token is expired, tampered with or malformed
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise Unauthenticated("Invalid token")

    try:
        subject_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid token subject")

    roles = payload.get("roles") or []
    if not isinstance(roles, list):
        roles = [roles]

    return Claims(
        subject_id=subject_id,
        email=payload.get("email", ""),
        user_name=payload.get("name", ""),
        roles=frozenset(str(r) for r in roles),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
