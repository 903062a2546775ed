from datetime import datetime, timedelta, timezone

import jwt
import pytest

from tequilas.core.config import get_settings
from tequilas.core.errors import Unauthenticated
from tequilas.core.security import (
    Claims,
    decode_token,
    has_role,
    hash_password,
    is_admin,
    is_authenticated,
    issue_token,
    verify_password,
)


def future(hours=1):
    return datetime.now(timezone.utc) + timedelta(hours=hours)


def test_predicates_on_missing_claims():
    assert not is_authenticated(None)
    assert not has_role(None, "Admin")
    assert not is_admin(None)


def test_predicates_on_customer_and_admin():
    customer = Claims(subject_id=2, email="c@x.io", user_name="c", expires_at=future())
    admin = Claims(subject_id=1, email="a@x.io", user_name="a", roles=frozenset({"Admin"}), expires_at=future())

    assert is_authenticated(customer)
    assert not is_admin(customer)
    assert is_admin(admin)
    assert has_role(admin, "Admin")
    assert not has_role(admin, "Kitchen")


def test_expired_claims_are_not_authenticated():
    stale = Claims(subject_id=1, email="a@x.io", user_name="a", roles=frozenset({"Admin"}), expires_at=future(-1))

    assert not is_authenticated(stale)
    assert not is_admin(stale)


def test_issue_and_decode_token():
    issued = issue_token(user_id=7, email="jane@example.com", user_name="jane", roles=["Admin"])
    claims = decode_token(issued.token)

    assert claims.subject_id == 7
    assert claims.email == "jane@example.com"
    assert claims.user_name == "jane"
    assert claims.roles == frozenset({"Admin"})
    assert issued.expires_at - datetime.now(timezone.utc) <= timedelta(hours=get_settings().jwt_expire_hours)


def test_expired_token_is_rejected():
    issued = issue_token(
        user_id=7,
        email="jane@example.com",
        user_name="jane",
        roles=[],
        now=datetime.now(timezone.utc) - timedelta(hours=get_settings().jwt_expire_hours + 1),
    )

    with pytest.raises(Unauthenticated, match="expired"):
        decode_token(issued.token)


def test_tokens_from_other_issuers_are_rejected():
    settings = get_settings()
    payload = {
        "sub": "1",
        "roles": ["Admin"],
        "iss": "someone-else",
        "aud": settings.jwt_audience,
        "iat": datetime.now(timezone.utc),
        "exp": future(),
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    with pytest.raises(Unauthenticated):
        decode_token(token)

    with pytest.raises(Unauthenticated):
        decode_token("not.a.token")


def test_password_hashing():
    stored = hash_password("S3cret!pass")

    assert stored != "S3cret!pass"
    assert verify_password(stored, "S3cret!pass")
    assert not verify_password(stored, "s3cret!pass")
