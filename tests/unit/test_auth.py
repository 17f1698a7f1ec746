"""Unit tests for bearer credential resolution."""

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt
from libs.auth.dependencies import decode_token, get_current_user, require_admin
from libs.common.config import get_settings
from libs.common.errors import Forbidden, Unauthenticated
from tests.conftest import make_member_user


def _token(**claims):
    payload = {"sub": "member-jwt", "email": "jwt@test.com", "role": "authenticated"}
    payload.update(claims)
    return jwt.encode(payload, get_settings().AUTH_JWT_SECRET, algorithm="HS256")


@pytest.mark.unit
def test_decode_token_maps_claims():
    user = decode_token(_token(name="Jordan Reyes"))

    assert user.user_id == "member-jwt"
    assert user.email == "jwt@test.com"
    assert user.name == "Jordan Reyes"
    assert user.is_admin is False


@pytest.mark.unit
def test_decode_token_rejects_bad_signature():
    token = jwt.encode({"sub": "member-jwt"}, "not-the-secret", algorithm="HS256")

    with pytest.raises(Unauthenticated):
        decode_token(token)


@pytest.mark.unit
def test_decode_token_rejects_missing_subject():
    token = jwt.encode(
        {"email": "jwt@test.com"}, get_settings().AUTH_JWT_SECRET, algorithm="HS256"
    )

    with pytest.raises(Unauthenticated):
        decode_token(token)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_current_user_requires_credential():
    with pytest.raises(Unauthenticated):
        await get_current_user(None)

    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=_token())
    user = await get_current_user(credentials)
    assert user.user_id == "member-jwt"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_require_admin():
    admin = make_member_user(role="admin")
    assert await require_admin(admin) is admin

    with pytest.raises(Forbidden):
        await require_admin(make_member_user())
