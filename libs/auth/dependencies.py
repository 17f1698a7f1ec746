from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import Forbidden, Unauthenticated
from libs.common.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> AuthUser:
    """Decode an HS256 access token into an ``AuthUser``.

    Raises ``Unauthenticated`` for anything that does not verify.
    """
    settings = get_settings()
    audience = settings.AUTH_JWT_AUDIENCE
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=["HS256"],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
        return AuthUser(**payload)
    except (JWTError, ValidationError) as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise Unauthenticated() from exc


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Resolve the bearer credential on the request to the calling user.
    """
    if token is None or not token.credentials:
        raise Unauthenticated("Missing bearer credential")
    return decode_token(token.credentials)


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """
    Ensure the caller carries the ``admin`` (or ``service_role``) role.
    """
    if not current_user.is_admin:
        raise Forbidden("Admin privileges required")
    return current_user
