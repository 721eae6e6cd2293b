import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.exceptions import Forbidden, Unauthorized
from fleet_issues.core.security import Principal, decode_access_token

logger = logging.getLogger(__name__)

# Swagger UI "Authorize" support. Browsers send the token cookie instead.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_session(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[Principal]:
    """
    Resolves the request's Principal from the bearer header or the session cookie.
    Returns None when there is no token or it does not verify.
    """
    token = bearer_token or request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    return decode_access_token(token, settings)


async def require_auth(session: Optional[Principal] = Depends(get_session)) -> Principal:
    if session is None:
        raise Unauthorized()
    return session


async def require_admin(principal: Principal = Depends(require_auth)) -> Principal:
    if not principal.is_admin:
        logger.warning(f"⚠️ Non-admin {principal.id} hit an admin-only route")
        raise Forbidden()
    return principal
