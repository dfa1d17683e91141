"""
Request authentication and authorization dependencies.

Routers compose these in a fixed order: ``get_current_identity`` (the
authenticator) always resolves before ``require_admin`` (the gate), because
the gate declares the authenticator as its own dependency.  FastAPI caches
dependencies per request, so a route that needs both only verifies the token
once.

Usage in a router::

    router = APIRouter(prefix="/admin", dependencies=[Depends(get_current_identity)])

    @router.post("/categories")
    async def create_category(admin: TokenClaims = Depends(require_admin)):
        ...
"""
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from newsdesk.errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from newsdesk.security import TokenClaims, decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header or a non-Bearer scheme reaches our own
# UnauthorizedError instead of FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """Verify the bearer token and attach the identity to ``request.state``."""
    if credentials is None:
        raise UnauthorizedError("No token provided")
    try:
        identity = decode_access_token(credentials.credentials)
    except InvalidTokenError:
        logger.warning("Rejected token on %s %s", request.method, request.url.path)
        raise
    request.state.identity = identity
    return identity


async def require_admin(
    identity: TokenClaims = Depends(get_current_identity),
) -> TokenClaims:
    """Reject authenticated identities without the admin flag."""
    if not identity.is_admin:
        raise ForbiddenError("Admin access required")
    return identity
