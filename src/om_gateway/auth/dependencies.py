"""FastAPI dependency: get_current_customer_id.

Usage in any protected router:
    from src.om_gateway.auth.dependencies import get_current_customer_id

    @router.get("/protected")
    async def protected(customer_id: str = Depends(get_current_customer_id)):
        ...
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.om_common.errors import InvalidTokenError
from src.om_gateway.auth.jwt_handler import customer_id_from_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is rendered through the AppError envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_customer_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Return the verified customer id from the Bearer token.

    Raises InvalidTokenError (HTTP 401) if the token is missing, invalid, or expired.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidTokenError("No authentication token provided")
    try:
        return customer_id_from_token(credentials.credentials)
    except InvalidTokenError:
        logger.warning("JWT verification failed")
        raise
