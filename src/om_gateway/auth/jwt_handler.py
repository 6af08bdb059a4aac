"""JWT access token verification (and issuance for local development/tests).

Tokens are HS256 signed with the shared JWT_SECRET. The customer identity
lives in ``sub``; tokens minted by older clients carry it in ``id`` instead.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.om_common.errors import InvalidTokenError


def create_access_token(customer_id: str, expires_in: timedelta | None = None) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": customer_id,
        "type": "access",
        "iat": now,
        "exp": now + (expires_in or timedelta(minutes=settings.JWT_EXPIRE_MINUTES)),
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        InvalidTokenError: bad signature, malformed token or expired.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidTokenError() from None


def customer_id_from_token(token: str) -> str:
    payload = decode_token(token)
    if payload.get("type", "access") != "access":
        raise InvalidTokenError()
    customer_id = payload.get("sub") or payload.get("id")
    if not customer_id:
        raise InvalidTokenError()
    return str(customer_id)
