"""JWT access-token creation and verification.

HS256 with the shared JWT_SECRET. Tokens carry the username as ``sub``;
there is no refresh flow, clients log in again once a token expires.

No token revocation: once issued, tokens are valid until expiry. A password
change does not invalidate tokens already handed out.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.pm_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_TOKEN_TYPE = "access"


def create_access_token(username: str) -> str:
    """Issue an access token (default: 30 min)."""
    now = datetime.now(UTC)
    payload = {
        "sub": username,
        "type": _TOKEN_TYPE,
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: bad signature, expired, or not an access token.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != _TOKEN_TYPE or not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
