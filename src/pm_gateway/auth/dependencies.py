"""FastAPI dependencies: get_current_user, get_current_trader, require_admin.

Usage in any protected router:
    from src.pm_gateway.auth.dependencies import get_current_trader

    @router.post("/bets")
    async def place(user: Annotated[UserModel, Depends(get_current_trader)]):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import UserType
from src.pm_common.errors import (
    AdminRequiredError,
    InvalidCredentialsError,
    PasswordChangeRequiredError,
)
from src.pm_gateway.auth.jwt_handler import decode_token
from src.pm_gateway.user.db_models import UserModel

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel. 401 otherwise."""
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.username == payload["sub"]))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION
    return user


async def get_current_trader(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """A user allowed to move money: refused (403) until the initial password is changed."""
    if current_user.must_change_password:
        raise PasswordChangeRequiredError()
    return current_user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    if current_user.user_type != UserType.ADMIN.value:
        raise AdminRequiredError()
    return current_user
