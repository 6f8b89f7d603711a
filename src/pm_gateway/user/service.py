"""User service: login, change password, provision users.

Mutations run inside the caller's transaction (``transaction(db)``);
login is read-only.
"""

import logging
import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import (
    InvalidCredentialsError,
    InvalidPasswordError,
    InvalidUsernameError,
    UsernameExistsError,
)
from src.pm_gateway.auth.jwt_handler import create_access_token
from src.pm_gateway.auth.password import (
    hash_password,
    password_policy_violation,
    verify_password,
)
from src.pm_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,64}$")


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    async def get_by_username(self, db: AsyncSession, username: str) -> UserModel | None:
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        return result.scalar_one_or_none()

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str]:
        """Authenticate and return (user, access_token).

        "User not found" and "wrong password" both raise InvalidCredentialsError
        so usernames cannot be enumerated.
        """
        user = await self.get_by_username(db, username)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return user, create_access_token(user.username)

    async def change_password(
        self,
        user: UserModel,
        current_password: str,
        new_password: str,
        db: AsyncSession,
    ) -> UserModel:
        """Replace the password and clear must_change_password.

        ``user`` must be attached to ``db``; the caller commits.
        """
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentialsError()
        violation = password_policy_violation(new_password)
        if violation is not None:
            raise InvalidPasswordError(violation)
        if verify_password(new_password, user.password_hash):
            raise InvalidPasswordError("new password must differ from the current one")

        user.password_hash = hash_password(new_password)
        user.must_change_password = False
        await db.flush()
        logger.info("Password changed: user=%s", user.username)
        return user

    async def create_user(
        self,
        db: AsyncSession,
        username: str,
        password: str,
        user_type: str,
        initial_balance: int,
    ) -> UserModel:
        """Insert a user who must change the password on first login.

        The DB UNIQUE constraint on username is the final guard against races.
        """
        if not _USERNAME_RE.fullmatch(username):
            raise InvalidUsernameError(username)
        violation = password_policy_violation(password)
        if violation is not None:
            raise InvalidPasswordError(violation)
        if await self.get_by_username(db, username) is not None:
            raise UsernameExistsError()

        user = UserModel(
            username=username,
            password_hash=hash_password(password),
            user_type=user_type,
            account_balance=initial_balance,
            initial_account_balance=initial_balance,
            must_change_password=True,
        )
        db.add(user)
        await db.flush()  # assigns id and server defaults without committing
        await db.refresh(user)
        return user
