"""Pydantic request/response schemas for pm_gateway.

All responses are wrapped in ApiResponse[T] at the router layer. Username
and password rules are enforced by UserService so violations surface as
400 domain errors rather than 422 validation errors.
"""

from src.pm_common.enums import UserType
from src.pm_common.schemas import CamelModel


class LoginRequest(CamelModel):
    username: str
    password: str


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class CreateUserRequest(CamelModel):
    username: str
    password: str
    user_type: UserType = UserType.REGULAR


class UserInfo(CamelModel):
    """Minimal user info embedded in responses."""

    username: str
    user_type: str
    must_change_password: bool


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds
    user: UserInfo


class CreatedUserResponse(CamelModel):
    username: str
    user_type: str
    account_balance: int
    must_change_password: bool
    created_at: str
