"""Unit tests for pm_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.pm_common.enums import UserType
from src.pm_gateway.user.schemas import (
    ChangePasswordRequest,
    CreateUserRequest,
    LoginResponse,
    UserInfo,
)


class TestCreateUserRequest:
    def test_defaults_to_regular_user(self) -> None:
        req = CreateUserRequest.model_validate({"username": "alice", "password": "Passw0rdX"})
        assert req.user_type == UserType.REGULAR

    def test_accepts_camel_case_user_type(self) -> None:
        req = CreateUserRequest.model_validate(
            {"username": "root", "password": "Passw0rdX", "userType": "ADMIN"}
        )
        assert req.user_type == UserType.ADMIN

    def test_unknown_user_type(self) -> None:
        with pytest.raises(ValidationError):
            CreateUserRequest.model_validate(
                {"username": "x", "password": "Passw0rdX", "userType": "GOD"}
            )


class TestChangePasswordRequest:
    def test_camel_case_fields(self) -> None:
        req = ChangePasswordRequest.model_validate(
            {"currentPassword": "OldPassw0rd", "newPassword": "NewPassw0rd"}
        )
        assert req.current_password == "OldPassw0rd"
        assert req.new_password == "NewPassw0rd"

    def test_missing_field(self) -> None:
        with pytest.raises(ValidationError):
            ChangePasswordRequest.model_validate({"currentPassword": "OldPassw0rd"})


class TestLoginResponse:
    def test_serializes_camel_case(self) -> None:
        resp = LoginResponse(
            access_token="tok",
            user=UserInfo(username="alice", user_type="REGULAR", must_change_password=True),
        )
        dumped = resp.model_dump(by_alias=True)
        assert dumped["accessToken"] == "tok"
        assert dumped["tokenType"] == "Bearer"
        assert dumped["expiresIn"] == 1800
        assert dumped["user"]["mustChangePassword"] is True
