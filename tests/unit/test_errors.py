"""Tests for pm_common.errors and pm_common.response."""

import pytest

from src.pm_common.errors import (
    AdminRequiredError,
    AppError,
    DegenerateMarketError,
    DustCapExceededError,
    InsufficientBalanceError,
    InsufficientSharesError,
    InternalError,
    InvalidAmountError,
    InvalidMarketInputError,
    InvalidOutcomeError,
    MarketAlreadyResolvedError,
    MarketClosedError,
    MarketNotFoundError,
    PasswordChangeRequiredError,
    RequestTimeoutError,
    UserNotFoundError,
)
from src.pm_common.response import (
    ApiResponse,
    app_error_response,
    error_response,
    success_response,
)


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="Username taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        err = AppError(code=1001, message="test")
        assert isinstance(err, Exception)


class TestErrorStatusMapping:
    @pytest.mark.parametrize(
        ("err", "code", "http_status"),
        [
            (InvalidAmountError(0, 1), 4001, 400),
            (InvalidOutcomeError("MAYBE"), 4002, 400),
            (InvalidMarketInputError("title"), 3004, 400),
            (MarketNotFoundError(7), 3001, 404),
            (UserNotFoundError("ghost"), 1006, 404),
            (MarketClosedError(7), 3002, 409),
            (MarketAlreadyResolvedError(7), 3003, 409),
            (InsufficientBalanceError(101, 100), 2001, 422),
            (InsufficientSharesError(11, 10), 5001, 422),
            (DustCapExceededError(3, 2), 4003, 422),
            (PasswordChangeRequiredError(), 1004, 403),
            (AdminRequiredError(), 1005, 403),
            (DegenerateMarketError("pool=0"), 3005, 500),
            (InternalError(), 9002, 500),
            (RequestTimeoutError(), 9003, 504),
        ],
    )
    def test_code_and_status(self, err: AppError, code: int, http_status: int) -> None:
        assert err.code == code
        assert err.http_status == http_status

    def test_insufficient_balance_message(self) -> None:
        err = InsufficientBalanceError(required=101, available=100)
        assert "101" in err.message
        assert "100" in err.message

    def test_invalid_outcome_names_expected_values(self) -> None:
        err = InvalidOutcomeError("x", "YES, NO or N/A")
        assert "YES, NO or N/A" in err.message


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"marketId": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"marketId": 1}

    def test_error(self) -> None:
        resp = error_response(2001, "Insufficient balance")
        assert resp.code == 2001
        assert resp.message == "Insufficient balance"
        assert resp.data is None
        assert resp.request_id.startswith("req_")

    def test_error_keeps_request_id(self) -> None:
        resp = app_error_response(MarketClosedError(3), "req_abc")
        assert resp.code == 3002
        assert resp.request_id == "req_abc"

    def test_serialization(self) -> None:
        d = success_response({"probability": 0.5}).model_dump()
        assert set(d) == {"code", "message", "data", "timestamp", "request_id"}
        assert isinstance(ApiResponse.model_validate(d), ApiResponse)
