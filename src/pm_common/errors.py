"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account / credit
  3xxx: Market
  4xxx: Bet
  5xxx: Position
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class InvalidUsernameError(AppError):
    def __init__(self, username: str) -> None:
        super().__init__(1002, f"Invalid username: {username}", 400)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class PasswordChangeRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Password must be changed before trading", 403)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Admin privileges required", 403)


class UserNotFoundError(AppError):
    def __init__(self, username: str) -> None:
        super().__init__(1006, f"User not found: {username}", 404)


class InvalidPasswordError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1007, f"Invalid password: {detail}", 400)


# --- 2xxx: Account ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available credit {available}",
            422,
        )


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketClosedError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3002, f"Market is closed or resolved: {market_id}", 409)


class MarketAlreadyResolvedError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3003, f"Market is already resolved: {market_id}", 409)


class InvalidMarketInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid market input: {detail}", 400)


class DegenerateMarketError(AppError):
    """Seeds let the WPAM denominator reach zero or below: a configuration fault."""

    def __init__(self, detail: str) -> None:
        super().__init__(3005, f"Degenerate market: {detail}", 500)


# --- 4xxx: Bet ---

class InvalidAmountError(AppError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(4001, f"Invalid amount {amount}: must be at least {minimum}", 400)


class InvalidOutcomeError(AppError):
    def __init__(self, outcome: str, expected: str = "YES or NO") -> None:
        super().__init__(4002, f"Invalid outcome {outcome!r}: expected {expected}", 400)


class DustCapExceededError(AppError):
    def __init__(self, dust: int, cap: int) -> None:
        super().__init__(
            4003, f"Dust cap exceeded: sale would leave {dust} dust (cap: {cap})", 422
        )


# --- 5xxx: Position ---

class InsufficientSharesError(AppError):
    def __init__(self, requested: int, held: int) -> None:
        super().__init__(
            5001, f"Insufficient shares: requested {requested}, held {held}", 422
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class RequestTimeoutError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Request deadline exceeded", 504)
