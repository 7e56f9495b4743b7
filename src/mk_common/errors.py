"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth / caller identity
  2xxx: Funds (fees, payments, payouts)
  3xxx: Items (listing, custody)
  9xxx: System

Every error aborts the triggering operation with no state change and is
returned to the caller as-is; nothing here is retried internally.
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


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class OperatorPermissionError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(1002, f"Caller {caller!r} is not the marketplace operator", 403)


# --- 2xxx: Funds ---

class PaymentMismatchError(AppError):
    def __init__(self, required: int, paid: int) -> None:
        super().__init__(
            2001,
            f"Payment mismatch: required {required} cents, paid {paid} cents",
            422,
        )
        self.required = required
        self.paid = paid


class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2002,
            f"Insufficient ledger balance: required {required} cents, "
            f"available {available} cents",
            422,
        )


# --- 3xxx: Items ---

class ItemNotFoundError(AppError):
    def __init__(self, item_id: int) -> None:
        super().__init__(3001, f"Item not found: {item_id}", 404)


class InvalidPriceError(AppError):
    def __init__(self, price: int) -> None:
        super().__init__(3002, f"Price must be greater than zero, got {price}", 422)


class OwnershipError(AppError):
    def __init__(self, item_id: int, caller: str) -> None:
        super().__init__(
            3003, f"Caller {caller!r} is not the holder of item {item_id}", 403
        )


class CustodyTransferError(AppError):
    def __init__(self, item_id: int, from_party: str) -> None:
        super().__init__(
            3004,
            f"Custody transfer refused: {from_party!r} does not hold item {item_id}",
            409,
        )


class SoldCountUnderflowError(AppError):
    def __init__(self, item_id: int) -> None:
        super().__init__(
            3005,
            f"Cannot relist item {item_id}: no sale is outstanding to reverse",
            409,
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
