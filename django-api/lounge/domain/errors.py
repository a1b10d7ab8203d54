"""Domain error codes for the lounge module."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    CONSOLE_NOT_FOUND = "CONSOLE_NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    RECEIPT_NOT_FOUND = "RECEIPT_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    INVALID_GAMING_MODE = "INVALID_GAMING_MODE"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_RATE = "INVALID_RATE"
    INVALID_CONSOLE_STATUS = "INVALID_CONSOLE_STATUS"
    INVALID_CONSOLE_TYPE = "INVALID_CONSOLE_TYPE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ALREADY_ENDED = "ALREADY_ENDED"
    CONSOLE_UNAVAILABLE = "CONSOLE_UNAVAILABLE"
    UNSUPPORTED_MODE = "UNSUPPORTED_MODE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    DUPLICATE_CHECKOUT = "DUPLICATE_CHECKOUT"
    SESSION_NOT_ENDED = "SESSION_NOT_ENDED"
    COST_NOT_CALCULATED = "COST_NOT_CALCULATED"
    NEGATIVE_PRICE = "NEGATIVE_PRICE"
    TRANSACTION_FAILURE = "TRANSACTION_FAILURE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Base for lookups of records that do not exist."""


class ConsoleNotFoundError(NotFoundError):
    def __init__(self, console_id: str) -> None:
        super().__init__(
            code=ErrorCode.CONSOLE_NOT_FOUND,
            message="Console not found",
        )
        self.console_id = console_id


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str) -> None:
        super().__init__(
            code=ErrorCode.PRODUCT_NOT_FOUND,
            message=f"Product {product_id} not found",
        )
        self.product_id = product_id


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_NOT_FOUND,
            message="Session not found",
        )
        self.session_id = session_id


class ReceiptNotFoundError(NotFoundError):
    def __init__(self, receipt_id: str) -> None:
        super().__init__(
            code=ErrorCode.RECEIPT_NOT_FOUND,
            message="Receipt not found",
        )
        self.receipt_id = receipt_id


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class InvalidGamingModeError(DomainError):
    def __init__(self, value: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_GAMING_MODE,
            message='gaming_mode must be "1v1" or "2v2"',
        )
        self.value = value


class InvalidQuantityError(DomainError):
    def __init__(self, quantity: int) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message="Quantity must be a positive integer",
        )
        self.quantity = quantity


class InvalidRateError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_RATE, message=message)


class InvalidConsoleStatusError(DomainError):
    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CONSOLE_STATUS,
            message=f"Console status cannot be set to {status!r}",
        )
        self.status = status


class InvalidConsoleTypeError(DomainError):
    def __init__(self, console_type: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CONSOLE_TYPE,
            message="Console type must be PS4 or PS5",
        )
        self.console_type = console_type


class InvalidTransitionError(DomainError):
    """Raised when a session operation is not allowed from its current state."""

    def __init__(self, session_id: str, status: str, action: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {action} a session that is {status}",
        )
        self.session_id = session_id
        self.status = status
        self.action = action


class AlreadyEndedError(InvalidTransitionError):
    def __init__(self, session_id: str, action: str = "end") -> None:
        super().__init__(session_id, "ended", action)
        object.__setattr__(self, "code", ErrorCode.ALREADY_ENDED)
        object.__setattr__(self, "message", "Session has already ended")


class ConsoleUnavailableError(DomainError):
    def __init__(self, console_id: str) -> None:
        super().__init__(
            code=ErrorCode.CONSOLE_UNAVAILABLE,
            message="Console is not available",
        )
        self.console_id = console_id


class UnsupportedModeError(DomainError):
    def __init__(self, console_id: str, mode: str) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED_MODE,
            message=f"Console has no {mode} rate configured",
        )
        self.console_id = console_id
        self.mode = mode


class InsufficientStockError(DomainError):
    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_STOCK,
            message=f"Not enough stock: requested {requested}, available {available}",
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class DuplicateCheckoutError(DomainError):
    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_CHECKOUT,
            message="This session has already been paid for",
        )
        self.session_id = session_id


class SessionNotEndedError(DomainError):
    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_NOT_ENDED,
            message="Session has not been ended yet",
        )
        self.session_id = session_id


class CostNotCalculatedError(DomainError):
    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.COST_NOT_CALCULATED,
            message="Session cost has not been calculated",
        )
        self.session_id = session_id


class NegativePriceError(DomainError):
    def __init__(self, price: Decimal) -> None:
        super().__init__(
            code=ErrorCode.NEGATIVE_PRICE,
            message="Console price must be a non-negative number",
        )
        self.price = price


class TransactionFailureError(DomainError):
    """Raised when the storage layer aborts a transaction (conflict, timeout)."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TRANSACTION_FAILURE,
            message="The operation could not be completed, please retry",
        )
