"""Conversion of raw request values into domain primitives."""

from decimal import Decimal, InvalidOperation

from lounge.domain import ConsoleId, GamingMode, ProductId, ReceiptId, SessionId
from lounge.domain.errors import InvalidGamingModeError, InvalidIdError, InvalidRateError


def parse_console_id(value: str) -> ConsoleId:
    try:
        return ConsoleId.from_string(value)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError("console") from None


def parse_product_id(value: str) -> ProductId:
    try:
        return ProductId.from_string(value)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError("product") from None


def parse_session_id(value: str) -> SessionId:
    try:
        return SessionId.from_string(value)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError("session") from None


def parse_receipt_id(value: str) -> ReceiptId:
    try:
        return ReceiptId.from_string(value)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError("receipt") from None


def parse_gaming_mode(value: str) -> GamingMode:
    try:
        return GamingMode.parse(value)
    except ValueError:
        raise InvalidGamingModeError(value) from None


def parse_rate(value: Decimal | int | str, label: str) -> Decimal:
    try:
        rate = Decimal(value)
    except (TypeError, ValueError, InvalidOperation):
        raise InvalidRateError(f"{label} rate must be a number") from None
    if not rate.is_finite():
        raise InvalidRateError(f"{label} rate must be a number")
    return rate
