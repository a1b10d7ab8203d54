from lounge.domain.models import (
    CartItem,
    Console,
    ConsoleUsage,
    CostPreview,
    Product,
    Receipt,
    ReceiptLine,
    Session,
    SessionItem,
)
from lounge.domain.value_objects import (
    ConsoleId,
    ConsoleStatus,
    ConsoleType,
    GamingMode,
    Money,
    ProductId,
    Quantity,
    ReceiptId,
    SessionId,
    SessionItemId,
    SessionStatus,
)

__all__ = [
    "CartItem",
    "Console",
    "ConsoleUsage",
    "CostPreview",
    "Product",
    "Receipt",
    "ReceiptLine",
    "Session",
    "SessionItem",
    "ConsoleId",
    "ProductId",
    "ReceiptId",
    "SessionId",
    "SessionItemId",
    "ConsoleStatus",
    "ConsoleType",
    "GamingMode",
    "SessionStatus",
    "Money",
    "Quantity",
]
