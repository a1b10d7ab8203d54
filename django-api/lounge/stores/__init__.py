from lounge.stores.interfaces import Catalog, ConsoleRegistry, ReceiptStore, SessionStore, UnitOfWork

__all__ = [
    "Catalog",
    "ConsoleRegistry",
    "ReceiptStore",
    "SessionStore",
    "UnitOfWork",
]
