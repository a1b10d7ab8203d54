"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. ``for_update`` reads take
a row lock that is held until the enclosing ``UnitOfWork.atomic()`` block
exits.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from lounge.domain import (
    Console,
    ConsoleId,
    ConsoleStatus,
    Money,
    Product,
    ProductId,
    Receipt,
    ReceiptId,
    Session,
    SessionId,
    SessionItem,
)


class UnitOfWork(ABC):
    """Transaction boundary shared by all stores."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Run the block as one transaction.

        Raises:
            TransactionFailureError: If the storage layer aborts the transaction.
        """
        ...


class ConsoleRegistry(ABC):
    """Interface for console persistence operations."""

    @abstractmethod
    def get(self, console_id: ConsoleId, *, for_update: bool = False) -> Console | None:
        """Return a console by ID, or None if not found."""
        ...

    @abstractmethod
    def create(self, console: Console) -> Console:
        ...

    @abstractmethod
    def set_status(self, console_id: ConsoleId, status: ConsoleStatus) -> None:
        ...

    @abstractmethod
    def update_rates(self, console_id: ConsoleId, rate_1v1: Money, rate_2v2: Money) -> Console:
        ...

    @abstractmethod
    def list_by_status(self, status: ConsoleStatus) -> list[Console]:
        """Return consoles with the given status ordered by name."""
        ...


class Catalog(ABC):
    """Interface for product lookup and stock movements."""

    @abstractmethod
    def get(self, product_id: ProductId, *, for_update: bool = False) -> Product | None:
        """Return a product by ID, or None if not found."""
        ...

    @abstractmethod
    def decrement_stock(self, product_id: ProductId, quantity: int) -> None:
        """Remove ``quantity`` units from stock.

        Raises:
            InsufficientStockError: If fewer than ``quantity`` units are in stock.
        """
        ...


class SessionStore(ABC):
    """Interface for session and running-tab persistence."""

    @abstractmethod
    def create(self, session: Session) -> Session:
        """Insert a new open session.

        Raises:
            ConsoleUnavailableError: If the console already backs an open session.
        """
        ...

    @abstractmethod
    def get(self, session_id: SessionId, *, for_update: bool = False) -> Session | None:
        """Return a session with its running tab, or None if not found."""
        ...

    @abstractmethod
    def save(self, session: Session) -> Session:
        """Persist the lifecycle fields of an existing session."""
        ...

    @abstractmethod
    def list_open(self) -> list[Session]:
        """Return active and paused sessions ordered by start_time ascending."""
        ...

    @abstractmethod
    def add_item(self, item: SessionItem) -> SessionItem:
        ...


class ReceiptStore(ABC):
    """Interface for receipt persistence."""

    @abstractmethod
    def insert(self, receipt: Receipt) -> Receipt:
        """Insert a receipt and its lines.

        Raises:
            DuplicateCheckoutError: If a receipt already references the session.
        """
        ...

    @abstractmethod
    def exists_for_session(self, session_id: SessionId) -> bool:
        ...

    @abstractmethod
    def get(self, receipt_id: ReceiptId) -> Receipt | None:
        """Return a receipt by ID, or None if not found."""
        ...
