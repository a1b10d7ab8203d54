"""Session service - the console rental lifecycle.

Every mutating operation reads the rows it changes under a lock, validates,
and writes inside one UnitOfWork.atomic() block, so concurrent requests for
the same console or session serialize on the database.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from lounge.domain import (
    Console,
    ConsoleStatus,
    CostPreview,
    GamingMode,
    Session,
    SessionItem,
)
from lounge.domain import billing
from lounge.domain.errors import (
    AlreadyEndedError,
    ConsoleNotFoundError,
    ConsoleUnavailableError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTransitionError,
    ProductNotFoundError,
    SessionNotFoundError,
    UnsupportedModeError,
)
from lounge.services.parsing import parse_console_id, parse_gaming_mode, parse_product_id, parse_session_id
from lounge.stores.interfaces import Catalog, ConsoleRegistry, SessionStore, UnitOfWork

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class SessionService:
    """Service for console rental sessions and their running tabs."""

    def __init__(
        self,
        consoles: ConsoleRegistry,
        catalog: Catalog,
        sessions: SessionStore,
        uow: UnitOfWork,
        clock: Clock = timezone.now,
    ) -> None:
        self._consoles = consoles
        self._catalog = catalog
        self._sessions = sessions
        self._uow = uow
        self._clock = clock

    def start_session(self, console_id: str, gaming_mode: str = GamingMode.ONE_V_ONE.value) -> Session:
        """Reserve a console and open an active session on it.

        Raises:
            InvalidIdError: If console_id is not a valid UUID.
            InvalidGamingModeError: If gaming_mode is not 1v1 or 2v2.
            ConsoleUnavailableError: If the console is missing or not available.
            UnsupportedModeError: If the console has no positive rate for the mode.
        """
        key = parse_console_id(console_id)
        mode = parse_gaming_mode(gaming_mode)

        with self._uow.atomic():
            console = self._consoles.get(key, for_update=True)
            if console is None or not console.is_available:
                logger.warning(
                    "Start rejected: console=%s status=%s",
                    console_id,
                    console.status.value if console else "missing",
                )
                raise ConsoleUnavailableError(console_id)
            self._require_mode(console, mode)

            self._consoles.set_status(console.id, ConsoleStatus.IN_USE)
            session = self._sessions.create(Session.open(console.id, mode, self._clock()))

        logger.info(
            "Session started: session=%s console=%s mode=%s rate=%s",
            session.id,
            console.name,
            mode.value,
            console.rate_for(mode),
        )
        return session

    def pause_session(self, session_id: str) -> Session:
        """Raises InvalidTransitionError unless the session is active."""
        key = parse_session_id(session_id)
        with self._uow.atomic():
            session = self._require_session(session_id, key, for_update=True)
            session = self._sessions.save(session.pause(self._clock()))
        logger.info("Session paused: session=%s", session.id)
        return session

    def resume_session(self, session_id: str) -> Session:
        """Raises InvalidTransitionError unless the session is paused."""
        key = parse_session_id(session_id)
        with self._uow.atomic():
            session = self._require_session(session_id, key, for_update=True)
            session = self._sessions.save(session.resume(self._clock()))
        logger.info(
            "Session resumed: session=%s total_paused_ms=%s",
            session.id,
            session.total_paused_duration_ms,
        )
        return session

    def change_gaming_mode(self, session_id: str, gaming_mode: str) -> Session:
        """Switch the billing tier of an open session.

        The mode in effect when the session ends prices the whole session;
        elapsed time is not segmented by mode.
        """
        key = parse_session_id(session_id)
        mode = parse_gaming_mode(gaming_mode)
        with self._uow.atomic():
            session = self._require_session(session_id, key, for_update=True)
            if session.is_ended:
                raise InvalidTransitionError(session_id, session.status.value, "change the gaming mode of")
            console = self._require_console(session)
            self._require_mode(console, mode)
            session = self._sessions.save(session.switch_mode(mode))
        logger.info("Session mode changed: session=%s mode=%s", session.id, mode.value)
        return session

    def end_session(self, session_id: str) -> Session:
        """Close the session, compute its final cost and release the console.

        Raises:
            SessionNotFoundError: If the session does not exist.
            AlreadyEndedError: If the session has already ended.
        """
        key = parse_session_id(session_id)
        with self._uow.atomic():
            session = self._require_session(session_id, key, for_update=True)
            if session.is_ended:
                raise AlreadyEndedError(session_id)
            console = self._require_console(session, for_update=True)
            session = self._sessions.save(session.end(self._clock(), console.rate_1v1, console.rate_2v2))
            self._consoles.set_status(console.id, ConsoleStatus.AVAILABLE)

        logger.info(
            "Session ended: session=%s mode=%s active_ms=%s final_cost=%s",
            session.id,
            session.gaming_mode.value,
            session.active_duration_ms(session.end_time),
            session.final_cost,
        )
        return session

    def add_item(self, session_id: str, product_id: str, quantity: int) -> SessionItem:
        """Sell a product onto the session's running tab.

        Stock is taken immediately and the unit price is captured at this
        moment, so later catalog edits do not change the tab.

        Raises:
            InvalidQuantityError: If quantity is not positive.
            InvalidTransitionError: If the session has ended.
            ProductNotFoundError: If the product does not exist.
            InsufficientStockError: If stock is lower than quantity.
        """
        session_key = parse_session_id(session_id)
        product_key = parse_product_id(product_id)
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        with self._uow.atomic():
            session = self._require_session(session_id, session_key, for_update=True)
            if session.is_ended:
                raise InvalidTransitionError(session_id, session.status.value, "add items to")
            product = self._catalog.get(product_key, for_update=True)
            if product is None:
                raise ProductNotFoundError(product_id)
            if not product.has_stock(quantity):
                logger.warning(
                    "Insufficient stock: product=%s requested=%s available=%s",
                    product_id,
                    quantity,
                    product.stock.value,
                )
                raise InsufficientStockError(product_id, quantity, product.stock.value)

            self._catalog.decrement_stock(product.id, quantity)
            item = self._sessions.add_item(SessionItem.capture(session.id, product, quantity, self._clock()))

        logger.info(
            "Item added: session=%s product=%s quantity=%s subtotal=%s",
            session.id,
            product.name,
            quantity,
            item.subtotal,
        )
        return item

    def cost_preview(self, session_id: str) -> CostPreview:
        """Cost so far under both gaming modes. Reads only, never writes."""
        key = parse_session_id(session_id)
        session = self._require_session(session_id, key)
        if session.is_ended:
            raise AlreadyEndedError(session_id, action="preview")
        console = self._require_console(session)

        active_ms = session.active_duration_ms(self._clock())
        return CostPreview(
            session_id=session.id,
            gaming_mode=session.gaming_mode,
            active_duration_ms=active_ms,
            rate_1v1=console.rate_1v1,
            rate_2v2=console.rate_2v2,
            cost_1v1=billing.cost_for(active_ms, console.rate_1v1),
            cost_2v2=billing.cost_for(active_ms, console.rate_2v2),
        )

    def get_session(self, session_id: str) -> Session:
        key = parse_session_id(session_id)
        return self._require_session(session_id, key)

    def list_active_sessions(self) -> list[Session]:
        """Return active and paused sessions, oldest first."""
        return self._sessions.list_open()

    def _require_session(self, raw_id: str, key, *, for_update: bool = False) -> Session:
        session = self._sessions.get(key, for_update=for_update)
        if session is None:
            raise SessionNotFoundError(raw_id)
        return session

    def _require_console(self, session: Session, *, for_update: bool = False) -> Console:
        console = self._consoles.get(session.console_id, for_update=for_update)
        if console is None:
            raise ConsoleNotFoundError(str(session.console_id))
        return console

    @staticmethod
    def _require_mode(console: Console, mode: GamingMode) -> None:
        if not console.supports(mode):
            raise UnsupportedModeError(str(console.id), mode.value)
