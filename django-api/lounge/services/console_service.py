"""Console service - registration, rates and manual status changes.

Status flips between available and in-use belong to the session lifecycle;
this service only sets the statuses staff choose by hand.
"""

import logging
from decimal import Decimal

from lounge.domain import Console, ConsoleId, ConsoleStatus, ConsoleType, GamingMode, Money
from lounge.domain.errors import (
    ConsoleNotFoundError,
    ConsoleUnavailableError,
    InvalidConsoleStatusError,
    InvalidConsoleTypeError,
    InvalidRateError,
)
from lounge.domain.value_objects import round2
from lounge.services.parsing import parse_console_id, parse_gaming_mode, parse_rate
from lounge.stores.interfaces import ConsoleRegistry, UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_2V2_MULTIPLIER = Decimal("1.5")

MANUAL_STATUSES = frozenset({ConsoleStatus.AVAILABLE, ConsoleStatus.MAINTENANCE, ConsoleStatus.RESERVED})


class ConsoleService:
    """Service for the console registry."""

    def __init__(self, consoles: ConsoleRegistry, uow: UnitOfWork) -> None:
        self._consoles = consoles
        self._uow = uow

    def register_console(
        self,
        name: str,
        console_type: str,
        rate_1v1: Decimal | str,
        rate_2v2: Decimal | str | None = None,
    ) -> Console:
        """Create an available console.

        When rate_2v2 is omitted it defaults to 1.5x the 1v1 rate, and that
        value is stored; it is never derived again at read time.
        """
        try:
            kind = ConsoleType(console_type)
        except ValueError:
            raise InvalidConsoleTypeError(console_type) from None
        base, team = _validated_rates(rate_1v1, rate_2v2)
        console = self._consoles.create(
            Console(
                id=ConsoleId.new(),
                name=name,
                type=kind,
                status=ConsoleStatus.AVAILABLE,
                rate_1v1=base,
                rate_2v2=team,
            )
        )
        logger.info(
            "Console registered: console=%s name=%s rate_1v1=%s rate_2v2=%s",
            console.id,
            console.name,
            console.rate_1v1,
            console.rate_2v2,
        )
        return console

    def get_console(self, console_id: str) -> Console:
        console = self._consoles.get(parse_console_id(console_id))
        if console is None:
            raise ConsoleNotFoundError(console_id)
        return console

    def list_available_consoles(self, gaming_mode: str | None = None) -> list[Console]:
        """Available consoles, optionally only those that can bill ``gaming_mode``."""
        consoles = self._consoles.list_by_status(ConsoleStatus.AVAILABLE)
        if gaming_mode is None:
            return consoles
        mode = parse_gaming_mode(gaming_mode)
        return [console for console in consoles if console.supports(mode)]

    def set_console_status(self, console_id: str, status: str) -> Console:
        """Raises ConsoleUnavailableError while a session holds the console."""
        key = parse_console_id(console_id)
        try:
            target = ConsoleStatus(status)
        except ValueError:
            raise InvalidConsoleStatusError(status) from None
        if target not in MANUAL_STATUSES:
            raise InvalidConsoleStatusError(status)

        with self._uow.atomic():
            console = self._consoles.get(key, for_update=True)
            if console is None:
                raise ConsoleNotFoundError(console_id)
            if console.status is ConsoleStatus.IN_USE:
                raise ConsoleUnavailableError(console_id)
            self._consoles.set_status(key, target)

        logger.info("Console status set: console=%s %s -> %s", console_id, console.status.value, target.value)
        return self.get_console(console_id)

    def update_rates(
        self,
        console_id: str,
        rate_1v1: Decimal | str | None = None,
        rate_2v2: Decimal | str | None = None,
    ) -> Console:
        """Change hourly rates; open sessions are billed at the rates in force when they end."""
        key = parse_console_id(console_id)
        with self._uow.atomic():
            console = self._consoles.get(key, for_update=True)
            if console is None:
                raise ConsoleNotFoundError(console_id)
            base, team = _validated_rates(
                rate_1v1 if rate_1v1 is not None else console.rate_1v1.amount,
                rate_2v2 if rate_2v2 is not None else console.rate_2v2.amount,
            )
            console = self._consoles.update_rates(key, base, team)
        logger.info("Console rates updated: console=%s rate_1v1=%s rate_2v2=%s", console_id, base, team)
        return console


def _validated_rates(rate_1v1: Decimal | str, rate_2v2: Decimal | str | None) -> tuple[Money, Money]:
    base = round2(parse_rate(rate_1v1, GamingMode.ONE_V_ONE.value))
    if base <= 0:
        raise InvalidRateError("1v1 rate must be positive")
    if rate_2v2 is None:
        team = round2(base * DEFAULT_2V2_MULTIPLIER)
    else:
        team = round2(parse_rate(rate_2v2, GamingMode.TWO_V_TWO.value))
    if team < 0:
        raise InvalidRateError("2v2 rate cannot be negative")
    return Money(amount=base), Money(amount=team)
