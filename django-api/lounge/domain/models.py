"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in lounge/models.py (persistence layer).

Sessions are immutable values: each lifecycle transition returns a new
Session, leaving persistence of the result to the caller.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Self

from lounge.domain import billing
from lounge.domain.errors import AlreadyEndedError, InvalidTransitionError
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
    round2,
)


@dataclass(frozen=True)
class Console:
    """Domain representation of a rentable Console."""

    id: ConsoleId
    name: str
    type: ConsoleType
    status: ConsoleStatus
    rate_1v1: Money
    rate_2v2: Money

    def rate_for(self, mode: GamingMode) -> Money:
        if mode is GamingMode.TWO_V_TWO:
            return self.rate_2v2
        return self.rate_1v1

    def supports(self, mode: GamingMode) -> bool:
        return self.rate_for(mode).is_positive

    @property
    def is_available(self) -> bool:
        return self.status is ConsoleStatus.AVAILABLE


@dataclass(frozen=True)
class Product:
    """Domain representation of a catalog Product."""

    id: ProductId
    name: str
    category: str
    price: Money
    stock: Quantity

    def has_stock(self, quantity: int) -> bool:
        return self.stock.value >= quantity


@dataclass(frozen=True)
class SessionItem:
    """A running-tab line, priced when it was added."""

    id: SessionItemId
    session_id: SessionId
    product_id: ProductId
    product_name: str
    quantity: int
    unit_price: Money
    added_at: datetime

    @classmethod
    def capture(cls, session_id: SessionId, product: Product, quantity: int, now: datetime) -> Self:
        return cls(
            id=SessionItemId.new(),
            session_id=session_id,
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
            added_at=now,
        )

    @property
    def subtotal(self) -> Money:
        return Money(amount=round2(self.unit_price.amount * self.quantity))


@dataclass(frozen=True)
class Session:
    """Domain representation of a console rental Session."""

    id: SessionId
    console_id: ConsoleId
    status: SessionStatus
    gaming_mode: GamingMode
    start_time: datetime
    paused_at: datetime | None = None
    total_paused_duration_ms: int = 0
    end_time: datetime | None = None
    final_cost: Money | None = None
    # Hourly rates in force when the session ended.
    billed_rate_1v1: Money | None = None
    billed_rate_2v2: Money | None = None
    items: tuple[SessionItem, ...] = ()

    @classmethod
    def open(cls, console_id: ConsoleId, mode: GamingMode, now: datetime) -> Self:
        return cls(
            id=SessionId.new(),
            console_id=console_id,
            status=SessionStatus.ACTIVE,
            gaming_mode=mode,
            start_time=now,
        )

    @property
    def is_ended(self) -> bool:
        return self.status is SessionStatus.ENDED

    @property
    def items_total(self) -> Money:
        return Money(amount=sum((item.subtotal.amount for item in self.items), Decimal("0.00")))

    def paused_duration_ms(self, now: datetime) -> int:
        """Closed pause time plus the open pause interval, if any."""
        if self.status is SessionStatus.PAUSED and self.paused_at is not None:
            return self.total_paused_duration_ms + max(0, billing.elapsed_ms(self.paused_at, now))
        return self.total_paused_duration_ms

    def active_duration_ms(self, now: datetime) -> int:
        """Billable time as of ``now``; ended sessions are measured to end_time."""
        if self.end_time is not None:
            now = self.end_time
        return billing.active_duration_ms(self.start_time, now, self.paused_duration_ms(now))

    def pause(self, now: datetime) -> Self:
        if self.status is not SessionStatus.ACTIVE:
            raise InvalidTransitionError(str(self.id), self.status.value, "pause")
        return replace(self, status=SessionStatus.PAUSED, paused_at=now)

    def resume(self, now: datetime) -> Self:
        if self.status is not SessionStatus.PAUSED or self.paused_at is None:
            raise InvalidTransitionError(str(self.id), self.status.value, "resume")
        return replace(
            self,
            status=SessionStatus.ACTIVE,
            paused_at=None,
            total_paused_duration_ms=self.paused_duration_ms(now),
        )

    def switch_mode(self, mode: GamingMode) -> Self:
        if self.is_ended:
            raise InvalidTransitionError(str(self.id), self.status.value, "change the gaming mode of")
        return replace(self, gaming_mode=mode)

    @property
    def billed_rate(self) -> Money | None:
        """The rate final_cost was computed with, or None while open."""
        if self.gaming_mode is GamingMode.TWO_V_TWO:
            return self.billed_rate_2v2
        return self.billed_rate_1v1

    def end(self, now: datetime, rate_1v1: Money, rate_2v2: Money) -> Self:
        """Close the session and bill all active time at the current mode's rate.

        Both rates in force at ``now`` are recorded as the billed rates.
        """
        if self.is_ended:
            raise AlreadyEndedError(str(self.id))
        paused_ms = self.paused_duration_ms(now)
        active_ms = billing.active_duration_ms(self.start_time, now, paused_ms)
        rate = rate_2v2 if self.gaming_mode is GamingMode.TWO_V_TWO else rate_1v1
        return replace(
            self,
            status=SessionStatus.ENDED,
            paused_at=None,
            total_paused_duration_ms=paused_ms,
            end_time=now,
            final_cost=billing.cost_for(active_ms, rate),
            billed_rate_1v1=rate_1v1,
            billed_rate_2v2=rate_2v2,
        )


@dataclass(frozen=True)
class CostPreview:
    """As-of-now cost of an open session under both gaming modes."""

    session_id: SessionId
    gaming_mode: GamingMode
    active_duration_ms: int
    rate_1v1: Money
    rate_2v2: Money
    cost_1v1: Money
    cost_2v2: Money

    @property
    def duration_minutes(self) -> int:
        return billing.duration_minutes(self.active_duration_ms)

    @property
    def current_cost(self) -> Money:
        if self.gaming_mode is GamingMode.TWO_V_TWO:
            return self.cost_2v2
        return self.cost_1v1


@dataclass(frozen=True)
class CartItem:
    """A product and quantity requested at checkout."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class ConsoleUsage:
    """Snapshot of a session's billing, frozen onto its receipt."""

    console_name: str
    console_type: str
    gaming_mode: GamingMode
    duration_minutes: int
    base_rate: Money
    rate_2v2: Money
    rate_used: Money
    calculated_cost: Money
    final_cost: Money

    @property
    def subtotal(self) -> Money:
        return self.final_cost

    @property
    def overridden(self) -> bool:
        return self.final_cost != self.calculated_cost


@dataclass(frozen=True)
class ReceiptLine:
    """A receipt line with product name and unit price as sold."""

    product_id: ProductId | None
    product_name: str
    quantity: int
    unit_price: Money
    subtotal: Money

    @classmethod
    def for_product(cls, product: Product, quantity: int) -> Self:
        return cls(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
            subtotal=Money(amount=round2(product.price.amount * quantity)),
        )

    @classmethod
    def for_session_item(cls, item: SessionItem) -> Self:
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        )


@dataclass(frozen=True)
class Receipt:
    """Domain representation of an immutable Receipt."""

    id: ReceiptId
    session_id: SessionId | None
    console_usage: ConsoleUsage | None
    items: tuple[ReceiptLine, ...]
    subtotal: Money
    tax: Money
    total: Money
    payment_method: str
    timestamp: datetime
