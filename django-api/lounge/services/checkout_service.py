"""Checkout service - turns an ended session and a cart into one receipt.

Checkout is all-or-nothing: stock decrements, the receipt row, its lines
and the session linkage commit together inside one UnitOfWork.atomic()
block, and any failure rolls every one of them back.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from lounge.domain import (
    CartItem,
    ConsoleUsage,
    GamingMode,
    Money,
    Receipt,
    ReceiptId,
    ReceiptLine,
    Session,
)
from lounge.domain import billing
from lounge.domain.errors import (
    ConsoleNotFoundError,
    CostNotCalculatedError,
    DuplicateCheckoutError,
    InsufficientStockError,
    InvalidQuantityError,
    NegativePriceError,
    ProductNotFoundError,
    ReceiptNotFoundError,
    SessionNotEndedError,
    SessionNotFoundError,
)
from lounge.domain.value_objects import round2
from lounge.services.parsing import parse_product_id, parse_receipt_id, parse_session_id
from lounge.stores.interfaces import (
    Catalog,
    ConsoleRegistry,
    ReceiptStore,
    SessionStore,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bill:
    """A priced checkout: console usage, lines and totals."""

    console_usage: ConsoleUsage | None
    items: tuple[ReceiptLine, ...]
    subtotal: Money
    tax: Money
    total: Money


class CheckoutService:
    """Service for checkout and receipts."""

    def __init__(
        self,
        consoles: ConsoleRegistry,
        catalog: Catalog,
        sessions: SessionStore,
        receipts: ReceiptStore,
        uow: UnitOfWork,
        tax_rate: Decimal = Decimal("0"),
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._consoles = consoles
        self._catalog = catalog
        self._sessions = sessions
        self._receipts = receipts
        self._uow = uow
        self._tax_rate = tax_rate
        self._clock = clock

    def checkout(
        self,
        cart_items: Sequence[CartItem],
        payment_method: str,
        session_id: str | None = None,
        manual_override_price: Decimal | str | None = None,
    ) -> Receipt:
        """Charge a session and/or cart and persist the receipt.

        Raises:
            SessionNotFoundError: If session_id does not exist.
            SessionNotEndedError: If the session is still open.
            DuplicateCheckoutError: If the session already has a receipt.
            CostNotCalculatedError: If the session has no final cost.
            NegativePriceError: If the override is negative or not a number.
            ProductNotFoundError: If a cart product does not exist.
            InsufficientStockError: If a cart quantity exceeds stock.
            InvalidQuantityError: If a cart quantity is not positive.
        """
        _check_quantities(cart_items)

        with self._uow.atomic():
            bill = self._compose(cart_items, session_id, manual_override_price, commit=True)
            receipt = self._receipts.insert(
                Receipt(
                    id=ReceiptId.new(),
                    session_id=parse_session_id(session_id) if session_id else None,
                    console_usage=bill.console_usage,
                    items=bill.items,
                    subtotal=bill.subtotal,
                    tax=bill.tax,
                    total=bill.total,
                    payment_method=payment_method,
                    timestamp=self._clock(),
                )
            )

        usage = receipt.console_usage
        logger.info(
            "Checkout complete: receipt=%s session=%s lines=%s total=%s calculated=%s charged=%s",
            receipt.id,
            receipt.session_id,
            len(receipt.items),
            receipt.total,
            usage.calculated_cost if usage else None,
            usage.final_cost if usage else None,
        )
        return receipt

    def preview_checkout(
        self,
        cart_items: Sequence[CartItem],
        session_id: str | None = None,
        manual_override_price: Decimal | str | None = None,
    ) -> Bill:
        """Price a checkout with the same rules, taking no locks and writing nothing."""
        _check_quantities(cart_items)
        return self._compose(cart_items, session_id, manual_override_price, commit=False)

    def get_receipt(self, receipt_id: str) -> Receipt:
        receipt = self._receipts.get(parse_receipt_id(receipt_id))
        if receipt is None:
            raise ReceiptNotFoundError(receipt_id)
        return receipt

    def _compose(
        self,
        cart_items: Sequence[CartItem],
        session_id: str | None,
        manual_override_price: Decimal | str | None,
        *,
        commit: bool,
    ) -> Bill:
        subtotal = Decimal("0")
        lines: list[ReceiptLine] = []
        usage = None

        if session_id:
            session = self._ended_session(session_id, lock=commit)
            usage = self._console_usage(session, _parse_override(manual_override_price))
            subtotal += usage.final_cost.amount
            # Tab lines took their stock when they were added.
            for item in session.items:
                line = ReceiptLine.for_session_item(item)
                lines.append(line)
                subtotal += line.subtotal.amount
        else:
            _parse_override(manual_override_price)

        if commit:
            self._lock_products(cart_items)
        for cart_item in cart_items:
            line = self._sell(cart_item, commit=commit)
            lines.append(line)
            subtotal += line.subtotal.amount

        subtotal = round2(subtotal)
        tax = round2(subtotal * self._tax_rate)
        return Bill(
            console_usage=usage,
            items=tuple(lines),
            subtotal=Money(amount=subtotal),
            tax=Money(amount=tax),
            total=Money(amount=subtotal + tax),
        )

    def _ended_session(self, session_id: str, *, lock: bool) -> Session:
        key = parse_session_id(session_id)
        session = self._sessions.get(key, for_update=lock)
        if session is None:
            raise SessionNotFoundError(session_id)
        if not session.is_ended:
            raise SessionNotEndedError(session_id)
        # Checked under the session lock, in the same transaction as the insert.
        if self._receipts.exists_for_session(key):
            logger.warning("Duplicate checkout rejected: session=%s", session_id)
            raise DuplicateCheckoutError(session_id)
        if session.final_cost is None:
            raise CostNotCalculatedError(session_id)
        return session

    def _console_usage(self, session: Session, override: Decimal | None) -> ConsoleUsage:
        console = self._consoles.get(session.console_id)
        if console is None:
            raise ConsoleNotFoundError(str(session.console_id))

        # Rates billed at end; the console may have been repriced since.
        rate_1v1 = session.billed_rate_1v1 if session.billed_rate_1v1 is not None else console.rate_1v1
        rate_2v2 = session.billed_rate_2v2 if session.billed_rate_2v2 is not None else console.rate_2v2
        calculated = session.final_cost
        charged = calculated if override is None else Money(amount=round2(override))
        return ConsoleUsage(
            console_name=console.name,
            console_type=console.type.value,
            gaming_mode=session.gaming_mode,
            duration_minutes=billing.duration_minutes(session.active_duration_ms(session.end_time)),
            base_rate=rate_1v1,
            rate_2v2=rate_2v2,
            rate_used=rate_2v2 if session.gaming_mode is GamingMode.TWO_V_TWO else rate_1v1,
            calculated_cost=calculated,
            final_cost=charged,
        )

    def _lock_products(self, cart_items: Sequence[CartItem]) -> None:
        """Take product row locks in ascending id order, whatever the cart order."""
        keys = {parse_product_id(cart_item.product_id) for cart_item in cart_items}
        for key in sorted(keys, key=lambda product_id: product_id.value):
            self._catalog.get(key, for_update=True)

    def _sell(self, cart_item: CartItem, *, commit: bool) -> ReceiptLine:
        key = parse_product_id(cart_item.product_id)
        product = self._catalog.get(key, for_update=commit)
        if product is None:
            raise ProductNotFoundError(cart_item.product_id)
        if not product.has_stock(cart_item.quantity):
            logger.warning(
                "Insufficient stock: product=%s requested=%s available=%s",
                cart_item.product_id,
                cart_item.quantity,
                product.stock.value,
            )
            raise InsufficientStockError(cart_item.product_id, cart_item.quantity, product.stock.value)
        if commit:
            self._catalog.decrement_stock(product.id, cart_item.quantity)
        return ReceiptLine.for_product(product, cart_item.quantity)


def _parse_override(value: Decimal | str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        price = Decimal(value)
    except (TypeError, ValueError, InvalidOperation):
        raise NegativePriceError(Decimal("NaN")) from None
    if not price.is_finite() or price < 0:
        raise NegativePriceError(price)
    return price


def _check_quantities(cart_items: Sequence[CartItem]) -> None:
    for cart_item in cart_items:
        if cart_item.quantity <= 0:
            raise InvalidQuantityError(cart_item.quantity)
