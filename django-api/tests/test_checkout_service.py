"""Integration tests for CheckoutService.

These cover pricing, receipt persistence and all-or-nothing stock updates.
Run with: pytest tests/test_checkout_service.py -v
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from lounge import models
from lounge.domain import CartItem, GamingMode
from lounge.domain.errors import (
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
from lounge.services import CheckoutService
from lounge.stores.django_store import (
    DjangoCatalog,
    DjangoConsoleRegistry,
    DjangoReceiptStore,
    DjangoSessionStore,
    DjangoUnitOfWork,
)


@pytest.fixture
def ended_session(session_service, make_console, clock):
    """A one hour 1v1 session on an 8.00/h console, already ended."""
    console = make_console(name="c1", rate="8.00", rate_2v2="12.00")
    session_id = str(session_service.start_session(str(console.id)).id)
    clock.advance(hours=1)
    session_service.end_session(session_id)
    return session_id


def stock_of(product) -> int:
    product.refresh_from_db()
    return product.stock


class RecordingCatalog(DjangoCatalog):
    """DjangoCatalog that records the order of locked reads."""

    def __init__(self) -> None:
        self.locked = []

    def get(self, product_id, *, for_update=False):
        if for_update:
            self.locked.append(product_id.value)
        return super().get(product_id, for_update=for_update)


@pytest.mark.django_db
class TestCheckout:
    """Tests for CheckoutService.checkout"""

    def test_checkout_session_with_override(self, checkout_service, ended_session, make_product):
        """A 5.00 override replaces the 8.00 console charge and keeps both on the receipt."""
        chips = make_product(name="Chips", price="1.75", stock=10)

        receipt = checkout_service.checkout(
            [CartItem(product_id=str(chips.id), quantity=2)],
            "cash",
            session_id=ended_session,
            manual_override_price="5.00",
        )

        usage = receipt.console_usage
        assert usage.console_name == "c1"
        assert usage.gaming_mode is GamingMode.ONE_V_ONE
        assert usage.duration_minutes == 60
        assert usage.rate_used.amount == Decimal("8.00")
        assert usage.calculated_cost.amount == Decimal("8.00")
        assert usage.final_cost.amount == Decimal("5.00")
        assert usage.overridden
        assert receipt.subtotal.amount == Decimal("8.50")
        assert receipt.total.amount == Decimal("8.50")
        assert receipt.payment_method == "cash"
        assert stock_of(chips) == 8

    def test_checkout_without_override_charges_calculated_cost(self, checkout_service, ended_session):
        """The stored final cost is charged when no override is given."""
        receipt = checkout_service.checkout([], "card", session_id=ended_session)
        assert receipt.console_usage.final_cost.amount == Decimal("8.00")
        assert not receipt.console_usage.overridden
        assert receipt.total.amount == Decimal("8.00")

    def test_zero_override_is_allowed(self, checkout_service, ended_session):
        """A complimentary session is charged nothing."""
        receipt = checkout_service.checkout([], "cash", session_id=ended_session, manual_override_price="0")
        assert receipt.console_usage.final_cost.amount == Decimal("0.00")
        assert receipt.total.amount == Decimal("0.00")

    def test_tab_items_are_copied_without_second_decrement(
        self, session_service, checkout_service, make_console, make_product
    ):
        """Lines added during play appear on the receipt; stock is taken only once."""
        cola = make_product(name="Cola", price="2.50", stock=45)
        session_id = str(session_service.start_session(str(make_console().id)).id)
        session_service.add_item(session_id, str(cola.id), 3)
        session_service.end_session(session_id)

        receipt = checkout_service.checkout([], "cash", session_id=session_id)

        assert [(line.product_name, line.quantity) for line in receipt.items] == [("Cola", 3)]
        assert receipt.items[0].subtotal.amount == Decimal("7.50")
        assert stock_of(cola) == 42

    def test_cart_only_checkout(self, checkout_service, make_product):
        """A walk-in purchase has no console usage."""
        cola = make_product(price="2.50", stock=5)

        receipt = checkout_service.checkout([CartItem(product_id=str(cola.id), quantity=2)], "cash")

        assert receipt.session_id is None
        assert receipt.console_usage is None
        assert receipt.total.amount == Decimal("5.00")
        assert stock_of(cola) == 3

    def test_receipt_is_persisted(self, checkout_service, ended_session, make_product):
        """get_receipt returns the stored receipt with its lines in order."""
        cola = make_product(name="Cola", price="2.50")
        chips = make_product(name="Chips", price="1.75")
        receipt = checkout_service.checkout(
            [CartItem(product_id=str(cola.id), quantity=1), CartItem(product_id=str(chips.id), quantity=1)],
            "cash",
            session_id=ended_session,
        )

        stored = checkout_service.get_receipt(str(receipt.id))

        assert stored.id == receipt.id
        assert [line.product_name for line in stored.items] == ["Cola", "Chips"]
        assert stored.console_usage == receipt.console_usage
        assert stored.total == receipt.total
        assert models.Receipt.objects.get(pk=receipt.id.value).session_id == receipt.session_id.value

    def test_duplicate_checkout_is_rejected(self, checkout_service, ended_session, make_product):
        """A session is paid once; the second attempt changes no stock."""
        cola = make_product(stock=10)
        cart = [CartItem(product_id=str(cola.id), quantity=1)]
        checkout_service.checkout(cart, "cash", session_id=ended_session)

        with pytest.raises(DuplicateCheckoutError):
            checkout_service.checkout(cart, "cash", session_id=ended_session)

        assert stock_of(cola) == 9
        assert models.Receipt.objects.count() == 1

    def test_failed_line_rolls_back_everything(self, checkout_service, ended_session, make_product):
        """Insufficient stock on any line leaves all stock and receipts untouched."""
        cola = make_product(name="Cola", stock=10)
        chips = make_product(name="Chips", stock=1)

        with pytest.raises(InsufficientStockError):
            checkout_service.checkout(
                [CartItem(product_id=str(cola.id), quantity=2), CartItem(product_id=str(chips.id), quantity=5)],
                "cash",
                session_id=ended_session,
            )

        assert stock_of(cola) == 10
        assert stock_of(chips) == 1
        assert not models.Receipt.objects.exists()
        assert checkout_service.checkout([], "cash", session_id=ended_session).total.amount == Decimal("8.00")

    def test_checkout_open_session(self, checkout_service, session_service, make_console):
        """Sessions must be ended before they are paid."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        with pytest.raises(SessionNotEndedError):
            checkout_service.checkout([], "cash", session_id=session_id)

    def test_checkout_missing_session(self, checkout_service, db):
        """Unknown sessions are not found."""
        with pytest.raises(SessionNotFoundError):
            checkout_service.checkout([], "cash", session_id=str(uuid4()))

    def test_checkout_session_without_cost(self, checkout_service, make_console, clock):
        """An ended session with no stored cost cannot be charged."""
        console = make_console()
        row = models.Session.objects.create(
            console=console,
            status="ended",
            start_time=clock.now,
            end_time=clock.now,
        )
        with pytest.raises(CostNotCalculatedError):
            checkout_service.checkout([], "cash", session_id=str(row.id))

    @pytest.mark.parametrize("price", ["-0.01", "-5", "abc", "NaN", "Infinity"])
    def test_invalid_override(self, checkout_service, ended_session, price):
        """Overrides must be finite and non-negative."""
        with pytest.raises(NegativePriceError):
            checkout_service.checkout([], "cash", session_id=ended_session, manual_override_price=price)
        assert not models.Receipt.objects.exists()

    def test_unknown_product(self, checkout_service, db):
        """Cart lines must reference existing products."""
        with pytest.raises(ProductNotFoundError):
            checkout_service.checkout([CartItem(product_id=str(uuid4()), quantity=1)], "cash")

    def test_non_positive_quantity(self, checkout_service, make_product):
        """Cart quantities must be at least one."""
        with pytest.raises(InvalidQuantityError):
            checkout_service.checkout([CartItem(product_id=str(make_product().id), quantity=0)], "cash")

    def test_tax_is_applied_to_subtotal(self, ended_session, make_product, clock):
        """Tax is the configured fraction of the subtotal, rounded to cents."""
        service = CheckoutService(
            consoles=DjangoConsoleRegistry(),
            catalog=DjangoCatalog(),
            sessions=DjangoSessionStore(),
            receipts=DjangoReceiptStore(),
            uow=DjangoUnitOfWork(),
            tax_rate=Decimal("0.075"),
            clock=clock,
        )
        cola = make_product(price="2.50")

        receipt = service.checkout([CartItem(product_id=str(cola.id), quantity=1)], "cash", session_id=ended_session)

        assert receipt.subtotal.amount == Decimal("10.50")
        assert receipt.tax.amount == Decimal("0.79")
        assert receipt.total.amount == Decimal("11.29")

    def test_literal_override_scenario(self, checkout_service, ended_session):
        """checkout([], cash, s1, 5.00) on an 8.00 session charges 5.00 in total."""
        receipt = checkout_service.checkout([], "cash", session_id=ended_session, manual_override_price=Decimal("5.00"))

        assert receipt.console_usage.calculated_cost.amount == Decimal("8.00")
        assert receipt.console_usage.final_cost.amount == Decimal("5.00")
        assert receipt.subtotal.amount == Decimal("5.00")
        assert receipt.total.amount == Decimal("5.00")
        assert receipt.items == ()

    def test_receipt_keeps_rates_billed_at_end(self, checkout_service, console_service, ended_session):
        """Repricing the console after end does not change the receipt's rates."""
        console_id = str(models.Session.objects.get(pk=ended_session).console_id)
        console_service.update_rates(console_id, rate_1v1="10.00", rate_2v2="15.00")

        usage = checkout_service.checkout([], "cash", session_id=ended_session).console_usage

        assert usage.rate_used.amount == Decimal("8.00")
        assert usage.base_rate.amount == Decimal("8.00")
        assert usage.rate_2v2.amount == Decimal("12.00")
        assert usage.rate_used.amount * usage.duration_minutes / 60 == usage.calculated_cost.amount

    def test_negative_override_on_open_session_reports_not_ended(
        self, checkout_service, session_service, make_console
    ):
        """Session state is checked before the override."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        with pytest.raises(SessionNotEndedError):
            checkout_service.checkout([], "cash", session_id=session_id, manual_override_price="-1")

    def test_negative_override_on_paid_session_reports_duplicate(self, checkout_service, ended_session):
        """A paid session is a duplicate whatever override is sent."""
        checkout_service.checkout([], "cash", session_id=ended_session)
        with pytest.raises(DuplicateCheckoutError):
            checkout_service.checkout([], "cash", session_id=ended_session, manual_override_price="-1")

    def test_products_locked_in_id_order(self, make_product, clock):
        """Row locks follow product id order; receipt lines follow cart order."""
        catalog = RecordingCatalog()
        service = CheckoutService(
            consoles=DjangoConsoleRegistry(),
            catalog=catalog,
            sessions=DjangoSessionStore(),
            receipts=DjangoReceiptStore(),
            uow=DjangoUnitOfWork(),
            clock=clock,
        )
        first, second = sorted([make_product(name="Cola"), make_product(name="Chips")], key=lambda row: row.id)
        cart = [CartItem(product_id=str(second.id), quantity=1), CartItem(product_id=str(first.id), quantity=1)]

        receipt = service.checkout(cart, "cash")

        assert catalog.locked[:2] == [first.id, second.id]
        assert [line.product_name for line in receipt.items] == [second.name, first.name]



@pytest.mark.django_db
class TestPreviewCheckout:
    """Tests for CheckoutService.preview_checkout"""

    def test_preview_writes_nothing(self, checkout_service, ended_session, make_product):
        """The bill matches a checkout but stock and receipts are untouched."""
        cola = make_product(price="2.50", stock=5)

        bill = checkout_service.preview_checkout(
            [CartItem(product_id=str(cola.id), quantity=2)],
            session_id=ended_session,
            manual_override_price="6.00",
        )

        assert bill.console_usage.final_cost.amount == Decimal("6.00")
        assert bill.total.amount == Decimal("11.00")
        assert stock_of(cola) == 5
        assert not models.Receipt.objects.exists()

    def test_preview_of_paid_session(self, checkout_service, ended_session):
        """A paid session cannot be previewed for payment again."""
        checkout_service.checkout([], "cash", session_id=ended_session)
        with pytest.raises(DuplicateCheckoutError):
            checkout_service.preview_checkout([], session_id=ended_session)

    def test_preview_insufficient_stock(self, checkout_service, make_product):
        """Stock shortfalls surface before payment."""
        cola = make_product(stock=1)
        with pytest.raises(InsufficientStockError):
            checkout_service.preview_checkout([CartItem(product_id=str(cola.id), quantity=2)])


@pytest.mark.django_db
class TestGetReceipt:
    """Tests for CheckoutService.get_receipt"""

    def test_missing_receipt(self, checkout_service):
        """Unknown receipts are not found."""
        with pytest.raises(ReceiptNotFoundError):
            checkout_service.get_receipt(str(uuid4()))
