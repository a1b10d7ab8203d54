"""Integration tests for SessionService against the ORM stores.

Run with: pytest tests/test_session_service.py -v
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from lounge import models
from lounge.domain import ConsoleStatus, GamingMode, SessionStatus
from lounge.domain.errors import (
    AlreadyEndedError,
    ConsoleUnavailableError,
    ErrorCode,
    InsufficientStockError,
    InvalidGamingModeError,
    InvalidIdError,
    InvalidQuantityError,
    InvalidTransitionError,
    ProductNotFoundError,
    SessionNotFoundError,
    UnsupportedModeError,
)


@pytest.mark.django_db
class TestStartSession:
    """Tests for SessionService.start_session"""

    def test_start_marks_console_in_use(self, session_service, make_console, clock):
        """Starting a session opens it active and takes the console."""
        console = make_console()
        session = session_service.start_session(str(console.id))

        assert session.status is SessionStatus.ACTIVE
        assert session.gaming_mode is GamingMode.ONE_V_ONE
        assert session.start_time == clock.now
        console.refresh_from_db()
        assert console.status == ConsoleStatus.IN_USE.value

    def test_start_in_2v2(self, session_service, make_console):
        """The requested mode is stored on the session."""
        console = make_console()
        session = session_service.start_session(str(console.id), "2v2")
        assert session.gaming_mode is GamingMode.TWO_V_TWO

    @pytest.mark.parametrize("status", ["in-use", "maintenance", "reserved"])
    def test_start_on_unavailable_console(self, session_service, make_console, status):
        """Only available consoles can be started; nothing is created."""
        console = make_console(status=status)
        with pytest.raises(ConsoleUnavailableError):
            session_service.start_session(str(console.id))
        assert not models.Session.objects.exists()

    def test_start_twice_on_same_console(self, session_service, make_console):
        """The second start sees the console in use."""
        console = make_console()
        session_service.start_session(str(console.id))
        with pytest.raises(ConsoleUnavailableError):
            session_service.start_session(str(console.id))
        assert models.Session.objects.count() == 1

    def test_start_on_missing_console(self, session_service, db):
        """A console that does not exist is not available."""
        with pytest.raises(ConsoleUnavailableError):
            session_service.start_session(str(uuid4()))

    def test_start_with_malformed_id(self, session_service, db):
        """A non-UUID console id is rejected before any lookup."""
        with pytest.raises(InvalidIdError):
            session_service.start_session("c1")

    def test_start_with_unknown_mode(self, session_service, make_console):
        """Only 1v1 and 2v2 are accepted."""
        console = make_console()
        with pytest.raises(InvalidGamingModeError):
            session_service.start_session(str(console.id), "3v3")

    def test_start_2v2_without_rate(self, session_service, make_console):
        """A console with a zero 2v2 rate cannot start a 2v2 session."""
        console = make_console(rate_2v2="0")
        with pytest.raises(UnsupportedModeError):
            session_service.start_session(str(console.id), "2v2")
        console.refresh_from_db()
        assert console.status == ConsoleStatus.AVAILABLE.value


@pytest.mark.django_db
class TestPauseResume:
    """Tests for SessionService.pause_session and resume_session"""

    def test_pause_and_resume_accumulate_paused_time(self, session_service, make_console, clock):
        """A 15 minute pause is recorded in milliseconds."""
        session = session_service.start_session(str(make_console().id))
        clock.advance(minutes=30)
        paused = session_service.pause_session(str(session.id))
        assert paused.status is SessionStatus.PAUSED
        assert paused.paused_at == clock.now

        clock.advance(minutes=15)
        resumed = session_service.resume_session(str(session.id))
        assert resumed.status is SessionStatus.ACTIVE
        assert resumed.paused_at is None
        assert resumed.total_paused_duration_ms == 15 * 60_000

        row = models.Session.objects.get(pk=session.id.value)
        assert row.total_paused_duration_ms == 15 * 60_000

    def test_paused_time_never_decreases(self, session_service, make_console, clock):
        """Each resume adds to the running pause total."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        totals = []
        for pause_minutes in (5, 0, 10):
            session_service.pause_session(session_id)
            clock.advance(minutes=pause_minutes)
            totals.append(session_service.resume_session(session_id).total_paused_duration_ms)
            clock.advance(minutes=1)
        assert totals == sorted(totals)
        assert totals[-1] == 15 * 60_000

    def test_pause_paused_session(self, session_service, make_console):
        """Pausing twice is an invalid transition."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        session_service.pause_session(session_id)
        with pytest.raises(InvalidTransitionError):
            session_service.pause_session(session_id)

    def test_resume_active_session(self, session_service, make_console):
        """Resuming an active session is an invalid transition."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        with pytest.raises(InvalidTransitionError):
            session_service.resume_session(session_id)

    def test_pause_missing_session(self, session_service, db):
        """Unknown sessions are not found."""
        with pytest.raises(SessionNotFoundError):
            session_service.pause_session(str(uuid4()))


@pytest.mark.django_db
class TestEndSession:
    """Tests for SessionService.end_session"""

    def test_end_bills_active_time_and_frees_console(self, session_service, make_console, clock):
        """Pause 30-45 then end at 75 minutes bills one hour at 8.00."""
        console = make_console(rate="8.00", rate_2v2="12.00")
        session_id = str(session_service.start_session(str(console.id)).id)
        clock.advance(minutes=30)
        session_service.pause_session(session_id)
        clock.advance(minutes=15)
        session_service.resume_session(session_id)
        clock.advance(minutes=30)

        ended = session_service.end_session(session_id)

        assert ended.status is SessionStatus.ENDED
        assert ended.end_time == clock.now
        assert ended.final_cost.amount == Decimal("8.00")
        console.refresh_from_db()
        assert console.status == ConsoleStatus.AVAILABLE.value
        assert models.Session.objects.get(pk=ended.id.value).final_cost == Decimal("8.00")

    def test_end_uses_current_mode_rate(self, session_service, make_console, clock):
        """A session switched to 2v2 is billed at the 2v2 rate."""
        console = make_console(rate="8.00", rate_2v2="12.00")
        session_id = str(session_service.start_session(str(console.id)).id)
        session_service.change_gaming_mode(session_id, "2v2")
        clock.advance(minutes=30)
        assert session_service.end_session(session_id).final_cost.amount == Decimal("6.00")

    def test_end_stores_billed_rates(self, session_service, make_console):
        """The rates in force at end are persisted with the session."""
        console = make_console(rate="8.00", rate_2v2="12.00")
        session_id = str(session_service.start_session(str(console.id)).id)
        session_service.end_session(session_id)

        row = models.Session.objects.get(pk=session_id)
        assert (row.billed_rate_1v1, row.billed_rate_2v2) == (Decimal("8.00"), Decimal("12.00"))
        assert session_service.get_session(session_id).billed_rate.amount == Decimal("8.00")

    def test_end_while_paused(self, session_service, make_console, clock):
        """The open pause counts as paused time."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        clock.advance(minutes=30)
        session_service.pause_session(session_id)
        clock.advance(minutes=20)
        ended = session_service.end_session(session_id)
        assert ended.paused_at is None
        assert ended.total_paused_duration_ms == 20 * 60_000
        assert ended.final_cost.amount == Decimal("4.00")

    def test_end_twice(self, session_service, make_console):
        """A second end is rejected and leaves the stored cost unchanged."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        first = session_service.end_session(session_id)
        with pytest.raises(AlreadyEndedError) as exc_info:
            session_service.end_session(session_id)
        assert exc_info.value.code is ErrorCode.ALREADY_ENDED
        assert session_service.get_session(session_id).final_cost == first.final_cost

    def test_console_can_be_restarted_after_end(self, session_service, make_console):
        """Ending releases the console for a new session."""
        console = make_console()
        session_service.end_session(str(session_service.start_session(str(console.id)).id))
        assert session_service.start_session(str(console.id)).status is SessionStatus.ACTIVE


@pytest.mark.django_db
class TestChangeGamingMode:
    """Tests for SessionService.change_gaming_mode"""

    def test_change_mode_on_paused_session(self, session_service, make_console):
        """Paused sessions may switch mode."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        session_service.pause_session(session_id)
        assert session_service.change_gaming_mode(session_id, "2v2").gaming_mode is GamingMode.TWO_V_TWO

    def test_change_mode_to_unsupported(self, session_service, make_console):
        """Switching to a mode without a rate is rejected."""
        session_id = str(session_service.start_session(str(make_console(rate_2v2="0").id)).id)
        with pytest.raises(UnsupportedModeError):
            session_service.change_gaming_mode(session_id, "2v2")

    def test_change_mode_after_end(self, session_service, make_console):
        """Ended sessions keep the mode they were billed at."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        session_service.end_session(session_id)
        with pytest.raises(InvalidTransitionError):
            session_service.change_gaming_mode(session_id, "2v2")


@pytest.mark.django_db
class TestAddItem:
    """Tests for SessionService.add_item"""

    def test_add_item_takes_stock_and_captures_price(self, session_service, make_console, make_product):
        """Three colas at 2.50 leave 42 in stock and a 7.50 line."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        product = make_product(price="2.50", stock=45)

        item = session_service.add_item(session_id, str(product.id), 3)

        assert item.quantity == 3
        assert item.unit_price.amount == Decimal("2.50")
        assert item.subtotal.amount == Decimal("7.50")
        product.refresh_from_db()
        assert product.stock == 42

    def test_tab_keeps_price_after_catalog_change(self, session_service, make_console, make_product):
        """Repricing the product does not change lines already on the tab."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        product = make_product(price="2.50")
        session_service.add_item(session_id, str(product.id), 2)
        models.Product.objects.filter(pk=product.id).update(price=Decimal("9.99"))

        session = session_service.get_session(session_id)
        assert [item.unit_price.amount for item in session.items] == [Decimal("2.50")]
        assert session.items_total.amount == Decimal("5.00")

    def test_add_item_insufficient_stock(self, session_service, make_console, make_product):
        """Stock is untouched when the request exceeds it."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        product = make_product(stock=2)
        with pytest.raises(InsufficientStockError):
            session_service.add_item(session_id, str(product.id), 3)
        product.refresh_from_db()
        assert product.stock == 2
        assert not models.SessionItem.objects.exists()

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_add_item_non_positive_quantity(self, session_service, make_console, make_product, quantity):
        """Quantities must be at least one."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        with pytest.raises(InvalidQuantityError):
            session_service.add_item(session_id, str(make_product().id), quantity)

    def test_add_item_unknown_product(self, session_service, make_console):
        """Unknown products are not found."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        with pytest.raises(ProductNotFoundError):
            session_service.add_item(session_id, str(uuid4()), 1)

    def test_add_item_to_ended_session(self, session_service, make_console, make_product):
        """The tab closes when the session ends."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        session_service.end_session(session_id)
        with pytest.raises(InvalidTransitionError):
            session_service.add_item(session_id, str(make_product().id), 1)


@pytest.mark.django_db
class TestCostPreview:
    """Tests for SessionService.cost_preview"""

    def test_preview_prices_both_modes(self, session_service, make_console, clock):
        """Ninety minutes previews at 12.00 in 1v1 and 18.00 in 2v2."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        clock.advance(minutes=90)

        preview = session_service.cost_preview(session_id)

        assert preview.duration_minutes == 90
        assert preview.cost_1v1.amount == Decimal("12.00")
        assert preview.cost_2v2.amount == Decimal("18.00")
        assert preview.current_cost == preview.cost_1v1

    def test_preview_does_not_write(self, session_service, make_console, clock):
        """Previewing leaves the stored session unchanged."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        before = models.Session.objects.get(pk=session_id).updated_at
        clock.advance(minutes=10)
        session_service.cost_preview(session_id)
        row = models.Session.objects.get(pk=session_id)
        assert row.updated_at == before
        assert row.final_cost is None

    def test_preview_ended_session(self, session_service, make_console):
        """Ended sessions have a final cost instead of a preview."""
        session_id = str(session_service.start_session(str(make_console().id)).id)
        session_service.end_session(session_id)
        with pytest.raises(AlreadyEndedError):
            session_service.cost_preview(session_id)


@pytest.mark.django_db
class TestListActiveSessions:
    """Tests for SessionService.list_active_sessions"""

    def test_lists_open_sessions_only(self, session_service, make_console, clock):
        """Active and paused sessions are listed oldest first; ended ones are not."""
        first = session_service.start_session(str(make_console(name="c1").id))
        clock.advance(minutes=1)
        second = session_service.start_session(str(make_console(name="c2").id))
        clock.advance(minutes=1)
        third = session_service.start_session(str(make_console(name="c3").id))
        session_service.pause_session(str(second.id))
        session_service.end_session(str(third.id))

        listed = session_service.list_active_sessions()

        assert [session.id for session in listed] == [first.id, second.id]
