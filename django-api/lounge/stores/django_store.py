"""Django ORM implementation of the lounge stores.

Each entity has exactly one row-to-domain mapping function here; nothing
outside this module sees ORM rows.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from lounge import models
from lounge.domain import (
    Console,
    ConsoleId,
    ConsoleStatus,
    ConsoleType,
    ConsoleUsage,
    GamingMode,
    Money,
    Product,
    ProductId,
    Quantity,
    Receipt,
    ReceiptId,
    ReceiptLine,
    Session,
    SessionId,
    SessionItem,
    SessionItemId,
    SessionStatus,
)
from lounge.domain.errors import (
    ConsoleNotFoundError,
    ConsoleUnavailableError,
    DuplicateCheckoutError,
    InsufficientStockError,
    ProductNotFoundError,
    TransactionFailureError,
)
from lounge.stores.interfaces import (
    Catalog,
    ConsoleRegistry,
    ReceiptStore,
    SessionStore,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

OPEN_STATUSES = [SessionStatus.ACTIVE.value, SessionStatus.PAUSED.value]


def _money(value) -> Money | None:
    return Money(amount=value) if value is not None else None


def _console_to_domain(row: models.Console) -> Console:
    return Console(
        id=ConsoleId(value=row.id),
        name=row.name,
        type=ConsoleType(row.type),
        status=ConsoleStatus(row.status),
        rate_1v1=Money(amount=row.hourly_rate),
        rate_2v2=Money(amount=row.hourly_rate_2v2),
    )


def _product_to_domain(row: models.Product) -> Product:
    return Product(
        id=ProductId(value=row.id),
        name=row.name,
        category=row.category,
        price=Money(amount=row.price),
        stock=Quantity(value=row.stock),
    )


def _item_to_domain(row: models.SessionItem) -> SessionItem:
    return SessionItem(
        id=SessionItemId(value=row.id),
        session_id=SessionId(value=row.session_id),
        product_id=ProductId(value=row.product_id),
        product_name=row.product_name,
        quantity=row.quantity,
        unit_price=Money(amount=row.unit_price),
        added_at=row.added_at,
    )


def _session_to_domain(row: models.Session, items: list[models.SessionItem]) -> Session:
    return Session(
        id=SessionId(value=row.id),
        console_id=ConsoleId(value=row.console_id),
        status=SessionStatus(row.status),
        gaming_mode=GamingMode(row.gaming_mode),
        start_time=row.start_time,
        paused_at=row.paused_at,
        total_paused_duration_ms=row.total_paused_duration_ms,
        end_time=row.end_time,
        final_cost=_money(row.final_cost),
        billed_rate_1v1=_money(row.billed_rate_1v1),
        billed_rate_2v2=_money(row.billed_rate_2v2),
        items=tuple(_item_to_domain(item) for item in items),
    )


def _receipt_to_domain(row: models.Receipt, items: list[models.ReceiptItem]) -> Receipt:
    usage = None
    if row.session_id is not None:
        usage = ConsoleUsage(
            console_name=row.console_name,
            console_type=row.console_type,
            gaming_mode=GamingMode(row.gaming_mode),
            duration_minutes=row.duration_minutes,
            base_rate=Money(amount=row.base_hourly_rate),
            rate_2v2=Money(amount=row.hourly_rate_2v2),
            rate_used=Money(amount=row.rate_used),
            calculated_cost=Money(amount=row.calculated_console_price),
            final_cost=Money(amount=row.final_console_price),
        )
    return Receipt(
        id=ReceiptId(value=row.id),
        session_id=SessionId(value=row.session_id) if row.session_id else None,
        console_usage=usage,
        items=tuple(
            ReceiptLine(
                product_id=ProductId(value=item.product_id) if item.product_id else None,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=Money(amount=item.unit_price),
                subtotal=Money(amount=item.subtotal),
            )
            for item in items
        ),
        subtotal=Money(amount=row.subtotal),
        tax=Money(amount=row.tax),
        total=Money(amount=row.total),
        payment_method=row.payment_method,
        timestamp=row.created_at,
    )


class DjangoUnitOfWork(UnitOfWork):
    """transaction.atomic() with database failures raised as domain errors."""

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            logger.exception("Transaction rolled back by the database")
            raise TransactionFailureError() from exc


class DjangoConsoleRegistry(ConsoleRegistry):
    """Relational console registry using Django ORM."""

    def get(self, console_id: ConsoleId, *, for_update: bool = False) -> Console | None:
        queryset = models.Console.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=console_id.value).first()
        return _console_to_domain(row) if row else None

    def create(self, console: Console) -> Console:
        row = models.Console.objects.create(
            id=console.id.value,
            name=console.name,
            type=console.type.value,
            status=console.status.value,
            hourly_rate=console.rate_1v1.amount,
            hourly_rate_2v2=console.rate_2v2.amount,
        )
        return _console_to_domain(row)

    def set_status(self, console_id: ConsoleId, status: ConsoleStatus) -> None:
        updated = models.Console.objects.filter(pk=console_id.value).update(
            status=status.value,
            updated_at=timezone.now(),
        )
        if not updated:
            raise ConsoleNotFoundError(str(console_id))

    def update_rates(self, console_id: ConsoleId, rate_1v1: Money, rate_2v2: Money) -> Console:
        updated = models.Console.objects.filter(pk=console_id.value).update(
            hourly_rate=rate_1v1.amount,
            hourly_rate_2v2=rate_2v2.amount,
            updated_at=timezone.now(),
        )
        if not updated:
            raise ConsoleNotFoundError(str(console_id))
        return _console_to_domain(models.Console.objects.get(pk=console_id.value))

    def list_by_status(self, status: ConsoleStatus) -> list[Console]:
        rows = models.Console.objects.filter(status=status.value).order_by("name")
        return [_console_to_domain(row) for row in rows]


class DjangoCatalog(Catalog):
    """Relational product catalog using Django ORM."""

    def get(self, product_id: ProductId, *, for_update: bool = False) -> Product | None:
        queryset = models.Product.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=product_id.value).first()
        return _product_to_domain(row) if row else None

    def decrement_stock(self, product_id: ProductId, quantity: int) -> None:
        # Conditional UPDATE so stock can never go negative, even without a lock.
        updated = models.Product.objects.filter(pk=product_id.value, stock__gte=quantity).update(
            stock=F("stock") - quantity,
            updated_at=timezone.now(),
        )
        if updated:
            return
        available = models.Product.objects.filter(pk=product_id.value).values_list("stock", flat=True).first()
        if available is None:
            raise ProductNotFoundError(str(product_id))
        raise InsufficientStockError(str(product_id), quantity, available)


class DjangoSessionStore(SessionStore):
    """Relational session store using Django ORM."""

    def create(self, session: Session) -> Session:
        try:
            with transaction.atomic():
                row = models.Session.objects.create(
                    id=session.id.value,
                    console_id=session.console_id.value,
                    status=session.status.value,
                    gaming_mode=session.gaming_mode.value,
                    start_time=session.start_time,
                )
        except IntegrityError as exc:
            raise ConsoleUnavailableError(str(session.console_id)) from exc
        return _session_to_domain(row, [])

    def get(self, session_id: SessionId, *, for_update: bool = False) -> Session | None:
        queryset = models.Session.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=session_id.value).first()
        if row is None:
            return None
        return _session_to_domain(row, list(row.items.all()))

    def save(self, session: Session) -> Session:
        models.Session.objects.filter(pk=session.id.value).update(
            status=session.status.value,
            gaming_mode=session.gaming_mode.value,
            paused_at=session.paused_at,
            total_paused_duration_ms=session.total_paused_duration_ms,
            end_time=session.end_time,
            final_cost=session.final_cost.amount if session.final_cost else None,
            billed_rate_1v1=session.billed_rate_1v1.amount if session.billed_rate_1v1 else None,
            billed_rate_2v2=session.billed_rate_2v2.amount if session.billed_rate_2v2 else None,
            updated_at=timezone.now(),
        )
        return session

    def list_open(self) -> list[Session]:
        rows = (
            models.Session.objects.filter(status__in=OPEN_STATUSES)
            .prefetch_related("items")
            .order_by("start_time")
        )
        return [_session_to_domain(row, list(row.items.all())) for row in rows]

    def add_item(self, item: SessionItem) -> SessionItem:
        row = models.SessionItem.objects.create(
            id=item.id.value,
            session_id=item.session_id.value,
            product_id=item.product_id.value,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price.amount,
            subtotal=item.subtotal.amount,
            added_at=item.added_at,
        )
        return _item_to_domain(row)


class DjangoReceiptStore(ReceiptStore):
    """Relational receipt store using Django ORM."""

    def insert(self, receipt: Receipt) -> Receipt:
        usage = receipt.console_usage
        fields = {
            "id": receipt.id.value,
            "session_id": receipt.session_id.value if receipt.session_id else None,
            "payment_method": receipt.payment_method,
            "subtotal": receipt.subtotal.amount,
            "tax": receipt.tax.amount,
            "total": receipt.total.amount,
            "created_at": receipt.timestamp,
        }
        if usage is not None:
            fields.update(
                console_name=usage.console_name,
                console_type=usage.console_type,
                gaming_mode=usage.gaming_mode.value,
                duration_minutes=usage.duration_minutes,
                base_hourly_rate=usage.base_rate.amount,
                hourly_rate_2v2=usage.rate_2v2.amount,
                rate_used=usage.rate_used.amount,
                calculated_console_price=usage.calculated_cost.amount,
                final_console_price=usage.final_cost.amount,
            )
        try:
            with transaction.atomic():
                row = models.Receipt.objects.create(**fields)
        except IntegrityError as exc:
            if receipt.session_id is None:
                raise
            raise DuplicateCheckoutError(str(receipt.session_id)) from exc

        items = models.ReceiptItem.objects.bulk_create(
            [
                models.ReceiptItem(
                    receipt=row,
                    line_number=number,
                    product_id=line.product_id.value if line.product_id else None,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price.amount,
                    subtotal=line.subtotal.amount,
                )
                for number, line in enumerate(receipt.items, start=1)
            ]
        )
        return _receipt_to_domain(row, items)

    def exists_for_session(self, session_id: SessionId) -> bool:
        return models.Receipt.objects.filter(session_id=session_id.value).exists()

    def get(self, receipt_id: ReceiptId) -> Receipt | None:
        row = models.Receipt.objects.filter(pk=receipt_id.value).prefetch_related("items").first()
        if row is None:
            return None
        return _receipt_to_domain(row, list(row.items.all()))
