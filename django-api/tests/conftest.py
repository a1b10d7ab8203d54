"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from lounge import models
from lounge.services import CheckoutService, ConsoleService, SessionService
from lounge.stores.django_store import (
    DjangoCatalog,
    DjangoConsoleRegistry,
    DjangoReceiptStore,
    DjangoSessionStore,
    DjangoUnitOfWork,
)


class FakeClock:
    """Settable clock; services read it instead of the wall clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc))


@pytest.fixture
def session_service(clock: FakeClock) -> SessionService:
    return SessionService(
        consoles=DjangoConsoleRegistry(),
        catalog=DjangoCatalog(),
        sessions=DjangoSessionStore(),
        uow=DjangoUnitOfWork(),
        clock=clock,
    )


@pytest.fixture
def checkout_service(clock: FakeClock) -> CheckoutService:
    return CheckoutService(
        consoles=DjangoConsoleRegistry(),
        catalog=DjangoCatalog(),
        sessions=DjangoSessionStore(),
        receipts=DjangoReceiptStore(),
        uow=DjangoUnitOfWork(),
        clock=clock,
    )


@pytest.fixture
def console_service() -> ConsoleService:
    return ConsoleService(consoles=DjangoConsoleRegistry(), uow=DjangoUnitOfWork())


@pytest.fixture
def make_console(db):
    def factory(name="c1", rate="8.00", rate_2v2="12.00", status="available", console_type="PS5"):
        return models.Console.objects.create(
            name=name,
            type=console_type,
            status=status,
            hourly_rate=Decimal(rate),
            hourly_rate_2v2=Decimal(rate_2v2),
        )

    return factory


@pytest.fixture
def make_product(db):
    def factory(name="Cola", price="2.50", stock=45, category="drinks"):
        return models.Product.objects.create(
            name=name,
            category=category,
            price=Decimal(price),
            stock=stock,
        )

    return factory
