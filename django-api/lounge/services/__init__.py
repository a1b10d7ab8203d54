"""Service construction with the Django-backed stores."""

from django.conf import settings

from lounge.services.checkout_service import CheckoutService
from lounge.services.console_service import ConsoleService
from lounge.services.session_service import SessionService
from lounge.stores.django_store import (
    DjangoCatalog,
    DjangoConsoleRegistry,
    DjangoReceiptStore,
    DjangoSessionStore,
    DjangoUnitOfWork,
)

__all__ = [
    "CheckoutService",
    "ConsoleService",
    "SessionService",
    "checkout_service",
    "console_service",
    "session_service",
]


def session_service() -> SessionService:
    return SessionService(
        consoles=DjangoConsoleRegistry(),
        catalog=DjangoCatalog(),
        sessions=DjangoSessionStore(),
        uow=DjangoUnitOfWork(),
    )


def checkout_service() -> CheckoutService:
    return CheckoutService(
        consoles=DjangoConsoleRegistry(),
        catalog=DjangoCatalog(),
        sessions=DjangoSessionStore(),
        receipts=DjangoReceiptStore(),
        uow=DjangoUnitOfWork(),
        tax_rate=settings.LOUNGE_TAX_RATE,
    )


def console_service() -> ConsoleService:
    return ConsoleService(consoles=DjangoConsoleRegistry(), uow=DjangoUnitOfWork())
