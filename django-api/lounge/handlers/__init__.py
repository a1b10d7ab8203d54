from lounge.handlers.views import (
    ActiveSessionListView,
    CheckoutPreviewView,
    CheckoutView,
    ConsoleDetailView,
    ConsoleListView,
    ConsoleRatesView,
    ConsoleStatusView,
    ReceiptDetailView,
    SessionDetailView,
    SessionEndView,
    SessionItemListView,
    SessionListView,
    SessionModeView,
    SessionPauseView,
    SessionPreviewView,
    SessionResumeView,
)

__all__ = [
    "ActiveSessionListView",
    "CheckoutPreviewView",
    "CheckoutView",
    "ConsoleDetailView",
    "ConsoleListView",
    "ConsoleRatesView",
    "ConsoleStatusView",
    "ReceiptDetailView",
    "SessionDetailView",
    "SessionEndView",
    "SessionItemListView",
    "SessionListView",
    "SessionModeView",
    "SessionPauseView",
    "SessionPreviewView",
    "SessionResumeView",
]
