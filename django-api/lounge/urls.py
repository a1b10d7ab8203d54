from django.urls import path

from lounge.handlers import (
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

urlpatterns = [
    path("consoles", ConsoleListView.as_view(), name="console-list"),
    path("consoles/<str:console_id>", ConsoleDetailView.as_view(), name="console-detail"),
    path("consoles/<str:console_id>/status", ConsoleStatusView.as_view(), name="console-status"),
    path("consoles/<str:console_id>/rates", ConsoleRatesView.as_view(), name="console-rates"),
    path("sessions", SessionListView.as_view(), name="session-list"),
    path("sessions/active", ActiveSessionListView.as_view(), name="session-active"),
    path("sessions/<str:session_id>", SessionDetailView.as_view(), name="session-detail"),
    path("sessions/<str:session_id>/pause", SessionPauseView.as_view(), name="session-pause"),
    path("sessions/<str:session_id>/resume", SessionResumeView.as_view(), name="session-resume"),
    path("sessions/<str:session_id>/end", SessionEndView.as_view(), name="session-end"),
    path("sessions/<str:session_id>/mode", SessionModeView.as_view(), name="session-mode"),
    path("sessions/<str:session_id>/preview", SessionPreviewView.as_view(), name="session-preview"),
    path("sessions/<str:session_id>/items", SessionItemListView.as_view(), name="session-items"),
    path("checkout", CheckoutView.as_view(), name="checkout"),
    path("checkout/preview", CheckoutPreviewView.as_view(), name="checkout-preview"),
    path("receipts/<str:receipt_id>", ReceiptDetailView.as_view(), name="receipt-detail"),
]
