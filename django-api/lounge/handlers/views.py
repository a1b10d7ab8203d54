"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from lounge.domain import CartItem
from lounge.domain.errors import DomainError, ErrorCode, NotFoundError
from lounge.handlers.serializers import (
    AddItemSerializer,
    BillSerializer,
    CheckoutPreviewRequestSerializer,
    CheckoutRequestSerializer,
    ConsoleRatesSerializer,
    ConsoleSerializer,
    ConsoleStatusSerializer,
    CostPreviewSerializer,
    GamingModeSerializer,
    ReceiptSerializer,
    RegisterConsoleSerializer,
    SessionItemSerializer,
    SessionSerializer,
    StartSessionSerializer,
)
from lounge.services import checkout_service, console_service, session_service


def error_status(error: DomainError) -> int:
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if error.code is ErrorCode.TRANSACTION_FAILURE:
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


class LoungeAPIView(APIView):
    """Base view translating domain errors into JSON error responses."""

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            return Response(
                {"error": {"code": exc.code.value, "message": exc.message}},
                status=error_status(exc),
            )
        return super().handle_exception(exc)


def _validated(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _cart(items: list[dict]) -> list[CartItem]:
    return [CartItem(product_id=item["product_id"], quantity=item["quantity"]) for item in items]


class ConsoleListView(LoungeAPIView):
    """Handler for GET/POST /api/consoles"""

    def get(self, request: Request) -> Response:
        consoles = console_service().list_available_consoles(request.query_params.get("mode"))
        return Response(ConsoleSerializer(consoles, many=True).data)

    def post(self, request: Request) -> Response:
        data = _validated(RegisterConsoleSerializer, request)
        console = console_service().register_console(
            name=data["name"],
            console_type=data["type"],
            rate_1v1=data["rate_1v1"],
            rate_2v2=data.get("rate_2v2"),
        )
        return Response(ConsoleSerializer(console).data, status=status.HTTP_201_CREATED)


class ConsoleDetailView(LoungeAPIView):
    """Handler for GET /api/consoles/{console_id}"""

    def get(self, request: Request, console_id: str) -> Response:
        return Response(ConsoleSerializer(console_service().get_console(console_id)).data)


class ConsoleStatusView(LoungeAPIView):
    """Handler for PATCH /api/consoles/{console_id}/status"""

    def patch(self, request: Request, console_id: str) -> Response:
        data = _validated(ConsoleStatusSerializer, request)
        console = console_service().set_console_status(console_id, data["status"])
        return Response(ConsoleSerializer(console).data)


class ConsoleRatesView(LoungeAPIView):
    """Handler for PATCH /api/consoles/{console_id}/rates"""

    def patch(self, request: Request, console_id: str) -> Response:
        data = _validated(ConsoleRatesSerializer, request)
        console = console_service().update_rates(console_id, data.get("rate_1v1"), data.get("rate_2v2"))
        return Response(ConsoleSerializer(console).data)


class SessionListView(LoungeAPIView):
    """Handler for POST /api/sessions"""

    def post(self, request: Request) -> Response:
        data = _validated(StartSessionSerializer, request)
        session = session_service().start_session(data["console_id"], data["gaming_mode"])
        return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)


class ActiveSessionListView(LoungeAPIView):
    """Handler for GET /api/sessions/active"""

    def get(self, request: Request) -> Response:
        sessions = session_service().list_active_sessions()
        return Response(SessionSerializer(sessions, many=True).data)


class SessionDetailView(LoungeAPIView):
    """Handler for GET /api/sessions/{session_id}"""

    def get(self, request: Request, session_id: str) -> Response:
        return Response(SessionSerializer(session_service().get_session(session_id)).data)


class SessionPauseView(LoungeAPIView):
    """Handler for POST /api/sessions/{session_id}/pause"""

    def post(self, request: Request, session_id: str) -> Response:
        return Response(SessionSerializer(session_service().pause_session(session_id)).data)


class SessionResumeView(LoungeAPIView):
    """Handler for POST /api/sessions/{session_id}/resume"""

    def post(self, request: Request, session_id: str) -> Response:
        return Response(SessionSerializer(session_service().resume_session(session_id)).data)


class SessionEndView(LoungeAPIView):
    """Handler for POST /api/sessions/{session_id}/end"""

    def post(self, request: Request, session_id: str) -> Response:
        return Response(SessionSerializer(session_service().end_session(session_id)).data)


class SessionModeView(LoungeAPIView):
    """Handler for PATCH /api/sessions/{session_id}/mode"""

    def patch(self, request: Request, session_id: str) -> Response:
        data = _validated(GamingModeSerializer, request)
        session = session_service().change_gaming_mode(session_id, data["gaming_mode"])
        return Response(SessionSerializer(session).data)


class SessionPreviewView(LoungeAPIView):
    """Handler for GET /api/sessions/{session_id}/preview"""

    def get(self, request: Request, session_id: str) -> Response:
        return Response(CostPreviewSerializer(session_service().cost_preview(session_id)).data)


class SessionItemListView(LoungeAPIView):
    """Handler for POST /api/sessions/{session_id}/items"""

    def post(self, request: Request, session_id: str) -> Response:
        data = _validated(AddItemSerializer, request)
        item = session_service().add_item(session_id, data["product_id"], data["quantity"])
        return Response(SessionItemSerializer(item).data, status=status.HTTP_201_CREATED)


class CheckoutView(LoungeAPIView):
    """Handler for POST /api/checkout"""

    def post(self, request: Request) -> Response:
        data = _validated(CheckoutRequestSerializer, request)
        receipt = checkout_service().checkout(
            _cart(data["items"]),
            data["payment_method"],
            session_id=data["session_id"],
            manual_override_price=data["manual_override_price"],
        )
        return Response(ReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)


class CheckoutPreviewView(LoungeAPIView):
    """Handler for POST /api/checkout/preview"""

    def post(self, request: Request) -> Response:
        data = _validated(CheckoutPreviewRequestSerializer, request)
        bill = checkout_service().preview_checkout(
            _cart(data["items"]),
            session_id=data["session_id"],
            manual_override_price=data["manual_override_price"],
        )
        return Response(BillSerializer(bill).data)


class ReceiptDetailView(LoungeAPIView):
    """Handler for GET /api/receipts/{receipt_id}"""

    def get(self, request: Request, receipt_id: str) -> Response:
        return Response(ReceiptSerializer(checkout_service().get_receipt(receipt_id)).data)
