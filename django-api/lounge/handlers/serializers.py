"""Serializers for request payloads and domain model responses.

Request serializers check shape only; business validation (modes, rates,
quantities, prices) stays in the services so it surfaces as a domain error.
"""

from rest_framework import serializers

MONEY = {"max_digits": 10, "decimal_places": 2}


# Requests


class RegisterConsoleSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    type = serializers.CharField(max_length=10)
    rate_1v1 = serializers.DecimalField(**MONEY)
    rate_2v2 = serializers.DecimalField(required=False, allow_null=True, **MONEY)


class ConsoleStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)


class ConsoleRatesSerializer(serializers.Serializer):
    rate_1v1 = serializers.DecimalField(required=False, allow_null=True, **MONEY)
    rate_2v2 = serializers.DecimalField(required=False, allow_null=True, **MONEY)


class StartSessionSerializer(serializers.Serializer):
    console_id = serializers.CharField()
    gaming_mode = serializers.CharField(required=False, default="1v1")


class GamingModeSerializer(serializers.Serializer):
    gaming_mode = serializers.CharField()


class AddItemSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    quantity = serializers.IntegerField()


class CartItemSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    quantity = serializers.IntegerField()


class CheckoutRequestSerializer(serializers.Serializer):
    payment_method = serializers.CharField(max_length=50)
    session_id = serializers.CharField(required=False, allow_null=True, default=None)
    manual_override_price = serializers.DecimalField(required=False, allow_null=True, default=None, **MONEY)
    items = CartItemSerializer(many=True, required=False, default=list)


class CheckoutPreviewRequestSerializer(serializers.Serializer):
    session_id = serializers.CharField(required=False, allow_null=True, default=None)
    manual_override_price = serializers.DecimalField(required=False, allow_null=True, default=None, **MONEY)
    items = CartItemSerializer(many=True, required=False, default=list)


# Responses


class ConsoleSerializer(serializers.Serializer):
    """Serializer for Console domain model."""

    id = serializers.CharField(source="id.value")
    name = serializers.CharField()
    type = serializers.CharField(source="type.value")
    status = serializers.CharField(source="status.value")
    rate_1v1 = serializers.DecimalField(source="rate_1v1.amount", **MONEY)
    rate_2v2 = serializers.DecimalField(source="rate_2v2.amount", **MONEY)


class SessionItemSerializer(serializers.Serializer):
    """Serializer for running-tab lines."""

    id = serializers.CharField(source="id.value")
    product_id = serializers.CharField(source="product_id.value")
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(source="unit_price.amount", **MONEY)
    subtotal = serializers.DecimalField(source="subtotal.amount", **MONEY)
    added_at = serializers.DateTimeField()


class SessionSerializer(serializers.Serializer):
    """Serializer for Session domain model."""

    id = serializers.CharField(source="id.value")
    console_id = serializers.CharField(source="console_id.value")
    status = serializers.CharField(source="status.value")
    gaming_mode = serializers.CharField(source="gaming_mode.value")
    start_time = serializers.DateTimeField()
    paused_at = serializers.DateTimeField(allow_null=True)
    total_paused_duration_ms = serializers.IntegerField()
    end_time = serializers.DateTimeField(allow_null=True)
    final_cost = serializers.DecimalField(source="final_cost.amount", allow_null=True, **MONEY)
    billed_rate = serializers.DecimalField(source="billed_rate.amount", allow_null=True, **MONEY)
    items = SessionItemSerializer(many=True)
    items_total = serializers.DecimalField(source="items_total.amount", **MONEY)


class CostPreviewSerializer(serializers.Serializer):
    session_id = serializers.CharField(source="session_id.value")
    gaming_mode = serializers.CharField(source="gaming_mode.value")
    active_duration_ms = serializers.IntegerField()
    duration_minutes = serializers.IntegerField()
    rate_1v1 = serializers.DecimalField(source="rate_1v1.amount", **MONEY)
    rate_2v2 = serializers.DecimalField(source="rate_2v2.amount", **MONEY)
    cost_1v1 = serializers.DecimalField(source="cost_1v1.amount", **MONEY)
    cost_2v2 = serializers.DecimalField(source="cost_2v2.amount", **MONEY)
    current_cost = serializers.DecimalField(source="current_cost.amount", **MONEY)


class ConsoleUsageSerializer(serializers.Serializer):
    console_name = serializers.CharField()
    console_type = serializers.CharField()
    gaming_mode = serializers.CharField(source="gaming_mode.value")
    duration_minutes = serializers.IntegerField()
    base_rate = serializers.DecimalField(source="base_rate.amount", **MONEY)
    rate_2v2 = serializers.DecimalField(source="rate_2v2.amount", **MONEY)
    rate_used = serializers.DecimalField(source="rate_used.amount", **MONEY)
    calculated_cost = serializers.DecimalField(source="calculated_cost.amount", **MONEY)
    final_cost = serializers.DecimalField(source="final_cost.amount", **MONEY)
    subtotal = serializers.DecimalField(source="subtotal.amount", **MONEY)
    overridden = serializers.BooleanField()


class ReceiptLineSerializer(serializers.Serializer):
    product_id = serializers.CharField(source="product_id.value", allow_null=True)
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(source="unit_price.amount", **MONEY)
    subtotal = serializers.DecimalField(source="subtotal.amount", **MONEY)


class BillSerializer(serializers.Serializer):
    """Serializer for a priced, uncommitted checkout."""

    console_usage = ConsoleUsageSerializer(allow_null=True)
    items = ReceiptLineSerializer(many=True)
    subtotal = serializers.DecimalField(source="subtotal.amount", **MONEY)
    tax = serializers.DecimalField(source="tax.amount", **MONEY)
    total = serializers.DecimalField(source="total.amount", **MONEY)


class ReceiptSerializer(BillSerializer):
    """Serializer for Receipt domain model."""

    id = serializers.CharField(source="id.value")
    session_id = serializers.CharField(source="session_id.value", allow_null=True)
    payment_method = serializers.CharField()
    timestamp = serializers.DateTimeField()
