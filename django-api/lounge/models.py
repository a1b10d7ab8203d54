"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import Q

MONEY = {"max_digits": 10, "decimal_places": 2}


class Console(models.Model):
    """Persistence model for rentable consoles."""

    class Type(models.TextChoices):
        PS4 = "PS4"
        PS5 = "PS5"

    class Status(models.TextChoices):
        AVAILABLE = "available"
        IN_USE = "in-use"
        MAINTENANCE = "maintenance"
        RESERVED = "reserved"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    type = models.CharField(max_length=10, choices=Type.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    hourly_rate = models.DecimalField(**MONEY)
    hourly_rate_2v2 = models.DecimalField(**MONEY)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="lounge_cons_status_6c1b2e_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


class Product(models.Model):
    """Persistence model for retail products."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(**MONEY)
    stock = models.PositiveIntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Session(models.Model):
    """Persistence model for console rental sessions."""

    class Status(models.TextChoices):
        ACTIVE = "active"
        PAUSED = "paused"
        ENDED = "ended"

    class GamingMode(models.TextChoices):
        ONE_V_ONE = "1v1"
        TWO_V_TWO = "2v2"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    console = models.ForeignKey(Console, on_delete=models.PROTECT, related_name="sessions")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    gaming_mode = models.CharField(max_length=3, choices=GamingMode.choices, default=GamingMode.ONE_V_ONE)
    start_time = models.DateTimeField()
    paused_at = models.DateTimeField(null=True, blank=True)
    total_paused_duration_ms = models.BigIntegerField(default=0)
    end_time = models.DateTimeField(null=True, blank=True)
    final_cost = models.DecimalField(null=True, blank=True, **MONEY)
    billed_rate_1v1 = models.DecimalField(null=True, blank=True, **MONEY)
    billed_rate_2v2 = models.DecimalField(null=True, blank=True, **MONEY)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["status", "start_time"], name="lounge_sess_status_2f9a41_idx"),
        ]
        constraints = [
            # A console backs at most one open session.
            models.UniqueConstraint(
                fields=["console"],
                condition=~Q(status="ended"),
                name="one_open_session_per_console",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.console.name} - {self.status} since {self.start_time}"


class SessionItem(models.Model):
    """Persistence model for running-tab lines."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="session_items")
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(**MONEY)
    subtotal = models.DecimalField(**MONEY)
    added_at = models.DateTimeField()

    class Meta:
        ordering = ["added_at"]
        indexes = [
            models.Index(fields=["session"], name="lounge_sess_session_8d0c73_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity}"


class Receipt(models.Model):
    """Persistence model for receipts; console columns are set iff session is."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.OneToOneField(
        Session,
        on_delete=models.PROTECT,
        related_name="receipt",
        null=True,
        blank=True,
    )
    payment_method = models.CharField(max_length=50)
    subtotal = models.DecimalField(**MONEY)
    tax = models.DecimalField(**MONEY)
    total = models.DecimalField(**MONEY)
    console_name = models.CharField(max_length=100, blank=True)
    console_type = models.CharField(max_length=10, blank=True)
    gaming_mode = models.CharField(max_length=3, blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    base_hourly_rate = models.DecimalField(null=True, blank=True, **MONEY)
    hourly_rate_2v2 = models.DecimalField(null=True, blank=True, **MONEY)
    rate_used = models.DecimalField(null=True, blank=True, **MONEY)
    calculated_console_price = models.DecimalField(null=True, blank=True, **MONEY)
    final_console_price = models.DecimalField(null=True, blank=True, **MONEY)
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="lounge_rece_created_4b7e90_idx"),
        ]

    def __str__(self) -> str:
        return f"Receipt {self.id} - {self.total}"


class ReceiptItem(models.Model):
    """Persistence model for receipt lines."""

    receipt = models.ForeignKey(Receipt, on_delete=models.CASCADE, related_name="items")
    line_number = models.PositiveIntegerField()
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        related_name="receipt_items",
        null=True,
    )
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(**MONEY)
    subtotal = models.DecimalField(**MONEY)

    class Meta:
        ordering = ["line_number"]
        constraints = [
            models.UniqueConstraint(fields=["receipt", "line_number"], name="unique_receipt_line"),
        ]

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity}"
