from django.contrib import admin

from lounge.models import Console, Product, Receipt, ReceiptItem, Session, SessionItem


class SessionItemInline(admin.TabularInline):
    model = SessionItem
    extra = 0
    readonly_fields = ["product", "product_name", "quantity", "unit_price", "subtotal", "added_at"]


class ReceiptItemInline(admin.TabularInline):
    model = ReceiptItem
    extra = 0
    readonly_fields = ["line_number", "product", "product_name", "quantity", "unit_price", "subtotal"]


@admin.register(Console)
class ConsoleAdmin(admin.ModelAdmin):
    list_display = ["name", "type", "status", "hourly_rate", "hourly_rate_2v2"]
    list_filter = ["type", "status"]
    search_fields = ["name"]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["name", "category", "price", "stock", "low_stock_threshold"]
    list_filter = ["category"]
    search_fields = ["name", "category"]


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ["console", "status", "gaming_mode", "start_time", "end_time", "final_cost"]
    list_filter = ["status", "gaming_mode"]
    readonly_fields = ["total_paused_duration_ms", "final_cost", "billed_rate_1v1", "billed_rate_2v2", "end_time"]
    inlines = [SessionItemInline]


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ["id", "session", "payment_method", "total", "created_at"]
    list_filter = ["payment_method"]
    inlines = [ReceiptItemInline]
