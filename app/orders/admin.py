"""Order admin configuration."""

from django.contrib import admin

from orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    """Inline display of order items."""

    model = OrderItem
    extra = 0
    readonly_fields = ["product_name", "quantity", "price", "source_id", "source_type"]
    can_delete = False

    def has_add_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin configuration for Order.

    Amounts and the payment link are fixed at creation; status changes
    come from webhook reconciliation.
    """

    list_display = [
        "id",
        "customer_email",
        "owner",
        "total",
        "marketplace_fee_amount",
        "status",
        "created_at",
    ]
    list_filter = ["status", "created_at"]
    search_fields = ["id", "customer_email", "customer_phone", "operation_id"]
    readonly_fields = [
        "id",
        "status",
        "status_updated_at",
        "subtotal",
        "marketplace_fee_percentage",
        "marketplace_fee_amount",
        "total",
        "operation_id",
        "payment_url",
        "created_at",
        "updated_at",
    ]
    inlines = [OrderItemInline]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_delete_permission(self, request, obj=None) -> bool:
        """Orders are never hard-deleted."""
        return False
