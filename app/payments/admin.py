"""
Payment admin configuration.

Registers the payment domain models with the Django admin. Tokens on
LinkedPayoutAccount are never displayed.
"""

from django.contrib import admin

from payments.models import LinkedPayoutAccount, PaymentIntent, WebhookNotification


@admin.register(LinkedPayoutAccount)
class LinkedPayoutAccountAdmin(admin.ModelAdmin):
    """
    Admin configuration for LinkedPayoutAccount.

    Access and refresh tokens are excluded from the form; linking and
    refreshing only happen through the OAuth flow.
    """

    list_display = [
        "id",
        "seller",
        "collector_id",
        "nickname",
        "country",
        "status",
        "is_active",
        "token_expires_at",
        "created_at",
    ]
    list_filter = ["status", "is_active", "country"]
    search_fields = ["id", "collector_id", "email", "nickname", "seller__email"]
    exclude = ["access_token", "refresh_token"]
    readonly_fields = [
        "id",
        "collector_id",
        "public_key",
        "token_expires_at",
        "scope",
        "created_at",
        "updated_at",
        "version",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request) -> bool:
        """Accounts are created by the OAuth flow only."""
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        """Unlink is a soft deactivation; rows are kept."""
        return False


@admin.register(PaymentIntent)
class PaymentIntentAdmin(admin.ModelAdmin):
    """Admin configuration for PaymentIntent (read-mostly)."""

    list_display = [
        "id",
        "payer_reference",
        "amount",
        "marketplace_fee_amount",
        "state",
        "gateway_status",
        "seller",
        "created_at",
    ]
    list_filter = ["state", "created_at"]
    search_fields = ["id", "transaction_id", "payer_reference", "order_id"]
    readonly_fields = [
        "id",
        "state",
        "transaction_id",
        "checkout_url",
        "gateway_status",
        "gateway_payment_id",
        "status_updated_at",
        "approved_at",
        "refunded_at",
        "created_at",
        "updated_at",
        "version",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "state", "payer_reference", "seller"),
            },
        ),
        (
            "Amount",
            {
                "fields": ("amount", "marketplace_fee_amount"),
            },
        ),
        (
            "Gateway",
            {
                "fields": (
                    "transaction_id",
                    "checkout_url",
                    "gateway_status",
                    "gateway_payment_id",
                ),
            },
        ),
        (
            "References",
            {
                "fields": ("order_id", "creator_reference"),
            },
        ),
        (
            "State Timestamps",
            {
                "fields": ("status_updated_at", "approved_at", "refunded_at"),
                "classes": ("collapse",),
            },
        ),
        (
            "Metadata",
            {
                "fields": ("metadata", "version"),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for payment intents (audit trail)."""
        return False


@admin.register(WebhookNotification)
class WebhookNotificationAdmin(admin.ModelAdmin):
    """Admin configuration for the webhook audit log."""

    list_display = [
        "id",
        "topic",
        "resource_id",
        "status",
        "external_reference",
        "payment_status",
        "created_at",
    ]
    list_filter = ["topic", "status", "created_at"]
    search_fields = ["id", "resource_id", "external_reference", "idempotency_key"]
    readonly_fields = [
        "id",
        "topic",
        "resource_id",
        "idempotency_key",
        "payload",
        "query_params",
        "status",
        "external_reference",
        "payment_status",
        "error_message",
        "processed_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_add_permission(self, request) -> bool:
        return False
