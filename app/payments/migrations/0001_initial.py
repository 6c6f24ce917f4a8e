import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LinkedPayoutAccount",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, help_text="Incremented on each save"
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Flexible key-value metadata storage",
                    ),
                ),
                (
                    "access_token",
                    models.TextField(
                        help_text="Seller-scoped gateway access token (secret)"
                    ),
                ),
                (
                    "refresh_token",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Refresh token used to renew access_token (secret)",
                    ),
                ),
                (
                    "token_expires_at",
                    models.DateTimeField(
                        blank=True, help_text="When the access token expires", null=True
                    ),
                ),
                (
                    "scope",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="OAuth scopes granted by the seller",
                        max_length=255,
                    ),
                ),
                (
                    "collector_id",
                    models.CharField(
                        db_index=True,
                        help_text="Gateway user id that receives settled funds",
                        max_length=64,
                    ),
                ),
                (
                    "public_key",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("nickname", models.CharField(blank=True, default="", max_length=255)),
                (
                    "country",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Gateway country id (e.g., 'AR')",
                        max_length=8,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                            ("suspended", "Suspended"),
                        ],
                        db_index=True,
                        default="active",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                (
                    "seller",
                    models.OneToOneField(
                        help_text="Seller this payout account belongs to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="linked_payout_account",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Linked Payout Account",
                "verbose_name_plural": "Linked Payout Accounts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PaymentIntent",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, help_text="Incremented on each save"
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Flexible key-value metadata storage",
                    ),
                ),
                (
                    "transaction_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Gateway checkout session (preference) id",
                        max_length=255,
                    ),
                ),
                (
                    "checkout_url",
                    models.URLField(
                        blank=True,
                        default="",
                        help_text="Checkout URL for the payer (sandbox or live)",
                        max_length=1024,
                    ),
                ),
                (
                    "payer_reference",
                    models.CharField(
                        help_text="Payer contact (email or phone)", max_length=255
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=6,
                        help_text="Amount charged to the payer",
                        max_digits=18,
                    ),
                ),
                (
                    "marketplace_fee_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=6,
                        help_text="Platform commission withheld from the seller",
                        max_digits=18,
                        null=True,
                    ),
                ),
                (
                    "order_id",
                    models.CharField(
                        blank=True, db_index=True, default="", max_length=64
                    ),
                ),
                (
                    "creator_reference",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "state",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_process", "In Process"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("refunded", "Refunded"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "gateway_status",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Raw gateway status from the last notification",
                        max_length=50,
                    ),
                ),
                (
                    "gateway_payment_id",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                ("status_updated_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                (
                    "seller",
                    models.ForeignKey(
                        blank=True,
                        help_text="Seller whose linked account received the session",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="received_payment_intents",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Intent",
                "verbose_name_plural": "Payment Intents",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="payment_intent_amount_positive",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="WebhookNotification",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "topic",
                    models.CharField(blank=True, db_index=True, default="", max_length=50),
                ),
                (
                    "resource_id",
                    models.CharField(blank=True, db_index=True, default="", max_length=64),
                ),
                (
                    "idempotency_key",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("query_params", models.JSONField(blank=True, default=dict)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("received", "Received"),
                            ("processed", "Processed"),
                            ("ignored", "Ignored"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="received",
                        max_length=20,
                    ),
                ),
                (
                    "external_reference",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                (
                    "payment_status",
                    models.CharField(blank=True, default="", max_length=50),
                ),
                ("error_message", models.TextField(blank=True, default="")),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "verbose_name": "Webhook Notification",
                "verbose_name_plural": "Webhook Notifications",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["topic", "resource_id"],
                        name="webhook_topic_resource_idx",
                    )
                ],
            },
        ),
    ]
