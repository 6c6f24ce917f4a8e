"""
Factory Boy factories for payment test data.

Usage:
    from payments.tests.factories import (
        LinkedPayoutAccountFactory,
        PaymentIntentFactory,
        UserFactory,
    )

    # A seller with an active linked account
    account = LinkedPayoutAccountFactory()

    # An intent created under that seller's account
    intent = PaymentIntentFactory(seller=account.seller)

    # An intent already approved by the gateway
    intent = PaymentIntentFactory(state=PaymentIntentState.APPROVED)
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import factory
from django.conf import settings
from django.utils import timezone

from core.models import AppSetting
from payments.models import LinkedPayoutAccount, PaymentIntent, WebhookNotification
from payments.state_machines import LinkedAccountStatus, WebhookNotificationStatus


class UserFactory(factory.django.DjangoModelFactory):
    """Platform user (buyer or seller)."""

    class Meta:
        model = settings.AUTH_USER_MODEL
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "testpass123")
    is_active = True


class LinkedPayoutAccountFactory(factory.django.DjangoModelFactory):
    """
    Factory for LinkedPayoutAccount instances.

    Defaults to an active account whose token is valid for six hours.

    Usage:
        account = LinkedPayoutAccountFactory()

        expiring = LinkedPayoutAccountFactory(
            token_expires_at=timezone.now() + timedelta(minutes=5),
        )
    """

    class Meta:
        model = LinkedPayoutAccount

    seller = factory.SubFactory(UserFactory)
    access_token = factory.Sequence(lambda n: f"APP_USR-seller-access-{n}")
    refresh_token = factory.Sequence(lambda n: f"TG-seller-refresh-{n}")
    token_expires_at = factory.LazyFunction(lambda: timezone.now() + timedelta(hours=6))
    scope = "offline_access read write"
    collector_id = factory.Sequence(lambda n: str(700000000 + n))
    public_key = factory.Sequence(lambda n: f"APP_USR-public-{n}")
    email = factory.LazyAttribute(lambda o: f"seller{o.collector_id}@example.com")
    nickname = factory.Sequence(lambda n: f"SELLER{n}")
    country = "AR"
    status = LinkedAccountStatus.ACTIVE
    is_active = True


class PaymentIntentFactory(factory.django.DjangoModelFactory):
    """
    Factory for PaymentIntent instances.

    The state field is FSM-protected, but it can still be given at
    construction time, e.g. PaymentIntentFactory(state="approved").
    """

    class Meta:
        model = PaymentIntent

    id = factory.LazyFunction(uuid.uuid4)
    transaction_id = factory.Sequence(lambda n: f"123456789-pref-{n:04d}")
    checkout_url = factory.LazyAttribute(
        lambda o: f"https://sandbox.mercadopago.com.ar/checkout/v1/redirect?pref_id={o.transaction_id}"
    )
    payer_reference = factory.Sequence(lambda n: f"buyer{n}@example.com")
    amount = Decimal("1055.000000")
    marketplace_fee_amount = Decimal("55.000000")
    order_id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    creator_reference = "anon-123"
    metadata = factory.LazyAttribute(lambda o: {"payment_id": str(o.id), "order_id": o.order_id})


class WebhookNotificationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = WebhookNotification

    topic = "payment"
    resource_id = factory.Sequence(lambda n: str(90000000 + n))
    payload = factory.LazyAttribute(lambda o: {"type": o.topic, "data": {"id": o.resource_id}})
    status = WebhookNotificationStatus.RECEIVED


class AppSettingFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = AppSetting
        django_get_or_create = ("key",)

    key = "marketplace_fee_percentage"
    value = 5.5
