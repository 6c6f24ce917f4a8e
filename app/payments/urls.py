"""
URL configuration for the payments app.

Routes:
    - POST /webhooks/mercadopago/ - MercadoPago webhook endpoint
    - /oauth/... - Seller account linking
    - /intents/<id>/, /status/<id>/, /checkin/<id>/ - Payment intent lookups
    - /marketplace-fee/ - Commission percentage (GET public, POST staff)

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments import views
from payments.webhooks.views import mercadopago_webhook

app_name = "payments"

urlpatterns = [
    # Webhook endpoints
    path("webhooks/mercadopago/", mercadopago_webhook, name="mercadopago_webhook"),
    # OAuth linking
    path("oauth/initiate/", views.OAuthInitiateView.as_view(), name="oauth_initiate"),
    path("oauth/callback/", views.OAuthCallbackView.as_view(), name="oauth_callback"),
    path("oauth/status/", views.OAuthStatusView.as_view(), name="oauth_status"),
    path("oauth/unlink/", views.OAuthUnlinkView.as_view(), name="oauth_unlink"),
    path(
        "oauth/refresh-token/",
        views.OAuthRefreshTokenView.as_view(),
        name="oauth_refresh_token",
    ),
    path(
        "oauth/config-check/",
        views.OAuthConfigCheckView.as_view(),
        name="oauth_config_check",
    ),
    # Payment intents
    path(
        "intents/<uuid:payment_intent_id>/",
        views.PaymentIntentDetailView.as_view(),
        name="payment_intent_detail",
    ),
    path(
        "status/<uuid:payment_intent_id>/",
        views.PaymentStatusView.as_view(),
        name="payment_status",
    ),
    path(
        "checkin/<uuid:payment_intent_id>/",
        views.PaymentCheckInView.as_view(),
        name="payment_checkin",
    ),
    # Configuration
    path(
        "marketplace-fee/",
        views.MarketplaceFeeView.as_view(),
        name="marketplace_fee",
    ),
]
