"""
Root URL configuration.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/payments/              - Payment endpoints
        webhooks/mercadopago/      - MercadoPago notification endpoint (POST)
        oauth/initiate/            - Start seller account linking
        oauth/callback/            - OAuth redirect target (GET) / code exchange (POST)
        oauth/status/              - Linked account status
        oauth/unlink/              - Unlink seller account
        oauth/refresh-token/       - Force a seller token refresh
        oauth/config-check/        - OAuth configuration check
        intents/{id}/              - Payment intent with gateway merchant orders
        status/{id}/               - Payment intent status
        checkin/{id}/              - Confirm payment was collected
        marketplace-fee/           - Commission percentage (GET public, POST staff)
    /api/v1/orders/                - Create order
        {id}/                      - Order detail
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("payments/", include("payments.urls")),
    path("orders/", include("orders.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Marketplace Payments Admin"
admin.site.site_title = "Payments Admin"
admin.site.index_title = "Orders and settlements"
