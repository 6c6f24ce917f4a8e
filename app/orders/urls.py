"""
URL configuration for the orders app.

All routes are prefixed with /api/v1/orders/ when included in the main URLconf.
"""

from django.urls import path

from orders.views import OrderCreateView, OrderDetailView

app_name = "orders"

urlpatterns = [
    path("", OrderCreateView.as_view(), name="order_create"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order_detail"),
]
