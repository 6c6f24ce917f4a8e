"""
Payment adapters for external services.

All MercadoPago API calls go through MercadoPagoAdapter so that timeouts,
error translation and logging are consistent.

Usage:
    from payments.adapters import CheckoutSessionParams, MercadoPagoAdapter

    result = MercadoPagoAdapter.create_checkout_session(
        CheckoutSessionParams(
            external_reference=str(intent.id),
            items=[{"title": "Order 42", "quantity": 1,
                    "currency_id": "ARS", "unit_price": 1055.0}],
        )
    )
"""

from payments.adapters.mercadopago_adapter import (
    AccountProfile,
    CheckoutSessionParams,
    CheckoutSessionResult,
    GatewayPayment,
    MercadoPagoAdapter,
    OAuthTokens,
    SellerCredentials,
    format_statement_descriptor,
)

__all__ = [
    "AccountProfile",
    "CheckoutSessionParams",
    "CheckoutSessionResult",
    "GatewayPayment",
    "MercadoPagoAdapter",
    "OAuthTokens",
    "SellerCredentials",
    "format_statement_descriptor",
]
