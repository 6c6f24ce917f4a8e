"""
Payments app for MercadoPago marketplace checkouts.

This app handles:
- Marketplace fee computation
- Seller payout account linking over OAuth, with lazy token refresh
- Checkout session (preference) creation, split to the seller's account
- Webhook reconciliation of PaymentIntent and Order status

Related apps:
    - core: Base models, exceptions, configuration provider
    - orders: Order persistence boundary used by the reconciler

Usage:
    from payments.services import PaymentIntentManager, WebhookReconciler

    intent = PaymentIntentManager().create_payment(
        payer_reference="buyer@example.com",
        amount=Decimal("100"),
    )

    WebhookReconciler().process_notification(payment_id="1234567890")
"""
