"""
Orders app.

This app handles:
- Order and order item persistence
- Order creation with marketplace fee and checkout (OrderOrchestrator)
- Status updates driven by payment webhook reconciliation

Related apps:
    - payments: FeeCalculator, PaymentIntentManager, WebhookReconciler
"""
