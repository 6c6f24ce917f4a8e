"""
Tests for payments app.

This package contains test modules for:
- test_models.py: LinkedPayoutAccount, PaymentIntent, WebhookNotification
- test_fee_calculator.py / test_status_mapper.py: pure computations
- test_payout_account_linker.py: OAuth linking and lazy token refresh
- test_payment_intent_manager.py: Checkout session creation
- test_webhook_reconciler.py: Notification reconciliation
- test_views.py: API endpoint tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_webhook_reconciler.py
"""
