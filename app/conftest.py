"""
Pytest configuration for the Django project.

This module configures pytest-django and provides project-wide hooks.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import os

import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Tune settings for fast, isolated test runs."""
    from django.conf import settings

    # Use fast password hasher for tests
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    # Tests must never reach the real gateway or inherit a developer's .env
    settings.MERCADOPAGO_ACCESS_TOKEN = "TEST-platform-access-token"
    settings.MERCADOPAGO_CLIENT_ID = "1234567890"
    settings.MERCADOPAGO_CLIENT_SECRET = "test-client-secret"
    settings.MERCADOPAGO_OAUTH_REDIRECT_URI = "https://app.example.com/oauth/callback"
    settings.MERCADOPAGO_OAUTH_ERROR_URL = "https://app.example.com/oauth/error"
    settings.MERCADOPAGO_OAUTH_SUCCESS_URL = "https://app.example.com/oauth/success"
    settings.MERCADOPAGO_ENVIRONMENT = "sandbox"
    settings.MERCADOPAGO_BACK_URL = ""
    settings.MERCADOPAGO_NOTIFICATION_URL = ""
    settings.MERCADOPAGO_STATEMENT_DESCRIPTOR = ""


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full order-to-settlement workflows)
    - test_views.py, test_services.py, reconciler/manager tests → integration
    - test_models.py, calculators, mappers, adapters → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_handlers.py",
        "test_payment_intent_manager.py",
        "test_payout_account_linker.py",
        "test_webhook_reconciler.py",
        "test_exception_handler.py",
        "test_configuration.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_fee_calculator.py",
        "test_status_mapper.py",
        "test_mercadopago_adapter.py",
        "test_state_machines.py",
        "test_exceptions.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
