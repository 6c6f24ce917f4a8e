"""
OAuth linkage between platform sellers and their MercadoPago accounts.

Each seller grants the platform access to their own gateway account.
The resulting token set is stored on LinkedPayoutAccount and refreshed
lazily: whoever needs a seller token asks get_valid_access_token (or
get_seller_credentials), which refreshes first when the token is close
to expiry. There is no background refresh job.

Flow:
    1. begin_linking -> authorization URL the seller is redirected to
    2. Gateway redirects back with ?code=...&state=<signed user_<id>_<ts>>
    3. complete_linking exchanges the code, fetches the profile, stores the row
    4. get_seller_credentials is used at checkout time
    5. unlink deactivates the row (tokens are not revoked at the gateway)

Usage:
    from payments.services import PayoutAccountLinker

    linker = PayoutAccountLinker()
    url = linker.begin_linking(seller.id, redirect_uri)
    account = linker.complete_linking(seller.id, code, redirect_uri)
    token = linker.get_valid_access_token(seller.id)
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.core import signing

from core.services import BaseService

from payments.adapters import MercadoPagoAdapter, SellerCredentials
from payments.exceptions import (
    AccountAlreadyLinkedError,
    GatewayConfigurationError,
    GatewayError,
    GatewayUnavailableError,
    LinkedAccountNotFoundError,
    PaymentValidationError,
)
from payments.models import LinkedPayoutAccount

if TYPE_CHECKING:
    from typing import Any


OAUTH_STATE_SALT = "payments.oauth.state"
OAUTH_STATE_PATTERN = re.compile(r"^user_([^_]+)_\d+$")


@dataclass
class LinkStatus:
    """Summary of a seller's link, safe to return to clients (no tokens)."""

    linked: bool
    collector_id: str | None = None
    email: str | None = None
    nickname: str | None = None
    country: str | None = None
    status: str | None = None
    token_expires_at: str | None = None
    token_expiring_soon: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "linked": self.linked,
            "collector_id": self.collector_id,
            "email": self.email,
            "nickname": self.nickname,
            "country": self.country,
            "status": self.status,
            "token_expires_at": self.token_expires_at,
            "token_expiring_soon": self.token_expiring_soon,
        }


class PayoutAccountLinker(BaseService):
    """
    Owns the token lifecycle of every seller's linked payout account.

    All seller-scoped gateway calls should get their token from
    get_valid_access_token so refresh-on-demand stays in one place.
    """

    def __init__(self, adapter: type[MercadoPagoAdapter] | None = None):
        self.adapter = adapter or MercadoPagoAdapter

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def refresh_threshold() -> timedelta:
        minutes = getattr(settings, "MERCADOPAGO_TOKEN_REFRESH_THRESHOLD_MINUTES", 30)
        return timedelta(minutes=int(minutes))

    @staticmethod
    def is_configured() -> dict[str, bool]:
        """Which OAuth settings are present (values are never exposed)."""
        client_id = bool(getattr(settings, "MERCADOPAGO_CLIENT_ID", ""))
        client_secret = bool(getattr(settings, "MERCADOPAGO_CLIENT_SECRET", ""))
        redirect_uri = bool(getattr(settings, "MERCADOPAGO_OAUTH_REDIRECT_URI", ""))
        return {
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
            "configured": client_id and client_secret,
        }

    # =========================================================================
    # OAuth State
    # =========================================================================

    @staticmethod
    def make_state(seller_id: Any) -> str:
        """
        Signed ``user_<seller_id>_<unix ms>`` state for the authorization URL.

        The public callback trusts only states carrying a valid signature,
        so a third party cannot attach their account to another seller.
        """
        value = f"user_{seller_id}_{int(time.time() * 1000)}"
        return signing.TimestampSigner(salt=OAUTH_STATE_SALT).sign(value)

    @staticmethod
    def seller_id_from_state(state: str) -> str:
        """
        Seller id carried by a state built with make_state.

        Raises:
            PaymentValidationError: Bad signature, expired, or wrong shape
                (INVALID_OAUTH_STATE)
        """
        max_age = getattr(settings, "MERCADOPAGO_OAUTH_STATE_MAX_AGE_SECONDS", 3600)
        try:
            value = signing.TimestampSigner(salt=OAUTH_STATE_SALT).unsign(
                state, max_age=max_age
            )
        except signing.BadSignature:
            value = ""

        match = OAUTH_STATE_PATTERN.match(value)
        if match is None:
            raise PaymentValidationError(
                "Invalid or expired OAuth state",
                error_code="INVALID_OAUTH_STATE",
            )
        return match.group(1)

    # =========================================================================
    # Linking
    # =========================================================================

    def begin_linking(
        self,
        seller_id: Any,
        redirect_uri: str,
        state: str | None = None,
    ) -> str:
        """
        Build the authorization URL for ``seller_id``. Touches no storage.

        The default state is make_state(seller_id), which the public
        callback endpoint can verify. A caller-supplied state is passed
        through as is and only works with the authenticated callback.
        """
        state = state or self.make_state(seller_id)
        url = self.adapter.build_authorization_url(redirect_uri=redirect_uri, state=state)

        self.get_logger().info(
            "Built seller authorization URL",
            extra={"seller_id": str(seller_id), "redirect_uri": redirect_uri},
        )
        return url

    def complete_linking(
        self,
        seller_id: Any,
        authorization_code: str,
        redirect_uri: str,
    ) -> LinkedPayoutAccount:
        """
        Exchange ``authorization_code`` and store the seller's account.

        Raises:
            GatewayConfigurationError: OAuth client credentials missing
            AccountAlreadyLinkedError: Seller already has an active account
            GatewayError: Code exchange or profile fetch failed
        """
        logger = self.get_logger()

        if not self.is_configured()["configured"]:
            raise GatewayConfigurationError(
                "MercadoPago OAuth credentials are not configured",
            )
        self.validate_required(authorization_code=authorization_code)

        existing = LinkedPayoutAccount.objects.filter(seller_id=seller_id).first()
        if existing is not None and existing.is_active:
            raise AccountAlreadyLinkedError(
                "Seller already has an active linked MercadoPago account",
                details={
                    "seller_id": str(seller_id),
                    "collector_id": existing.collector_id,
                },
            )

        tokens = self.adapter.exchange_authorization_code(
            code=authorization_code,
            redirect_uri=redirect_uri,
        )
        profile = self.adapter.get_account_profile(tokens.access_token)

        with self.atomic():
            account = existing or LinkedPayoutAccount(seller_id=seller_id)
            account.apply_tokens(tokens)
            account.apply_profile(profile)
            account.activate()
            account.save()

        logger.info(
            "Seller payout account linked",
            extra={
                "seller_id": str(seller_id),
                "collector_id": account.collector_id,
                "relinked": existing is not None,
            },
        )
        return account

    def unlink(self, seller_id: Any) -> LinkedPayoutAccount:
        """
        Deactivate the seller's account. The grant is not revoked upstream.

        Raises:
            LinkedAccountNotFoundError: No active account for the seller
        """
        account = self._get_active_account(seller_id)
        account.deactivate()
        account.save()

        self.get_logger().info(
            "Seller payout account unlinked",
            extra={"seller_id": str(seller_id), "collector_id": account.collector_id},
        )
        return account

    # =========================================================================
    # Token Lifecycle
    # =========================================================================

    def is_token_expiring_soon(self, account: LinkedPayoutAccount) -> bool:
        return account.is_token_expiring_soon(self.refresh_threshold())

    def get_valid_access_token(self, seller_id: Any) -> str:
        """
        Return a usable access token, refreshing it first if it is close to expiry.

        Raises:
            LinkedAccountNotFoundError: No active account for the seller
        """
        account = self._get_active_account(seller_id)
        if self.is_token_expiring_soon(account):
            self.get_logger().info(
                "Access token close to expiry, refreshing",
                extra={
                    "seller_id": str(seller_id),
                    "token_expires_at": account.token_expires_at.isoformat(),
                },
            )
            account = self.refresh(seller_id)
        return account.access_token

    def refresh(self, seller_id: Any) -> LinkedPayoutAccount:
        """
        Exchange the stored refresh token for a new token set.

        Raises:
            LinkedAccountNotFoundError: No active account, or no refresh token stored
            GatewayUnavailableError: Gateway unreachable (propagated as is)
            PaymentValidationError: Gateway refused the refresh (TOKEN_REFRESH_FAILED)
        """
        logger = self.get_logger()
        account = self._get_active_account(seller_id)
        if not account.refresh_token:
            raise LinkedAccountNotFoundError(
                "Linked account has no refresh token; the seller must link again",
                details={"seller_id": str(seller_id)},
            )

        try:
            tokens = self.adapter.refresh_token(account.refresh_token)
        except GatewayUnavailableError:
            raise
        except GatewayError as e:
            logger.error(
                "Token refresh rejected by gateway",
                extra={"seller_id": str(seller_id), "error_code": e.error_code},
            )
            raise PaymentValidationError(
                f"Could not refresh MercadoPago token: {e.message}",
                error_code="TOKEN_REFRESH_FAILED",
                details={"seller_id": str(seller_id)},
            ) from e

        account.apply_tokens(tokens)
        account.save()

        logger.info(
            "Seller access token refreshed",
            extra={
                "seller_id": str(seller_id),
                "token_expires_at": account.token_expires_at.isoformat()
                if account.token_expires_at
                else None,
                "refresh_token_rotated": bool(tokens.refresh_token),
            },
        )
        return account

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_collector_id(self, seller_id: Any) -> str | None:
        """Collector id of the seller's active account, or None when not linked."""
        if seller_id is None:
            return None
        return (
            LinkedPayoutAccount.objects.filter(seller_id=seller_id, is_active=True)
            .values_list("collector_id", flat=True)
            .first()
        )

    def get_seller_credentials(self, seller_id: Any) -> SellerCredentials:
        """
        Collector id and a valid access token for a split checkout.

        Raises:
            LinkedAccountNotFoundError: Seller has no active account
        """
        collector_id = self.get_collector_id(seller_id)
        if not collector_id:
            raise LinkedAccountNotFoundError(
                "Seller has no linked MercadoPago account",
                details={"seller_id": str(seller_id)},
            )
        return SellerCredentials(
            collector_id=collector_id,
            access_token=self.get_valid_access_token(seller_id),
        )

    def get_status(self, seller_id: Any) -> LinkStatus:
        account = LinkedPayoutAccount.objects.filter(
            seller_id=seller_id, is_active=True
        ).first()
        if account is None:
            return LinkStatus(linked=False)
        return LinkStatus(
            linked=True,
            collector_id=account.collector_id,
            email=account.email or None,
            nickname=account.nickname or None,
            country=account.country or None,
            status=account.status,
            token_expires_at=account.token_expires_at.isoformat()
            if account.token_expires_at
            else None,
            token_expiring_soon=self.is_token_expiring_soon(account),
        )

    def _get_active_account(self, seller_id: Any) -> LinkedPayoutAccount:
        account = LinkedPayoutAccount.objects.filter(
            seller_id=seller_id, is_active=True
        ).first()
        if account is None:
            raise LinkedAccountNotFoundError(
                "Seller has no active linked MercadoPago account",
                details={"seller_id": str(seller_id)},
            )
        return account
