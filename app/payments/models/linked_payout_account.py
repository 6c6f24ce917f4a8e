"""
LinkedPayoutAccount model for sellers' MercadoPago accounts.

Each seller links their own MercadoPago account through OAuth. The row
stores the seller-scoped access/refresh tokens and the collector id the
gateway uses to decide where checkout funds settle.

Usage:
    from payments.models import LinkedPayoutAccount

    account = LinkedPayoutAccount.objects.filter(
        seller_id=seller_id, is_active=True
    ).first()

    if account and account.is_token_expiring_soon(timedelta(minutes=30)):
        ...  # refresh through PayoutAccountLinker

Note:
    Access and refresh tokens are secrets. They are excluded from
    serializers and never written to logs.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.model_mixins import MetadataMixin, UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from payments.state_machines import LinkedAccountStatus

if TYPE_CHECKING:
    from payments.adapters import AccountProfile, OAuthTokens


class LinkedPayoutAccount(UUIDPrimaryKeyMixin, VersionedMixin, MetadataMixin, BaseModel):
    """
    A seller's OAuth grant on the payment gateway.

    Fields:
        seller: The platform user who receives funds (one row per seller)
        access_token / refresh_token: Seller-scoped OAuth credentials
        token_expires_at: When access_token stops being valid
        collector_id: Gateway account id funds settle to
        public_key: Seller's public key (for client-side SDKs)
        email / nickname / country: Gateway-side profile snapshot
        status / is_active: Link state; unlink is a soft deactivation
        version: Incremented on every save (see VersionedMixin)
        metadata: site_id, first/last name, identification

    Lifecycle:
        1. Seller authorizes the platform at the gateway (begin_linking)
        2. Authorization code is exchanged for tokens (complete_linking)
        3. Tokens are refreshed lazily when close to expiry
        4. Unlink marks the row inactive; relinking reuses the same row

    Note:
        seller is a OneToOneField, so the database holds at most one row per
        seller. "At most one active account" is enforced by the linker's
        lookup-before-insert on top of that.
    """

    seller = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="linked_payout_account",
        help_text="Seller this payout account belongs to",
    )

    # ==========================================================================
    # OAuth Credentials
    # ==========================================================================

    access_token = models.TextField(
        help_text="Seller-scoped gateway access token (secret)",
    )

    refresh_token = models.TextField(
        blank=True,
        default="",
        help_text="Refresh token used to renew access_token (secret)",
    )

    token_expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the access token expires",
    )

    scope = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="OAuth scopes granted by the seller",
    )

    # ==========================================================================
    # Gateway Account Identity
    # ==========================================================================

    collector_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Gateway user id that receives settled funds",
    )

    public_key = models.CharField(
        max_length=255,
        blank=True,
        default="",
    )

    email = models.EmailField(blank=True, default="")

    nickname = models.CharField(max_length=255, blank=True, default="")

    country = models.CharField(
        max_length=8,
        blank=True,
        default="",
        help_text="Gateway country id (e.g., 'AR')",
    )

    # ==========================================================================
    # Link State
    # ==========================================================================

    status = models.CharField(
        max_length=20,
        choices=LinkedAccountStatus.choices,
        default=LinkedAccountStatus.ACTIVE,
        db_index=True,
    )

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Linked Payout Account"
        verbose_name_plural = "Linked Payout Accounts"

    def __str__(self) -> str:
        return f"LinkedPayoutAccount(seller={self.seller_id}, collector={self.collector_id}, {self.status})"

    # ==========================================================================
    # Token helpers
    # ==========================================================================

    def is_token_expiring_soon(self, threshold: timedelta) -> bool:
        """
        True when the access token expires within ``threshold``.

        Accounts without a recorded expiry are never considered expiring.
        """
        if self.token_expires_at is None:
            return False
        return self.token_expires_at <= timezone.now() + threshold

    def apply_tokens(self, tokens: OAuthTokens) -> None:
        """
        Store a freshly issued token set.

        The refresh token is only replaced when the gateway returned a new
        one. Does not save.
        """
        self.access_token = tokens.access_token
        if tokens.refresh_token:
            self.refresh_token = tokens.refresh_token
        if tokens.public_key:
            self.public_key = tokens.public_key
        if tokens.scope:
            self.scope = tokens.scope
        self.token_expires_at = (
            timezone.now() + timedelta(seconds=tokens.expires_in)
            if tokens.expires_in
            else None
        )

    def apply_profile(self, profile: AccountProfile) -> None:
        """Copy the gateway-side profile onto the account. Does not save."""
        self.collector_id = profile.collector_id
        self.email = profile.email or ""
        self.nickname = profile.nickname or ""
        self.country = profile.country or ""
        self.metadata = {
            **(self.metadata or {}),
            "site_id": profile.site_id,
            "first_name": profile.first_name,
            "last_name": profile.last_name,
            "identification": profile.identification,
        }

    def activate(self) -> None:
        self.status = LinkedAccountStatus.ACTIVE
        self.is_active = True

    def deactivate(self) -> None:
        self.status = LinkedAccountStatus.INACTIVE
        self.is_active = False
