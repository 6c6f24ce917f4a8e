"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    VersionedMixin: Optimistic version counter bumped on every save
    MetadataMixin: Flexible JSON metadata storage

Usage:
    from core.models import BaseModel
    from core.model_mixins import MetadataMixin, UUIDPrimaryKeyMixin

    class PaymentIntent(UUIDPrimaryKeyMixin, MetadataMixin, BaseModel):
        amount = models.DecimalField(max_digits=16, decimal_places=6)

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid

from django.db import models
from django.db.models import F


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    The UUID is generated in Python before the insert, so it can be sent
    to an external system (for example as a gateway external reference)
    in the same request that creates the row.

    Fields:
        id: UUIDField as primary key (auto-generated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class VersionedMixin(models.Model):
    """
    Version counter incremented atomically on every update.

    The counter is bumped with an F() expression so concurrent writers
    cannot lose an increment; it is refreshed after save so callers see
    the persisted value. Nothing rejects stale writes: the version is an
    audit signal (how many times a row changed), not a lock.

    Fields:
        version: Positive integer starting at 1
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Incremented on each save",
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        is_update = not self._state.adding and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "version" not in update_fields:
                kwargs["update_fields"] = [*update_fields, "version"]
        super().save(*args, **kwargs)
        if is_update:
            # Refresh to get actual version value after F() expression
            self.refresh_from_db(fields=["version"])


class MetadataMixin(models.Model):
    """
    Flexible JSON metadata storage.

    Fields:
        metadata: JSONField for arbitrary key-value data

    Usage:
        account.metadata["site_id"] = "MLA"
    """

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Flexible key-value metadata storage",
    )

    class Meta:
        abstract = True
