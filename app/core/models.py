"""
Core models shared by every domain app.

Base Classes:
    BaseModel: Abstract model with timestamps (created_at, updated_at)

Concrete Models:
    AppSetting: Key/value runtime configuration (read through
        core.configuration.ConfigurationProvider)

For mixins (UUIDPrimaryKeyMixin, VersionedMixin, MetadataMixin),
see core.model_mixins.
"""

from __future__ import annotations

from django.db import models


class BaseModel(models.Model):
    """
    Abstract base model providing creation and modification timestamps.

    Fields:
        created_at: Automatically set when the object is first created
        updated_at: Automatically updated whenever the object is saved
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,  # Index for efficient time-based queries
        help_text="Timestamp when this record was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when this record was last modified",
    )

    class Meta:
        abstract = True
        # Default ordering by creation time (newest first)
        ordering = ["-created_at"]

    def __str__(self) -> str:
        """Default string representation using primary key."""
        return f"{self.__class__.__name__}(id={self.pk})"


class AppSetting(BaseModel):
    """
    Runtime configuration value editable from the admin.

    Values are stored as JSON so numbers, strings and small objects all fit.
    Business code never reads this model directly; it goes through
    ConfigurationProvider, which applies defaults for missing keys.

    Known keys:
        marketplace_fee_percentage: Platform commission in percent (0-100)
    """

    key = models.CharField(
        max_length=100,
        unique=True,
        help_text="Configuration key (e.g., 'marketplace_fee_percentage')",
    )
    value = models.JSONField(
        null=True,
        blank=True,
        help_text="Configuration value (JSON)",
    )
    description = models.CharField(
        max_length=255,
        blank=True,
        default="",
    )

    class Meta:
        ordering = ["key"]
        verbose_name = "App Setting"
        verbose_name_plural = "App Settings"

    def __str__(self) -> str:
        return f"AppSetting({self.key}={self.value!r})"
