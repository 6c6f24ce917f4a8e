"""
Core admin configuration.

AppSetting rows are the runtime configuration read by
ConfigurationProvider (e.g., marketplace_fee_percentage). Changes apply
to the next request; nothing is cached.
"""

from django.contrib import admin

from core.models import AppSetting


@admin.register(AppSetting)
class AppSettingAdmin(admin.ModelAdmin):
    """Admin configuration for AppSetting."""

    list_display = ["key", "value", "description", "updated_at"]
    search_fields = ["key", "description"]
    readonly_fields = ["created_at", "updated_at"]
    ordering = ["key"]
