"""
Sync App - Admin for the outbox
"""

from django.contrib import admin

from personart_backend.sync.models import PendingEffect


@admin.register(PendingEffect)
class PendingEffectAdmin(admin.ModelAdmin):
    """Remote effects waiting to be replayed."""

    list_display = ("table", "record_id", "operation", "attempts", "updated_at")
    list_filter = ("table", "operation")
    search_fields = ("record_id", "last_error")
    ordering = ("created_at",)
    readonly_fields = ("created_at", "updated_at")
