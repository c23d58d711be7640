"""
Appointments App - Admin for the local appointment cache
"""

from django.contrib import admin

from personart_backend.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    """Cached appointments (mirrors the remote appointments table)."""

    list_display = ("date", "time", "professional", "patient_name", "type", "status")
    list_filter = ("status", "type", "date")
    search_fields = ("id", "patient_id", "patient_name", "professional", "card_number")
    ordering = ("-date", "time", "cache_order")
    date_hierarchy = "date"
    list_per_page = 50
    readonly_fields = ("id", "cache_order", "created_at", "updated_at")

    fieldsets = (
        ("Appointment", {
            "fields": ("id", "date", "time", "professional", "type", "status", "note")
        }),
        ("Patient (denormalized)", {
            "fields": ("patient_id", "patient_name", "card_number", "insurer_name", "authorization_number", "authorization_date")
        }),
        ("System", {
            "fields": ("cache_order", "extra_data", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )
