"""
Patients App - Admin for the local patient cache
"""

from django.contrib import admin

from personart_backend.patients.models import InsurancePlan, Patient
from personart_backend.patients.services import age_on


class InsurancePlanInline(admin.StackedInline):
    model = InsurancePlan
    extra = 0
    fields = ("active", "total_sessions", "used_sessions", "start_date", "frequency", "alert_email", "history")


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    """Admin for the patient cache (mirrors the remote patients table)."""

    list_display = (
        "id",
        "name",
        "birth_date",
        "age_display",
        "insurer",
        "card_number",
        "updated_at",
    )
    list_filter = ("age_bracket", "insurer")
    search_fields = ("id", "name", "card_number", "guardian", "phone")
    ordering = ("name",)
    list_per_page = 50
    inlines = [InsurancePlanInline]

    readonly_fields = ("id", "created_at", "updated_at")

    fieldsets = (
        ("Patient", {
            "fields": ("id", "name", "birth_date", "age_bracket", "guardian", "phone", "email", "address", "origin")
        }),
        ("Insurer", {
            "fields": ("insurer", "card_number", "authorization_number", "authorization_date")
        }),
        ("Care team", {
            "fields": ("professionals", "specialties")
        }),
        ("System", {
            "fields": ("extra_data", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def age_display(self, obj):
        """Age in years"""
        if obj.birth_date is None:
            return "-"
        from datetime import date
        return f"{age_on(obj.birth_date, date.today())} anos"
    age_display.short_description = "Age"
