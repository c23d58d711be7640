"""Personart URL Configuration.

API routes:
    /api/auth/          - Authentication (core)
    /api/health/        - Health check (core)
    /api/patients/      - Patient cache (patients)
    /api/appointments/  - Appointments (appointments)
    /api/calendar/      - Day/week/month projections (appointments)
    /api/sync/          - Connection status, outbox, toasts (sync)
    /api/inbox/         - Pre-registrations (sync)
"""

from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path


def root(request):
    """Plain-text root; acts like a simple healthcheck."""
    return HttpResponse("Personart backend is running.")


urlpatterns = [
    path("", root, name="root"),
    path("admin/", admin.site.urls),

    path("api/", include("personart_backend.core.urls")),
    path("api/", include("personart_backend.patients.urls")),
    path("api/", include("personart_backend.appointments.urls")),
    path("api/", include("personart_backend.sync.urls")),
]
