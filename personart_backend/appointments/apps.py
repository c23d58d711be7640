from django.apps import AppConfig


class AppointmentsConfig(AppConfig):
    """Local appointment cache, booking and calendar projections."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'personart_backend.appointments'
    label = 'appointments'
    verbose_name = 'Appointments (Local Cache)'
