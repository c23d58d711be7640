from django.apps import AppConfig


class PatientsConfig(AppConfig):
    """Local patient cache and insurer session plans."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'personart_backend.patients'
    label = 'patients'
    verbose_name = 'Patients (Local Cache)'
