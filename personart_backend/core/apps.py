"""
Core App Configuration
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Users, roles and the professional directory."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'personart_backend.core'
    verbose_name = 'Core (Users, Roles & Professionals)'
