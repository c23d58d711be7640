"""
Sync App Configuration
"""

from django.apps import AppConfig


class SyncConfig(AppConfig):
    """Local-first synchronization with the remote store.

    Owns the registry of open clinic sessions (one per signed-in user).
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'personart_backend.sync'
    label = 'sync'
    verbose_name = 'Sync (Remote Store & Outbox)'

    def ready(self):
        from personart_backend.sync.session import SessionRegistry

        self.sessions = SessionRegistry()
