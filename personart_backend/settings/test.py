from __future__ import annotations

from .base import *  # noqa: F403,F405

# ------------------------------------------------------------
# Test overrides
# ------------------------------------------------------------

DEBUG = False
ALLOWED_HOSTS = ["localhost", "testserver", "127.0.0.1"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Tests inject their own fake remote store; never talk to a real backend.
SUPABASE_URL = ""
SUPABASE_ANON_KEY = ""
SUPABASE_TIMEOUT = None

BOOKING_CONFLICT_POLICY = "allow"

CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

LOGGING["root"]["level"] = "WARNING"
LOGGING["loggers"]["personart_backend"]["level"] = "WARNING"
