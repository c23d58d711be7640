from __future__ import annotations

from .base import *  # noqa: F403,F405

# ------------------------------------------------------------
# Development overrides
# ------------------------------------------------------------

DEBUG = True
ALLOWED_HOSTS = ["localhost", "127.0.0.1", "[::1]", "*"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_RENDERER_CLASSES": (
        "rest_framework.renderers.JSONRenderer",
        "rest_framework.renderers.BrowsableAPIRenderer",
    ),
}

SIMPLE_JWT = {
    **SIMPLE_JWT,
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=2),
}

CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

# Verbose logging in dev
LOGGING["root"]["level"] = "INFO"
