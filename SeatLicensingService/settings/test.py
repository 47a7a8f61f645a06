"""
Test settings for SeatLicensingService.
"""
import os
import urllib.parse

from .base import *  # noqa: F403, F401

DEBUG = False

# Use PostgreSQL in CI (from DATABASE_URL), SQLite in-memory for local tests
DATABASE_URL = os.environ.get("DATABASE_URL")
if DATABASE_URL and DATABASE_URL.startswith("postgresql"):
    parsed = urllib.parse.urlparse(DATABASE_URL)
    db_name = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": db_name,
            "USER": parsed.username or "postgres",
            "PASSWORD": parsed.password or "",
            "HOST": parsed.hostname or "localhost",
            "PORT": parsed.port or 5432,
            "TEST": {"NAME": db_name + "_test"},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

# Password hashers for faster tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Run tasks inline and surface their exceptions
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"

BILLING_WEBHOOK_SECRET = "test-webhook-secret"
BILLING_PROVIDER_URL = "https://billing.test"
BILLING_PROVIDER_API_KEY = "test-api-key"
BILLING_PRICE_IDS = {"standard": "pri_standard_test"}
BILLING_RECONCILIATION_BASE_DELAY = 0
IDENTITY_CALLBACK_TOKEN = "test-identity-token"

# Disable logging during tests
LOGGING_CONFIG = None
