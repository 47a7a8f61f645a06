"""
Base Django settings for SeatLicensingService.

These settings are shared across all environments.
Environment-specific overrides are in dev.py, test.py, and prod.py
"""
import os
from decimal import Decimal
from pathlib import Path

from .logging import get_logging_config

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-q3v!n8c#r2m0x@seat-licensing-dev-only-7f1k$e9w^b4t"
)

DEBUG = False

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "drf_spectacular",
    # Local apps
    "SeatLicensingService.apps.SeatLicensingServiceConfig",
    "core",
    "organizations",
    "memberships",
    "licenses",
    "billing",
    "api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware
    "core.middleware.observability.ObservabilityMiddleware",
    "core.middleware.metrics.MetricsMiddleware",
]

ROOT_URLCONF = "SeatLicensingService.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "SeatLicensingService.wsgi.application"
ASGI_APPLICATION = "SeatLicensingService.asgi.application"

# Database
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ.get("DB_NAME", "seat_licensing"),
        "USER": os.environ.get("DB_USER", "postgres"),
        "PASSWORD": os.environ.get("DB_PASSWORD", "postgres"),
        "HOST": os.environ.get("DB_HOST", "localhost"),
        "PORT": os.environ.get("DB_PORT", "5432"),
        "OPTIONS": {
            "connect_timeout": 10,
        },
    }
}

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# REST Framework
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "EXCEPTION_HANDLER": "api.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

# drf-spectacular settings
SPECTACULAR_SETTINGS = {
    "TITLE": "Seat Licensing Service API",
    "DESCRIPTION": (
        "License seat ledger, organization membership and billing reconciliation. "
        "Admin endpoints manage members and purchases; the billing endpoint "
        "receives signed provider notifications."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": "/api/v1",
    "TAGS": [
        {"name": "Organizations", "description": "Membership and license management"},
        {"name": "Billing", "description": "Billing provider notifications"},
        {"name": "Identities", "description": "Identity provider callbacks"},
        {"name": "Health", "description": "Health check endpoints"},
    ],
}

# Celery
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://127.0.0.1:6379/0")
CELERY_TASK_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = TIME_ZONE

# Licensing
LICENSE_ANNUAL_SEAT_PRICE = Decimal(os.environ.get("LICENSE_ANNUAL_SEAT_PRICE", "200.00"))
TRIAL_CLEANUP_MARGIN_DAYS = int(os.environ.get("TRIAL_CLEANUP_MARGIN_DAYS", "7"))

# Billing provider
BILLING_PROVIDER_URL = os.environ.get("BILLING_PROVIDER_URL", "https://sandbox-api.paddle.com")
BILLING_PROVIDER_API_KEY = os.environ.get("BILLING_PROVIDER_API_KEY", "")
BILLING_PROVIDER_TIMEOUT = float(os.environ.get("BILLING_PROVIDER_TIMEOUT", "10"))
BILLING_PRICE_IDS = {
    "standard": os.environ.get("BILLING_STANDARD_PRICE_ID", ""),
}
BILLING_WEBHOOK_SECRET = os.environ.get("BILLING_WEBHOOK_SECRET", "")
BILLING_SIGNATURE_TOLERANCE_SECONDS = int(
    os.environ.get("BILLING_SIGNATURE_TOLERANCE_SECONDS", "300")
)
BILLING_RECONCILIATION_ATTEMPTS = 3
BILLING_RECONCILIATION_BASE_DELAY = 0.05

# Identity provider callbacks
IDENTITY_CALLBACK_TOKEN = os.environ.get("IDENTITY_CALLBACK_TOKEN", "")

# Observability
LOGGING = get_logging_config(os.environ.get("ENVIRONMENT", "development"))
