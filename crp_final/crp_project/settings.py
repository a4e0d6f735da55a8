"""
Django settings for the CRP ledger project.

Environment variables: DJANGO_SECRET_KEY, DJANGO_DEBUG, DJANGO_ALLOWED_HOSTS,
CRP_BASE_DOMAIN, CRP_LOG_LEVEL, CRP_DB_PATH.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-crp-ledger-dev-key")
DEBUG = os.getenv("DJANGO_DEBUG", "True") == "True"

BASE_DOMAIN = os.getenv("CRP_BASE_DOMAIN", "crp.local")
ALLOWED_HOSTS = os.getenv(
    "DJANGO_ALLOWED_HOSTS", f"127.0.0.1,localhost,testserver,.{BASE_DOMAIN}"
).split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "django_filters",
    "drf_spectacular",
    "safedelete",
    "simple_history",
    "accounts",
    "company",
    "crp_core",
    "crp_accounting.apps.CrpAccountingConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "company.middleware.CompanyMiddleware",
    "simple_history.middleware.HistoryRequestMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "crp_project.urls"

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
    }
]

WSGI_APPLICATION = "crp_project.wsgi.application"

# =============================================================================
# Database / Cache
# =============================================================================
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("CRP_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "crp-ledger",
    }
}

AUTH_USER_MODEL = "accounts.User"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True
STATIC_URL = "static/"

# =============================================================================
# Django REST Framework
# =============================================================================
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_FILTER_BACKENDS": (
        "django_filters.rest_framework.DjangoFilterBackend",
    ),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "COERCE_DECIMAL_TO_STRING": True,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "CRP Ledger API",
    "DESCRIPTION": "Multi-tenant chart of accounts, balances and financial statements.",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

# =============================================================================
# Tenancy (company.middleware.CompanyMiddleware)
# =============================================================================
NON_TENANT_SUBDOMAINS = ["www", "api", "admin", "static", "media"]
MISSING_COMPANY_BEHAVIOR = "raise_404"

# =============================================================================
# Ledger engine
# =============================================================================
CACHE_OPENING_BALANCE_TIMEOUT = 900
CRP_REPORT_MAX_WORKERS = int(os.getenv("CRP_REPORT_MAX_WORKERS", "4"))
CRP_REPORT_BATCH_SIZE = int(os.getenv("CRP_REPORT_BATCH_SIZE", "200"))
# Code prefixes used when an account carries no balance-sheet category.
CRP_BALANCE_SHEET_PREFIXES = {
    "current_assets": ("1001", "1002", "1003"),
    "current_liabilities": ("2001", "2002"),
}

# =============================================================================
# Logging
# =============================================================================
CRP_LOG_LEVEL = os.getenv("CRP_LOG_LEVEL", "DEBUG" if DEBUG else "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} [{name}] {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "crp_accounting": {"handlers": ["console"], "level": CRP_LOG_LEVEL, "propagate": False},
        "crp_core": {"handlers": ["console"], "level": CRP_LOG_LEVEL, "propagate": False},
        "company": {"handlers": ["console"], "level": CRP_LOG_LEVEL, "propagate": False},
    },
}
