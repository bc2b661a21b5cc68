"""
Settings for the hkare operations console.

Everything configurable comes from environment variables.  A `.env`
file next to `manage.py` is loaded first when present, which is meant
for local development only; deployments export real variables.

The console is a front end to the HKare REST backend and keeps no
domain data.  The database only stores sessions.
"""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv  # type: ignore

BASE_DIR = Path(__file__).resolve().parent.parent
if (BASE_DIR / ".env").exists():
    load_dotenv(dotenv_path=BASE_DIR / ".env")


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _list(name: str, default: str = "") -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


def _int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


# =============================================================================
# Deployment
# =============================================================================
ENV = os.getenv("ENV", "dev")
IS_PROD = ENV == "prod"

DEBUG = _flag("DEBUG")
ALLOWED_HOSTS = _list("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver")

_DEV_SECRET = "hkare-console-dev-only-secret"
SECRET_KEY = os.getenv("SECRET_KEY") or _DEV_SECRET

if IS_PROD:
    for broken, reason in (
        (DEBUG, "DEBUG must be off"),
        ("*" in ALLOWED_HOSTS, "ALLOWED_HOSTS must list real host names"),
        (SECRET_KEY == _DEV_SECRET, "SECRET_KEY must be set"),
    ):
        if broken:
            raise RuntimeError(f"{reason} when ENV=prod")

# =============================================================================
# Apps, middleware, templates
# =============================================================================
INSTALLED_APPS = [
    "django_prometheus",
    "corsheaders",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_yasg",
    "console",
]

MIDDLEWARE = [
    "django_prometheus.middleware.PrometheusBeforeMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    # needs the session; sets request.operator for views and templates
    "console.middleware.OperatorSessionMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django_prometheus.middleware.PrometheusAfterMiddleware",
]

ROOT_URLCONF = "hkare.urls"
WSGI_APPLICATION = "hkare.wsgi.application"

TEMPLATES = [{
    "BACKEND": "django.template.backends.django.DjangoTemplates",
    "DIRS": [],
    "APP_DIRS": True,
    "OPTIONS": {"context_processors": [
        "django.template.context_processors.debug",
        "django.template.context_processors.request",
        "django.contrib.messages.context_processors.messages",
        "console.context_processors.operator",
    ]},
}]

# =============================================================================
# Storage: DATABASE_URL when given, else a local SQLite file
# =============================================================================
if os.getenv("DATABASE_URL", "").strip():
    import dj_database_url  # type: ignore

    DATABASES = {"default": dj_database_url.config(conn_max_age=_int("DB_CONN_MAX_AGE", 120))}
else:
    DATABASES = {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": str(BASE_DIR / "db.sqlite3")}}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REDIS_URL = os.getenv("REDIS_URL", "")
if REDIS_URL:
    CACHES = {"default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": REDIS_URL,
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
            "CONNECTION_POOL_KWARGS": {"max_connections": _int("REDIS_MAX_CONN", 50)},
            "SOCKET_CONNECT_TIMEOUT": 3,
            "SOCKET_TIMEOUT": 3,
        },
    }}
    SESSION_ENGINE = "django.contrib.sessions.backends.cached_db"
else:
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "hkare-console"}}

# =============================================================================
# Locale and static files
# =============================================================================
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedStaticFilesStorage"},
}

# =============================================================================
# Operator sessions
# =============================================================================
CONSOLE_SESSION_HOURS = _int("CONSOLE_SESSION_HOURS", 12)
SESSION_COOKIE_AGE = CONSOLE_SESSION_HOURS * 3600
SESSION_COOKIE_HTTPONLY = True

# Bootstrap administrator that signs in without the backend; empty disables it
CONSOLE_ADMIN_USERNAME = os.getenv("CONSOLE_ADMIN_USERNAME", "")
CONSOLE_ADMIN_PASSWORD = os.getenv("CONSOLE_ADMIN_PASSWORD", "")
if IS_PROD and CONSOLE_ADMIN_USERNAME and CONSOLE_ADMIN_PASSWORD in {"", "admin"}:
    raise RuntimeError("CONSOLE_ADMIN_PASSWORD must be set securely when ENV=prod")

# =============================================================================
# HKare backend
# =============================================================================
HKARE_BACKEND_URL = os.getenv("HKARE_BACKEND_URL", "http://localhost:8080").rstrip("/")
HKARE_BACKEND_TIMEOUT = float(os.getenv("HKARE_BACKEND_TIMEOUT", "10"))
# Retry /<resource> when /api/<resource> cannot serve a request
HKARE_BACKEND_FALLBACK = _flag("HKARE_BACKEND_FALLBACK", "1")
CONSOLE_LOOKUP_CACHE_SECONDS = _int("CONSOLE_LOOKUP_CACHE_SECONDS", 60)

# =============================================================================
# REST framework and API docs
# =============================================================================
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["console.authentication.OperatorSessionAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_THROTTLE_CLASSES": (
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ),
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("THROTTLE_ANON", "60/min"),
        "user": os.getenv("THROTTLE_USER", "600/min"),
        "login": os.getenv("THROTTLE_LOGIN", "10/min"),
    },
    "EXCEPTION_HANDLER": "console.exceptions.api_exception_handler",
}

# API routes have no trailing slash
APPEND_SLASH = False

SWAGGER_SETTINGS = {"DEFAULT_INFO": "hkare.urls.api_info", "USE_SESSION_AUTH": False}

CORS_ALLOWED_ORIGINS = _list("CORS_ALLOWED_ORIGINS")
CORS_ALLOW_CREDENTIALS = True

# =============================================================================
# TLS behind a proxy
# =============================================================================
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
USE_X_FORWARDED_HOST = True
if IS_PROD:
    SECURE_HSTS_SECONDS = _int("SECURE_HSTS_SECONDS", 3600)
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_SSL_REDIRECT = _flag("SECURE_SSL_REDIRECT", "1")

# =============================================================================
# Logging
# =============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"}},
    "handlers": {"stderr": {"class": "logging.StreamHandler", "formatter": "plain"}},
    "root": {"handlers": ["stderr"], "level": "WARNING"},
    "loggers": {
        "console": {"handlers": ["stderr"], "level": LOG_LEVEL, "propagate": False},
        "django.request": {"handlers": ["stderr"], "level": "WARNING", "propagate": False},
    },
}
