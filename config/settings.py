from pathlib import Path
import os
import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
APPEND_SLASH = True

ALLOWED_HOSTS = ["*", "localhost", "127.0.0.1"]


def _env_bool(nome: str, padrao: bool) -> bool:
    valor = os.getenv(nome)
    if valor is None or valor.strip() == "":
        return padrao
    return valor.strip().lower() in {"1", "true", "sim", "yes", "on"}


INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",

    "corsheaders",
    "rest_framework",
    "drf_spectacular",

    "commons",   # health/time endpoints + middleware de log
    "promocoes", # regras comerciais (promoções / condições de venda)
    "vendas",    # carrinho, precificação e resumo de checkout
]


MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "commons.middleware.RequestLogMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
]


ROOT_URLCONF = "config.urls"

CORS_ALLOW_ALL_ORIGINS = True

# Sem modelos próprios: o banco atende apenas os apps contrib do Django.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_THROTTLE_CLASSES": ["rest_framework.throttling.AnonRateThrottle"],
    "DEFAULT_THROTTLE_RATES": {"anon": os.getenv("CARRINHO_THROTTLE_ANON", "120/min")},
}

LANGUAGE_CODE = "pt-br"
TIME_ZONE = "America/Sao_Paulo"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"

SPECTACULAR_SETTINGS = {
    "TITLE": "Carrinho Comercial API",
    "VERSION": "1.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

sentry_sdk.init(
    dsn=os.getenv("SENTRY_DSN", ""),
    integrations=[DjangoIntegration()],
    traces_sample_rate=0.1,
    send_default_pii=False,
)

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "carrinho-default",
    }
}

# =============================
# 🛒 Carrinho / precificação
# =============================
# total de unidades (carrinho inteiro) a partir do qual vale o preço de volume
CARRINHO_LIMITE_PRECO_VOLUME = int(os.getenv("CARRINHO_LIMITE_PRECO_VOLUME", "150"))
CARRINHO_PERCENTUAL_IVA_PADRAO = os.getenv("CARRINHO_PERCENTUAL_IVA_PADRAO", "21")
CARRINHO_PRECOS_INCLUEM_IVA_PADRAO = _env_bool("CARRINHO_PRECOS_INCLUEM_IVA_PADRAO", True)
# True: pedido mínimo não atingido bloqueia o checkout. False: apenas avisa.
CARRINHO_BLOQUEAR_PEDIDO_MINIMO = _env_bool("CARRINHO_BLOQUEAR_PEDIDO_MINIMO", True)
CARRINHO_CACHE_TIMEOUT = int(os.getenv("CARRINHO_CACHE_TIMEOUT", str(7 * 24 * 3600)))
CARRINHO_SIMBOLO_MOEDA = os.getenv("CARRINHO_SIMBOLO_MOEDA", "$")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "class": "pythonjsonlogger.json.JsonFormatter",
        },
        "simple": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "level": "INFO",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": True,
        },
        "vendas": {
            "handlers": ["console"],
            "level": os.getenv("CARRINHO_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
        "promocoes": {
            "handlers": ["console"],
            "level": os.getenv("CARRINHO_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
