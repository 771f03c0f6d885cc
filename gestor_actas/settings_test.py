"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Configuración para la batería de pruebas. Hereda de settings.py y
               reemplaza la base de datos (SQLite), el almacenamiento (disco en
               un directorio temporal), la caché (memoria) y ejecuta Celery en
               modo síncrono para no depender de Redis ni de S3.
--------------------------------------------------------------------------------
"""

import tempfile

from .settings import *  # noqa: F401,F403

DEBUG = False

# Clave fija solo para pruebas; en producción viene del entorno.
ACTAS_FIRMA_SECRET = "clave-de-pruebas-actas"
ACTAS_BASE_URL = "http://testserver"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        "TEST": {"NAME": ""},
    }
}

MEDIA_ROOT = tempfile.mkdtemp(prefix="gestor_actas_media_")

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = None

# El webhook de correo nunca se llama desde las pruebas.
APPSCRIPT_WEBHOOK_URL = None
APPSCRIPT_WEBHOOK_SECRET = None

# Contraseñas rápidas para crear usuarios en cada prueba.
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "CRITICAL"},
}
