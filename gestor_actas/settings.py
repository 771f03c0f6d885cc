"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Archivo de configuración global de Django. Contiene configuraciones
               de base de datos, seguridad, aplicaciones instaladas, middleware,
               archivos estáticos, Celery, correos, almacenamiento en la nube (S3)
               y la clave de firma de los enlaces de aprobación de actas.
--------------------------------------------------------------------------------
"""

from pathlib import Path
import os
from dotenv import load_dotenv

# -----------------------------------------------------------------------------
# Paths & .env
# -----------------------------------------------------------------------------
# Define el directorio base del proyecto
BASE_DIR = Path(__file__).resolve().parent.parent

# Cargar variables de entorno desde un archivo .env en la raíz del proyecto
load_dotenv(os.path.join(BASE_DIR, '.env'))
import dj_database_url  # Utilidad para configurar DB desde una URL string

# -------------------------------------------------------------------
# Seguridad / Debug
# -------------------------------------------------------------------
# Clave secreta de Django (sesiones, CSRF). Debe venir desde .env en producción
SECRET_KEY = os.environ.get('SECRET_KEY', default='your secret key')
# Modo Debug (True para desarrollo, False para producción)
DEBUG = os.getenv("DEBUG", "True").lower() == "true"

# Lista de hosts/dominios permitidos para servir la aplicación
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
RENDER_EXTERNAL_HOSTNAME = os.environ.get('RENDER_EXTERNAL_HOSTNAME')
if RENDER_EXTERNAL_HOSTNAME:
    ALLOWED_HOSTS.append(RENDER_EXTERNAL_HOSTNAME) # Añade host de Render si existe

# Orígenes confiables para CSRF (Cross-Site Request Forgery)
CSRF_TRUSTED_ORIGINS = [
    origen for origen in os.getenv(
        "CSRF_TRUSTED_ORIGINS", "http://127.0.0.1,http://localhost"
    ).split(",") if origen
]

# -------------------------------------------------------------------
# Enlaces firmados de actas
# -------------------------------------------------------------------
# Clave HMAC para los enlaces de aprobación/descarga que reciben los integrantes.
# Es obligatoria: sin ella el módulo de actas no arranca (ver actas.checks).
ACTAS_FIRMA_SECRET = os.getenv("ACTAS_FIRMA_SECRET", "")
# URL pública con la que se arman los enlaces enviados por correo
ACTAS_BASE_URL = os.getenv("ACTAS_BASE_URL", "http://localhost:8000").rstrip("/")
# Copia oculta de todos los correos de actas (gerencia)
ACTAS_CORREO_BCC = [c for c in os.getenv("ACTAS_CORREO_BCC", "").split(",") if c]

# -----------------------------------------------------------------------------
# Apps (Aplicaciones Instaladas)
# -----------------------------------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.admin",       # Panel de administración
    "django.contrib.auth",        # Sistema de autenticación
    "django.contrib.contenttypes",# Tipos de contenido genéricos
    "django.contrib.sessions",    # Gestión de sesiones
    "django.contrib.messages",    # Mensajes flash
    "django.contrib.staticfiles", # Archivos estáticos

    # Project apps (Módulos desarrollados por el equipo)
    "core.apps.CoreConfig",
    "actas.apps.ActasConfig",

    # Terceros (Librerías externas)
    "widget_tweaks",             # Mejoras en renderizado de formularios
    "rest_framework",            # API REST Framework
    "rest_framework.authtoken",  # Autenticación por Token para API
    "django_filters",            # Filtrado avanzado en API
    "storages",                  # Almacenamiento en S3/Cloud
]

# -----------------------------------------------------------------------------
# Middleware (Procesadores de petición/respuesta)
# -----------------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    'whitenoise.middleware.WhiteNoiseMiddleware',      # Sirve estáticos en producción
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# Archivo principal de rutas URL
ROOT_URLCONF = "gestor_actas.urls"

# -----------------------------------------------------------------------------
# Templates (Plantillas HTML)
# -----------------------------------------------------------------------------
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"], # Directorio global de templates
        "APP_DIRS": True, # Buscar templates dentro de cada app
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

# Definición de aplicaciones WSGI y ASGI
ASGI_APPLICATION = "gestor_actas.asgi.application"
WSGI_APPLICATION = "gestor_actas.wsgi.application"

# -----------------------------------------------------------------------------
# Base de datos (MySQL vía PyMySQL; compatible con TiDB Cloud / Aiven)
# -----------------------------------------------------------------------------
db_config = dj_database_url.config(
    default=os.getenv('DATABASE_URL', 'mysql://root:@127.0.0.1:3306/gestor_actas'),
    conn_max_age=600,         # Persistencia de conexiones
    conn_health_checks=True,  # Verificar salud de conexión
)

# 1. Asegurar que el diccionario 'OPTIONS' exista
if 'OPTIONS' not in db_config:
    db_config['OPTIONS'] = {}

# 2. Limpiar parámetros que PyMySQL no acepta
db_config['OPTIONS'].pop('ssl_mode', None)
db_config['OPTIONS'].pop('ssl-mode', None)

DATABASES = {
    'default': db_config
}

# 3. Opciones de compatibilidad adicionales para MySQL/TiDB
if DATABASES['default'].get('ENGINE', '').endswith('mysql'):
    DATABASES['default']['OPTIONS'].update({
        "ssl": {'ca': None},
        "connect_timeout": 10,
        "charset": "utf8mb4",
        # READ COMMITTED: el re-chequeo de aprobaciones bajo select_for_update
        # debe ver las filas confirmadas por otras transacciones.
        "isolation_level": "read committed",
        "init_command": "SET sql_mode='STRICT_TRANS_TABLES'",
    })

# -----------------------------------------------------------------------------
# Validadores de contraseñas
# -----------------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator", "OPTIONS": {"min_length": 12}},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# -----------------------------------------------------------------------------
# Internacionalización y Zona Horaria
# -----------------------------------------------------------------------------
LANGUAGE_CODE = "es-co" # Español de Colombia
TIME_ZONE = "America/Bogota" # Hora de Colombia
USE_I18N = True
USE_TZ = True

# -----------------------------------------------------------------------------
# Redirecciones de Autenticación
# -----------------------------------------------------------------------------
LOGIN_URL = "/accounts/login/"
LOGIN_REDIRECT_URL = "/actas/"
LOGOUT_REDIRECT_URL = "/accounts/login/"

# -----------------------------------------------------------------------------
# Archivos estáticos y media
# -----------------------------------------------------------------------------
STATIC_URL = "static/"
STATICFILES_DIRS = [BASE_DIR / "static"] if (BASE_DIR / "static").exists() else []

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media" # Carpeta local para subidas (si no se usa S3)

STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles') # Carpeta para collectstatic

# -----------------------------------------------------------------------------
# Límites de tamaño de subida
# -----------------------------------------------------------------------------
DATA_UPLOAD_MAX_MEMORY_SIZE = 20 * 1024 * 1024   # 20 MB límite
FILE_UPLOAD_MAX_MEMORY_SIZE = 20 * 1024 * 1024   # 20 MB límite

# Límites propios de las actas (fotos de aprobación y documentos adjuntos)
ACTAS_MAX_TAMANO_ARCHIVO = 10 * 1024 * 1024      # 10 MB
ACTAS_PDF_CACHE_SEGUNDOS = int(os.getenv("ACTAS_PDF_CACHE_SEGUNDOS", "600"))  # PDF generado en caché

# -----------------------------------------------------------------------------
# Configuración DRF (Django REST Framework)
# -----------------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework.authentication.TokenAuthentication",   # Auth por Token
        "rest_framework.authentication.SessionAuthentication", # Auth por Sesión (Web)
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_FILTER_BACKENDS": (
        "django_filters.rest_framework.DjangoFilterBackend",
    ),
}

# -----------------------------------------------------------------------------
# Configuración adicional
# -----------------------------------------------------------------------------
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =================================================
# --- CONFIGURACIÓN DE CELERY (CON REDIS) ---
# =================================================
CELERY_BROKER_URL = os.environ.get('REDIS_URL')
CELERY_RESULT_BACKEND = os.environ.get('REDIS_URL')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE

# =================================================
# --- CONFIGURACIÓN DE CLEVER CLOUD STORAGE (CELLAR / S3) ---
# =================================================

# Credenciales desde variables de entorno
AWS_ACCESS_KEY_ID = os.environ.get('CELLAR_KEY_ID')
AWS_SECRET_ACCESS_KEY = os.environ.get('CELLAR_SECRET_KEY')
AWS_STORAGE_BUCKET_NAME = os.environ.get('CELLAR_BUCKET_NAME')

# Endpoint para servicio compatible con S3 (Cellar)
AWS_S3_ENDPOINT_URL = f"https://{os.environ.get('CELLAR_HOST')}"
AWS_S3_REGION_NAME = "us-east-1" # Región por defecto para compatibilidad

# --- CRÍTICO: Configuración "Path Style" para evitar errores de DNS en buckets ---
AWS_S3_ADDRESSING_STYLE = "path"
AWS_S3_SIGNATURE_VERSION = "s3v4"

# Las fotos de aprobación nunca se sobrescriben (solo se agregan rutas nuevas)
AWS_S3_FILE_OVERWRITE = False
AWS_DEFAULT_ACL = None         # Dejar privacidad al bucket policy
AWS_S3_VERIFY = True           # Verificar certificados SSL
AWS_S3_USE_SSL = True
AWS_QUERYSTRING_AUTH = True    # Nada del bucket es público

# --- BACKEND DE ALMACENAMIENTO ---
STORAGES = {
    "default": {
        "BACKEND": "storages.backends.s3boto3.S3Boto3Storage",
    },
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
    },
}

# Sin bucket configurado (desarrollo local) se usa el disco
if not AWS_STORAGE_BUCKET_NAME:
    STORAGES["default"] = {"BACKEND": "django.core.files.storage.FileSystemStorage"}

# =================================================
# --- WEBHOOK GOOGLE APPS SCRIPT (ENVÍO DE CORREO) ---
# =================================================
APPSCRIPT_WEBHOOK_URL = os.getenv("APPSCRIPT_WEBHOOK_URL")
APPSCRIPT_WEBHOOK_SECRET = os.getenv("APPSCRIPT_WEBHOOK_SECRET")

# =================================================
# --- CONFIGURACIÓN DE CACHÉ (REDIS) ---
# =================================================
CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": os.environ.get('REDIS_URL', 'redis://localhost:6379/1'),
        "TIMEOUT": 120,  # Tiempo de vida por defecto: 2 minutos
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
        },
        "KEY_PREFIX": "gestor_actas", # Prefijo para claves en Redis
    }
}

# =================================================
# --- LOGGING ---
# =================================================
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "[{levelname}] {asctime} {name}: {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": "INFO"},
    "loggers": {
        "actas": {"level": os.getenv("ACTAS_LOG_LEVEL", "INFO")},
        "django.request": {"level": "ERROR"},
    },
}
