"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Lectura y escritura de archivos de actas sobre el almacenamiento
               configurado (S3/Cellar en producción, disco en desarrollo y
               pruebas). Valida tipo y tamaño de fotos de aprobación y de
               documentos adjuntos. Las rutas nuevas siempre llevan un uuid,
               por lo que nunca se sobrescribe un archivo existente.
--------------------------------------------------------------------------------
"""
import logging
import uuid

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.text import get_valid_filename

from .exceptions import ArchivoNoPermitido, ErrorLecturaArchivo

logger = logging.getLogger(__name__)

# Fotos de evidencia: tipo MIME -> extensión
MIME_FOTO_PERMITIDOS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

PREFIJOS_DOCUMENTO_PERMITIDOS = (
    "application/pdf",
    "image/",
    "application/msword",
    "application/vnd.openxmlformats-officedocument",
    "text/plain",
    "text/csv",
)


def tamano_maximo() -> int:
    return getattr(settings, "ACTAS_MAX_TAMANO_ARCHIVO", 10 * 1024 * 1024)


def _tipo_declarado(archivo) -> str:
    return (getattr(archivo, "content_type", "") or "").split(";")[0].strip().lower()


def _validar_tamano(archivo):
    tamano = getattr(archivo, "size", 0) or 0
    if tamano <= 0:
        raise ArchivoNoPermitido("archivo vacío", mensaje_usuario="El archivo está vacío.")
    if tamano > tamano_maximo():
        raise ArchivoNoPermitido(
            f"archivo de {tamano} bytes",
            mensaje_usuario="El archivo supera el tamaño máximo de 10 MB.",
        )


def _cabecera_coincide(mime: str, cabecera: bytes) -> bool:
    if mime == "image/jpeg":
        return cabecera.startswith(b"\xff\xd8\xff")
    if mime == "image/png":
        return cabecera.startswith(b"\x89PNG\r\n\x1a\n")
    if mime == "image/webp":
        return cabecera[:4] == b"RIFF" and cabecera[8:12] == b"WEBP"
    return False


def validar_foto(archivo) -> tuple[str, str]:
    """Devuelve (mime, extensión) o lanza ArchivoNoPermitido."""
    mime = _tipo_declarado(archivo)
    if mime not in MIME_FOTO_PERMITIDOS:
        raise ArchivoNoPermitido(
            f"mime de foto no permitido: {mime!r}",
            mensaje_usuario="La foto debe ser JPG, PNG o WEBP.",
        )
    _validar_tamano(archivo)

    # El navegador declara el tipo; se confirma con los primeros bytes
    archivo.seek(0)
    cabecera = archivo.read(12)
    archivo.seek(0)
    if not _cabecera_coincide(mime, cabecera):
        raise ArchivoNoPermitido(
            f"contenido no coincide con {mime}",
            mensaje_usuario="La foto debe ser JPG, PNG o WEBP.",
        )
    return mime, MIME_FOTO_PERMITIDOS[mime]


def validar_documento(archivo) -> str:
    mime = _tipo_declarado(archivo)
    if not mime or not mime.startswith(PREFIJOS_DOCUMENTO_PERMITIDOS):
        raise ArchivoNoPermitido(
            f"mime de documento no permitido: {mime!r}",
            mensaje_usuario="Tipo de archivo no permitido. Usa PDF, imágenes, Word, Excel, TXT o CSV.",
        )
    _validar_tamano(archivo)
    return mime


def guardar_foto_aprobacion(acta_id, integrante_id, archivo) -> tuple[str, str]:
    """Valida y guarda la foto. Devuelve (ruta, mime)."""
    mime, extension = validar_foto(archivo)
    nombre = f"actas/{acta_id}/aprobaciones/{integrante_id}/{uuid.uuid4().hex}.{extension}"
    ruta = default_storage.save(nombre, archivo)
    logger.info("Foto de aprobación guardada (acta=%s, integrante=%s)", acta_id, integrante_id)
    return ruta, mime


def guardar_documento(acta_id, archivo) -> tuple[str, str]:
    """Valida y guarda un documento adjunto. Devuelve (ruta, mime)."""
    mime = validar_documento(archivo)
    nombre_seguro = get_valid_filename(archivo.name or "documento") or "documento"
    nombre = f"actas/{acta_id}/documentos/{uuid.uuid4().hex}-{nombre_seguro}"
    ruta = default_storage.save(nombre, archivo)
    return ruta, mime


def leer_archivo(ruta: str) -> bytes:
    if not ruta:
        raise ErrorLecturaArchivo("ruta vacía")
    try:
        with default_storage.open(ruta, "rb") as archivo:
            return archivo.read()
    except (OSError, BotoCoreError, ClientError) as exc:
        logger.error("No se pudo leer el archivo %s: %s", ruta, exc.__class__.__name__)
        raise ErrorLecturaArchivo(f"lectura fallida: {ruta}") from exc


def eliminar_archivo(ruta: str):
    """Borra un archivo huérfano. Un fallo solo se registra."""
    if not ruta:
        return
    try:
        default_storage.delete(ruta)
    except (OSError, BotoCoreError, ClientError):
        logger.exception("No se pudo eliminar el archivo huérfano %s", ruta)
