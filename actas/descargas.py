"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Entrega de archivos de un acta:
                 - para el personal (creador o administrador): foto de una
                   aprobación, documento adjunto y PDF del acta;
                 - para integrantes sin sesión: documento adjunto mediante un
                   enlace firmado del tipo 'documento'.
               No se revisa el estado del acta para descargar.
--------------------------------------------------------------------------------
"""
import logging
from dataclasses import dataclass

from django.http import HttpResponse
from django.utils.http import content_disposition_header

from core.authz import puede_gestionar_acta
from . import almacenamiento
from .exceptions import AccesoDenegado, ErrorLecturaArchivo, FirmaInvalida, RegistroNoEncontrado
from .firmas import TIPO_DOCUMENTO, obtener_firmador
from .models import AprobacionActa, DocumentoActa
from .pdf import generar_pdf_acta, nombre_pdf_acta
from .servicios import entero_valido, obtener_acta, obtener_integrante

logger = logging.getLogger(__name__)


@dataclass
class ArchivoDescarga:
    contenido: bytes
    content_type: str
    nombre: str | None = None
    disposicion: str = "inline"

    def como_respuesta(self) -> HttpResponse:
        response = HttpResponse(self.contenido, content_type=self.content_type)
        response["Content-Length"] = str(len(self.contenido))
        if self.nombre:
            response["Content-Disposition"] = content_disposition_header(
                self.disposicion == "attachment", self.nombre
            )
        return response


def _acta_gestionable(usuario, acta_id):
    acta = obtener_acta(acta_id)
    if not puede_gestionar_acta(usuario, acta):
        raise AccesoDenegado(f"usuario {getattr(usuario, 'pk', None)} sobre acta {acta.pk}")
    return acta


def _documento_de(acta, documento_id) -> DocumentoActa:
    pk = entero_valido(documento_id)
    if pk is None:
        raise RegistroNoEncontrado(f"id de documento inválido: {documento_id!r}")
    try:
        return DocumentoActa.objects.get(pk=pk, acta=acta)
    except DocumentoActa.DoesNotExist:
        raise RegistroNoEncontrado(f"documento {pk} no pertenece al acta {acta.pk}")


def obtener_foto_aprobacion(usuario, acta_id, integrante_id) -> ArchivoDescarga:
    acta = _acta_gestionable(usuario, acta_id)
    pk = entero_valido(integrante_id)
    aprobacion = (
        AprobacionActa.objects.filter(acta=acta, integrante_id=pk).first() if pk else None
    )
    if aprobacion is None or not aprobacion.ruta_foto:
        raise RegistroNoEncontrado(f"sin foto para integrante {integrante_id!r} en acta {acta.pk}")

    contenido = almacenamiento.leer_archivo(aprobacion.ruta_foto)
    return ArchivoDescarga(contenido, aprobacion.foto_mime or "application/octet-stream")


def obtener_documento(usuario, acta_id, documento_id) -> ArchivoDescarga:
    acta = _acta_gestionable(usuario, acta_id)
    documento = _documento_de(acta, documento_id)
    contenido = almacenamiento.leer_archivo(documento.archivo)
    return ArchivoDescarga(contenido, documento.mime_type, documento.nombre_original, "inline")


def obtener_pdf_acta(usuario, acta_id) -> ArchivoDescarga:
    acta = _acta_gestionable(usuario, acta_id)
    contenido = generar_pdf_acta(acta)
    if not contenido:
        raise ErrorLecturaArchivo(
            f"PDF vacío para acta {acta.pk}", mensaje_usuario="No se pudo generar el PDF del acta."
        )
    return ArchivoDescarga(contenido, "application/pdf", nombre_pdf_acta(acta), "inline")


def obtener_documento_participante(acta_id, integrante_id, documento_id, firma) -> ArchivoDescarga:
    """Descarga para integrantes sin sesión. Firma inválida e id inexistente responden igual."""
    acta = obtener_acta(acta_id)
    integrante = obtener_integrante(acta, integrante_id)
    documento = _documento_de(acta, documento_id)

    if not obtener_firmador().verificar(TIPO_DOCUMENTO, acta.pk, integrante.pk, documento.pk, firma):
        logger.warning(
            "Firma inválida en descarga de documento (acta=%s, integrante=%s, doc=%s)",
            acta.pk, integrante.pk, documento.pk,
        )
        raise FirmaInvalida(f"acta={acta.pk} integrante={integrante.pk} doc={documento.pk}")

    contenido = almacenamiento.leer_archivo(documento.archivo)
    return ArchivoDescarga(contenido, documento.mime_type, documento.nombre_original, "attachment")
