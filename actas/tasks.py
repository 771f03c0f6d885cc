"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Tareas asíncronas de Celery del módulo de actas. Envían por
               correo (webhook de Google Apps Script):
                 - los enlaces firmados de aprobación a cada integrante,
                 - el acta final en PDF con enlaces de descarga de adjuntos,
                 - el aviso al creador cuando el acta queda aprobada.
--------------------------------------------------------------------------------
"""
import logging

from celery import shared_task
from django.conf import settings
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from core.notificaciones import enviar_correo_via_webhook
from .estados import EstadoAprobacion
from .firmas import construir_enlace_aprobacion, construir_enlace_documento, obtener_firmador
from .models import Acta
from .pdf import generar_pdf_acta, nombre_pdf_acta

logger = logging.getLogger(__name__)


def _cargar_acta(acta_id):
    try:
        return Acta.objects.get(pk=acta_id)
    except Acta.DoesNotExist:
        logger.error("Tarea de correo: el acta %s no existe", acta_id)
        return None


def _enviar_html(destino, asunto, plantilla, contexto, **adjunto) -> bool:
    html = render_to_string(plantilla, contexto)
    return enviar_correo_via_webhook(
        to_email=destino,
        subject=asunto,
        html_body=html,
        text_body=strip_tags(html),
        bcc=getattr(settings, "ACTAS_CORREO_BCC", None),
        **adjunto,
    )


@shared_task
def enviar_correos_aprobacion(acta_id):
    """Un correo por integrante requerido que aún no aprueba. Devuelve cuántos salieron."""
    acta = _cargar_acta(acta_id)
    if acta is None:
        return 0

    firmador = obtener_firmador()
    pendientes = (
        acta.integrantes
        .filter(solicitar_aprobacion=True, aprobacion__estado=EstadoAprobacion.PENDIENTE)
        .select_related("aprobacion")
    )

    enviados = 0
    for integrante in pendientes:
        ok = _enviar_html(
            integrante.email,
            f"Aprobación requerida: Acta #{acta.serial}",
            "actas/correo_aprobacion.html",
            {
                "acta": acta,
                "integrante": integrante,
                "enlace": construir_enlace_aprobacion(integrante, firmador),
            },
        )
        if ok:
            enviados += 1
        else:
            logger.warning("[ACTA EMAIL] No se pudo enviar el enlace de aprobación a %s", integrante.email)

    logger.info("Acta #%s: %s correos de aprobación enviados", acta.serial, enviados)
    return enviados


@shared_task
def enviar_acta_final(acta_id):
    """PDF adjunto a todos los integrantes, con enlaces firmados a los documentos."""
    acta = _cargar_acta(acta_id)
    if acta is None:
        return 0

    pdf_bytes = generar_pdf_acta(acta)
    if not pdf_bytes:
        logger.error("Acta #%s: no se pudo generar el PDF para el envío final", acta.serial)
        return 0

    filename = nombre_pdf_acta(acta)
    firmador = obtener_firmador()
    documentos = list(acta.documentos.all())

    enviados = 0
    for integrante in acta.integrantes.all():
        enlaces = [
            (documento.nombre_original, construir_enlace_documento(integrante, documento, firmador))
            for documento in documentos
        ]
        ok = _enviar_html(
            integrante.email,
            f"Acta #{acta.serial}: {acta.objetivo}",
            "actas/correo_acta_final.html",
            {"acta": acta, "integrante": integrante, "enlaces_documentos": enlaces},
            attachment_bytes=pdf_bytes,
            filename=filename,
            content_type="application/pdf",
        )
        if ok:
            enviados += 1
        else:
            logger.warning("[ACTA EMAIL] No se pudo enviar el acta final a %s", integrante.email)

    logger.info("Acta #%s enviada a %s destinatarios", acta.serial, enviados)
    return enviados


@shared_task
def notificar_acta_aprobada(acta_id):
    acta = _cargar_acta(acta_id)
    if acta is None:
        return False

    creador = acta.creado_por
    if not creador.email:
        logger.info("Acta #%s aprobada; el creador no tiene correo registrado", acta.serial)
        return False

    return _enviar_html(
        creador.email,
        f"Acta #{acta.serial} aprobada",
        "actas/correo_acta_aprobada.html",
        {"acta": acta, "usuario": creador, "base_url": settings.ACTAS_BASE_URL},
    )
