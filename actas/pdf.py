"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Generación del PDF del acta con xhtml2pdf a partir de una
               plantilla HTML. El PDF incluye una huella SHA-256 del contenido
               y de las aprobaciones para poder verificar el documento.
               El PDF generado queda en caché (Redis en producción) bajo una
               clave que incluye la huella: cualquier cambio en el acta genera
               otra clave y obliga a renderizar de nuevo.
--------------------------------------------------------------------------------
"""
import hashlib
import logging
from io import BytesIO

from django.conf import settings
from django.core.cache import cache
from django.template.loader import get_template
from django.utils import timezone
from xhtml2pdf import pisa

from .estados import EstadoAprobacion

logger = logging.getLogger(__name__)

PLANTILLA_PDF_ACTA = "actas/acta_pdf.html"


def renderizar_documento(template_path: str, context: dict) -> bytes:
    """
    Renderiza un template HTML a PDF (bytes) usando xhtml2pdf.
    Devuelve b"" si xhtml2pdf reporta errores.
    """
    template = get_template(template_path)
    html = template.render(context)

    result = BytesIO()
    pdf = pisa.pisaDocument(BytesIO(html.encode("UTF-8")), dest=result, encoding="UTF-8")

    if not pdf.err:
        return result.getvalue()

    logger.error("Error al generar PDF desde %s: %s", template_path, pdf.err)
    return b""


def huella_acta(acta) -> str:
    """
    SHA-256 de los datos que certifica el PDF: contenido, integrantes con su
    aprobación, compromisos con su estado y documentos adjuntos.
    """
    partes = [str(acta.pk), str(acta.serial), acta.estado, acta.fecha.isoformat(), acta.objetivo, acta.contenido]
    for aprobacion in acta.aprobaciones.select_related("integrante").order_by("integrante_id"):
        integrante = aprobacion.integrante
        aprobado_en = aprobacion.aprobado_en.isoformat() if aprobacion.aprobado_en else ""
        partes.append(
            f"{integrante.pk}|{integrante.nombre}|{integrante.email}|{integrante.cargo}|"
            f"{integrante.solicitar_aprobacion}|{aprobacion.estado}|{aprobado_en}"
        )
    for compromiso in acta.compromisos.order_by("id"):
        fecha_limite = compromiso.fecha_limite.isoformat() if compromiso.fecha_limite else ""
        partes.append(
            f"c{compromiso.pk}|{compromiso.descripcion}|{fecha_limite}|"
            f"{compromiso.responsable_id or ''}|{compromiso.estado}"
        )
    for documento in acta.documentos.order_by("id"):
        partes.append(f"d{documento.pk}|{documento.nombre_original}")
    return hashlib.sha256("\n".join(partes).encode("utf-8")).hexdigest()


def nombre_pdf_acta(acta) -> str:
    return f"acta-{acta.pk}-{acta.fecha.isoformat()}.pdf"


def clave_cache_pdf(acta, huella: str) -> str:
    return f"acta_pdf_{acta.pk}_{huella}"


def generar_pdf_acta(acta) -> bytes:
    huella = huella_acta(acta)
    cache_key = clave_cache_pdf(acta, huella)
    contenido = cache.get(cache_key)
    if contenido is not None:
        return contenido

    integrantes = list(acta.integrantes.select_related("aprobacion"))
    contexto = {
        "acta": acta,
        "integrantes": integrantes,
        "compromisos": list(acta.compromisos.select_related("responsable")),
        "documentos": list(acta.documentos.all()),
        "aprobadas": sum(
            1 for i in integrantes
            if i.solicitar_aprobacion and i.aprobacion.estado == EstadoAprobacion.APROBADA
        ),
        "huella": huella,
        "generado_en": timezone.localtime(),
    }
    contenido = renderizar_documento(PLANTILLA_PDF_ACTA, contexto)

    # Un PDF fallido no se guarda para que el siguiente intento lo renderice
    if contenido:
        cache.set(cache_key, contenido, getattr(settings, "ACTAS_PDF_CACHE_SEGUNDOS", 600))
    return contenido
