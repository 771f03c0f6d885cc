"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Firma y verificación de los enlaces que reciben los integrantes
               de un acta (aprobar sin iniciar sesión y descargar documentos).
               Cada enlace lleva una firma HMAC-SHA256 sobre un texto canónico:

                   acta:{acta_id}:integrante:{integrante_id}              (aprobación)
                   acta:{acta_id}:integrante:{integrante_id}:doc:{doc_id} (documento)

               La firma no se guarda en la base de datos: se recalcula al
               verificar. Los enlaces no expiran.
--------------------------------------------------------------------------------
"""
import hashlib
import hmac
from urllib.parse import urlencode

from django.conf import settings
from django.urls import reverse

from .exceptions import ConfiguracionFirmaError

TIPO_APROBACION = "aprobacion"
TIPO_DOCUMENTO = "documento"
TIPOS_FIRMA = (TIPO_APROBACION, TIPO_DOCUMENTO)


def _id_entero(valor) -> int:
    if isinstance(valor, bool):
        raise ValueError("id inválido")
    numero = int(str(valor).strip())
    if numero <= 0:
        raise ValueError("id inválido")
    return numero


def construir_payload(tipo: str, acta_id, integrante_id, documento_id=None) -> str:
    """
    Texto canónico a firmar. Lanza ValueError si el tipo o los ids no sirven.
    Un enlace de aprobación nunca lleva documento y uno de documento siempre.
    """
    if tipo not in TIPOS_FIRMA:
        raise ValueError(f"Tipo de firma desconocido: {tipo!r}")

    acta = str(acta_id or "").strip()
    if not acta or ":" in acta:
        raise ValueError("acta_id inválido")

    payload = f"acta:{acta}:integrante:{_id_entero(integrante_id)}"

    if tipo == TIPO_APROBACION:
        if documento_id not in (None, ""):
            raise ValueError("Un enlace de aprobación no lleva documento")
        return payload

    if documento_id in (None, ""):
        raise ValueError("Un enlace de documento requiere documento_id")
    return f"{payload}:doc:{_id_entero(documento_id)}"


def comparar_en_tiempo_constante(a: str, b: str) -> bool:
    """
    Compara dos strings sin salir antes de tiempo: recorre todos los
    caracteres acumulando diferencias con XOR. Solo la longitud se
    compara primero (la longitud de una firma hex no es secreta).
    """
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    if len(a) != len(b):
        return False
    diferencia = 0
    for x, y in zip(a, b):
        diferencia |= ord(x) ^ ord(y)
    return diferencia == 0


class FirmadorEnlaces:
    """Firma y verifica enlaces con una clave inyectada al construirlo."""

    def __init__(self, secreto: str):
        if not secreto or not str(secreto).strip():
            raise ConfiguracionFirmaError("ACTAS_FIRMA_SECRET no está configurada")
        self._clave = str(secreto).encode("utf-8")

    def __repr__(self):
        return "<FirmadorEnlaces>"

    def firmar(self, tipo: str, acta_id, integrante_id, documento_id=None) -> str:
        payload = construir_payload(tipo, acta_id, integrante_id, documento_id)
        return hmac.new(self._clave, payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def verificar(self, tipo: str, acta_id, integrante_id, documento_id, firma) -> bool:
        """True solo si la firma corresponde exactamente a estos datos. Nunca lanza."""
        if not isinstance(firma, str) or not firma:
            return False
        try:
            esperada = self.firmar(tipo, acta_id, integrante_id, documento_id)
        except (TypeError, ValueError):
            return False
        return comparar_en_tiempo_constante(esperada, firma)


def obtener_firmador() -> FirmadorEnlaces:
    """Firmador con la clave de settings (ACTAS_FIRMA_SECRET)."""
    return FirmadorEnlaces(getattr(settings, "ACTAS_FIRMA_SECRET", ""))


def _url_absoluta(nombre_ruta: str, parametros: dict) -> str:
    base = getattr(settings, "ACTAS_BASE_URL", "").rstrip("/")
    return f"{base}{reverse(nombre_ruta)}?{urlencode(parametros)}"


def construir_enlace_aprobacion(integrante, firmador: FirmadorEnlaces | None = None) -> str:
    firmador = firmador or obtener_firmador()
    firma = firmador.firmar(TIPO_APROBACION, integrante.acta_id, integrante.pk)
    return _url_absoluta("actas:aprobar_participante", {
        "acta": str(integrante.acta_id),
        "integrante": integrante.pk,
        "firma": firma,
    })


def construir_enlace_documento(integrante, documento, firmador: FirmadorEnlaces | None = None) -> str:
    firmador = firmador or obtener_firmador()
    firma = firmador.firmar(TIPO_DOCUMENTO, integrante.acta_id, integrante.pk, documento.pk)
    return _url_absoluta("actas:descargar_documento_participante", {
        "acta": str(integrante.acta_id),
        "integrante": integrante.pk,
        "doc": documento.pk,
        "firma": firma,
    })
