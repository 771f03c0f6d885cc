"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Estados del acta y de la aprobación de cada integrante, con sus
               tablas de transiciones permitidas. Cualquier cambio de estado
               pasa por validar_transicion_*; no hay transiciones hacia atrás.
--------------------------------------------------------------------------------
"""
from django.db import models

from .exceptions import TransicionInvalida


class EstadoActa(models.TextChoices):
    BORRADOR = "borrador", "Borrador"
    PENDIENTE_APROBACION = "pendiente_aprobacion", "Pendiente de aprobación"
    APROBADA = "aprobada", "Aprobada"
    ENVIADA = "enviada", "Enviada"


class EstadoAprobacion(models.TextChoices):
    PENDIENTE = "pendiente", "Pendiente"
    APROBADA = "aprobada", "Aprobada"


# borrador -> pendiente_aprobacion -> aprobada -> enviada
TRANSICIONES_ACTA = {
    EstadoActa.BORRADOR: {EstadoActa.PENDIENTE_APROBACION},
    EstadoActa.PENDIENTE_APROBACION: {EstadoActa.APROBADA},
    EstadoActa.APROBADA: {EstadoActa.ENVIADA},
    EstadoActa.ENVIADA: set(),
}

TRANSICIONES_APROBACION = {
    EstadoAprobacion.PENDIENTE: {EstadoAprobacion.APROBADA},
    EstadoAprobacion.APROBADA: set(),
}


def _validar(tabla, actual, nuevo, entidad):
    if nuevo not in tabla.get(actual, set()):
        raise TransicionInvalida(f"{entidad}: transición {actual} -> {nuevo} no permitida")


def validar_transicion_acta(actual, nuevo):
    _validar(TRANSICIONES_ACTA, actual, nuevo, "acta")


def validar_transicion_aprobacion(actual, nuevo):
    _validar(TRANSICIONES_APROBACION, actual, nuevo, "aprobación")


def acepta_aprobaciones(estado_acta) -> bool:
    """Solo un acta enviada a aprobación recibe aprobaciones de integrantes."""
    return estado_acta == EstadoActa.PENDIENTE_APROBACION


class EstadoCompromiso(models.TextChoices):
    """Seguimiento de un compromiso; puede cambiar en cualquier sentido."""
    PENDIENTE = "pendiente", "Pendiente"
    CUMPLIDO = "cumplido", "Cumplido"
    NO_CUMPLIDO = "no_cumplido", "No cumplido"
