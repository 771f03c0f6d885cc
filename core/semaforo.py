"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Semaforización de fechas límite (prescripción). Clasifica una
               fecha en rojo, amarillo, verde o sin fecha según los días que
               faltan respecto de una fecha de referencia (por defecto hoy, en
               la zona horaria local):
                 - Rojo:     vencida o faltan menos de 183 días (~6 meses)
                 - Amarillo: faltan entre 183 y 365 días
                 - Verde:    faltan más de 365 días
                 - Sin fecha: no hay fecha o no se pudo interpretar
--------------------------------------------------------------------------------
"""

import datetime

from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

DIAS_UMBRAL_ROJO = 183
DIAS_UMBRAL_AMARILLO = 365


class Semaforo(models.TextChoices):
    SIN_FECHA = "sin_fecha", "Sin fecha"
    VERDE     = "verde",     "Verde"
    AMARILLO  = "amarillo",  "Amarillo"
    ROJO      = "rojo",      "Rojo"


def a_fecha_local(valor) -> datetime.date | None:
    """
    Normaliza date, datetime o texto ISO a una fecha de calendario local.
    Devuelve None si el valor está vacío o no se puede interpretar.
    """
    if valor is None:
        return None
    if isinstance(valor, datetime.datetime):
        if timezone.is_aware(valor):
            valor = timezone.localtime(valor)
        return valor.date()
    if isinstance(valor, datetime.date):
        return valor
    if isinstance(valor, str):
        texto = valor.strip()
        if not texto:
            return None
        try:
            # Primero datetime ISO ("2024-06-01T10:00:00Z"), luego solo fecha
            fecha_hora = parse_datetime(texto)
            if fecha_hora is not None:
                return a_fecha_local(fecha_hora)
            return parse_date(texto)
        except ValueError:
            # Formato correcto pero fecha imposible (ej. 2024-02-30)
            return None
    return None


def dias_restantes(fecha, referencia=None) -> int | None:
    """Días entre la referencia y la fecha (negativo si ya venció)."""
    objetivo = a_fecha_local(fecha)
    if objetivo is None:
        return None
    base = a_fecha_local(referencia) if referencia is not None else timezone.localdate()
    if base is None:
        base = timezone.localdate()
    return (objetivo - base).days


def _clasificar_dias(dias: int | None) -> Semaforo:
    if dias is None:
        return Semaforo.SIN_FECHA
    if dias < DIAS_UMBRAL_ROJO:
        return Semaforo.ROJO
    if dias <= DIAS_UMBRAL_AMARILLO:
        return Semaforo.AMARILLO
    return Semaforo.VERDE


def clasificar_fecha_limite(fecha, referencia=None) -> Semaforo:
    return _clasificar_dias(dias_restantes(fecha, referencia))


def texto_estado_fecha_limite(fecha, referencia=None) -> str:
    """Texto corto para mostrar al usuario (ej. "Vencido hace 3 días")."""
    dias = dias_restantes(fecha, referencia)
    if dias is None:
        return "Sin fecha límite"
    if dias < 0:
        atraso = abs(dias)
        return f"Vencido hace {atraso} {'día' if atraso == 1 else 'días'}"
    if dias == 0:
        return "Vence hoy"
    if dias == 1:
        return "Vence mañana"

    prefijos = {
        Semaforo.ROJO: "Crítico",
        Semaforo.AMARILLO: "Atención",
        Semaforo.VERDE: "Vigente",
    }
    return f"{prefijos[_clasificar_dias(dias)]}: vence en {dias} días"
