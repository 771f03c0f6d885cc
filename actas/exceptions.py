"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Excepciones de dominio del módulo de actas. Cada una lleva el
               código HTTP y el mensaje (corto, en español y sin detalles
               internos) que las vistas devuelven al usuario. El 'detalle'
               opcional es solo para los logs del servidor.
--------------------------------------------------------------------------------
"""
from django.core.exceptions import ImproperlyConfigured

MENSAJE_ENLACE_INVALIDO = "El enlace no es válido o el acta no existe."


class ErrorActa(Exception):
    codigo_http = 400
    mensaje_usuario = "No se pudo completar la operación."

    def __init__(self, detalle: str = "", mensaje_usuario: str | None = None):
        super().__init__(detalle or self.mensaje_usuario)
        self.detalle = detalle
        if mensaje_usuario:
            self.mensaje_usuario = mensaje_usuario


class ConfiguracionFirmaError(ErrorActa, ImproperlyConfigured):
    """Falta la clave de firma de enlaces (ACTAS_FIRMA_SECRET). Es fatal."""
    codigo_http = 500
    mensaje_usuario = "El servicio de actas no está disponible."


class RegistroNoEncontrado(ErrorActa):
    codigo_http = 404
    mensaje_usuario = MENSAJE_ENLACE_INVALIDO


class ActaNoDisponible(RegistroNoEncontrado):
    """El acta existe pero no está recibiendo aprobaciones."""


class FirmaInvalida(ErrorActa):
    # Mismo código y mensaje que "no encontrado": no se revela qué falló.
    codigo_http = 404
    mensaje_usuario = MENSAJE_ENLACE_INVALIDO


class AprobacionYaRegistrada(ErrorActa):
    codigo_http = 200
    mensaje_usuario = "Ya habías aprobado esta acta. No es necesario hacer nada más."

    def __init__(self, aprobacion=None, detalle: str = ""):
        super().__init__(detalle)
        self.aprobacion = aprobacion


class AccesoDenegado(ErrorActa):
    codigo_http = 403
    mensaje_usuario = "No tienes permiso para acceder a esta acta."


class ErrorLecturaArchivo(ErrorActa):
    codigo_http = 500
    mensaje_usuario = "No se pudo obtener el archivo solicitado."


class TransicionInvalida(ErrorActa):
    codigo_http = 409
    mensaje_usuario = "El acta no está en un estado que permita esta acción."


class ArchivoNoPermitido(ErrorActa):
    codigo_http = 400
    mensaje_usuario = "El archivo no es válido."


class DatoInvalido(ErrorActa):
    codigo_http = 400
    mensaje_usuario = "Los datos enviados no son válidos."
