"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Chequeo de sistema de Django: sin ACTAS_FIRMA_SECRET no se pueden
               firmar ni verificar enlaces, así que el proyecto no arranca.
--------------------------------------------------------------------------------
"""
from django.conf import settings
from django.core.checks import Error


def verificar_clave_firma(app_configs, **kwargs):
    secreto = getattr(settings, "ACTAS_FIRMA_SECRET", "")
    if secreto and str(secreto).strip():
        return []
    return [
        Error(
            "ACTAS_FIRMA_SECRET no está configurada.",
            hint="Define la variable de entorno ACTAS_FIRMA_SECRET con una clave larga y aleatoria.",
            id="actas.E001",
        )
    ]
