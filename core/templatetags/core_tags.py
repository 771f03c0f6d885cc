"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Etiquetas de plantilla del proyecto: permisos (user_can) y
               semaforización de fechas límite (semaforo, texto_fecha_limite).
--------------------------------------------------------------------------------
"""
from django import template

from core.authz import can
from core.semaforo import clasificar_fecha_limite, texto_estado_fecha_limite

register = template.Library()


@register.simple_tag(takes_context=True)
def user_can(context, resource: str, action: str) -> bool:
    """
    Uso en template:
        {% load core_tags %}
        {% user_can 'actas' 'create' as puede_crear %}
        {% if puede_crear %} ... {% endif %}
    """
    user = context["request"].user
    return can(user, resource, action)


@register.filter
def semaforo(fecha):
    """{{ compromiso.fecha_limite|semaforo }} -> 'rojo' | 'amarillo' | 'verde' | 'sin_fecha'"""
    return clasificar_fecha_limite(fecha).value


@register.filter
def texto_fecha_limite(fecha):
    return texto_estado_fecha_limite(fecha)
