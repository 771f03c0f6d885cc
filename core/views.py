"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:           Vistas transversales del sistema: página de error 403
                       personalizada y chequeo de salud para el balanceador.
--------------------------------------------------------------------------------
"""

from django.http import JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET


def sin_permiso(request):
    """Renderiza una página de error 403 personalizada cuando falta acceso."""
    return render(request, "core/sin_permiso.html", status=403)


@require_GET
def health(request):
    return JsonResponse({"status": "ok"})
