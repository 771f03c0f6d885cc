"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Rutas del módulo de actas: vistas de personal, enlaces firmados
               para integrantes y API REST (router de DRF).
--------------------------------------------------------------------------------
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views
from .api import ActaViewSet

app_name = "actas"

router = DefaultRouter()
router.register(r"actas", ActaViewSet, basename="api-actas")

urlpatterns = [
    # Personal
    path("", views.acta_lista, name="lista"),
    path("nueva/", views.acta_nueva, name="nueva"),
    path("<uuid:pk>/", views.acta_detalle, name="detalle"),
    path("<uuid:pk>/editar/", views.acta_editar, name="editar"),
    path("<uuid:pk>/enviar-aprobacion/", views.acta_enviar_aprobacion, name="enviar_aprobacion"),
    path("<uuid:pk>/enviar/", views.acta_enviar, name="enviar"),
    path("<uuid:pk>/documentos/subir/", views.acta_subir_documento, name="subir_documento"),
    path("<uuid:pk>/documentos/<int:documento_id>/", views.documento_acta, name="documento"),
    path("<uuid:pk>/aprobaciones/<int:integrante_id>/foto/", views.foto_aprobacion, name="foto_aprobacion"),
    path("<uuid:pk>/pdf/", views.acta_pdf, name="pdf"),
    path("compromisos/<int:compromiso_id>/estado/", views.compromiso_actualizar_estado,
         name="compromiso_estado"),

    # Integrantes (enlace firmado, sin sesión)
    path("aprobar-participante/", views.aprobar_participante, name="aprobar_participante"),
    path("documentos/descargar/", views.descargar_documento_participante,
         name="descargar_documento_participante"),

    # API
    path("api/", include(router.urls)),
]
