"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Archivo principal de enrutamiento URL del proyecto. Delega en las
               rutas de core (salud, sin permiso) y de actas (vistas de personal,
               enlaces firmados para integrantes y API REST).
--------------------------------------------------------------------------------
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path('admin/', admin.site.urls), # Panel de administración de Django
    path("", include("core.urls")),  # Salud y página de error de permisos
    path("accounts/", include("django.contrib.auth.urls")), # Login/logout estándar
    path("actas/", include("actas.urls")), # Módulo de actas
]

# Solo en desarrollo: servir archivos subidos desde MEDIA_ROOT
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
