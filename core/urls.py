"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:           Define el mapeo de URLs para la aplicación core:
                       login en la raíz, página de error de permisos y salud.
--------------------------------------------------------------------------------
"""

from django.urls import path
from django.contrib.auth.views import LoginView

from . import views

urlpatterns = [
    # Ruta raíz (/) que carga el Login.
    path("", LoginView.as_view(), name="login"),
    path("sin-permiso/", views.sin_permiso, name="sin_permiso"),
    path("health/", views.health, name="health"),
]
