"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:           Configura el panel de administración para el modelo
                       Perfil. Permite ver usuario, rol y cargo en la lista,
                       y filtrar/buscar por esos campos.
--------------------------------------------------------------------------------
"""

from django.contrib import admin

from .models import Perfil


@admin.register(Perfil)
class PerfilAdmin(admin.ModelAdmin):
    list_display = ('usuario', 'rol', 'cargo')
    list_filter = ('rol',)
    # Campos de búsqueda (usa __ para acceder a campos del usuario relacionado).
    search_fields = ('usuario__username', 'usuario__email', 'cargo')
