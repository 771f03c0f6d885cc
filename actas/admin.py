"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Configuración del panel de administración para Actas. Las
               aprobaciones, el historial y el estado de los compromisos son de
               solo lectura (cambian por el flujo de enlaces firmados o por el
               seguimiento de compromisos) y las actas no se borran.
--------------------------------------------------------------------------------
"""
from django.contrib import admin
from actas.models import (
    Acta,
    ActaIntegrante,
    AprobacionActa,
    CompromisoActa,
    CompromisoActaHistorial,
    DocumentoActa,
    HistorialActa,
)


class IntegranteInline(admin.TabularInline):
    model = ActaIntegrante
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        # Cada integrante nace con su aprobación pendiente (servicios.crear_acta)
        return False


class AprobacionInline(admin.TabularInline):
    model = AprobacionActa
    extra = 0
    can_delete = False
    fields = ('integrante', 'estado', 'aprobado_en', 'foto_mime')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class CompromisoInline(admin.TabularInline):
    model = CompromisoActa
    extra = 0
    # El estado se cambia desde el seguimiento para que quede en su historial
    readonly_fields = ('estado', 'detalle_actualizacion', 'actualizado_en', 'actualizado_por')


class CompromisoHistorialInline(admin.TabularInline):
    model = CompromisoActaHistorial
    extra = 0
    can_delete = False
    readonly_fields = ('estado_anterior', 'estado_nuevo', 'detalle', 'creado_por', 'creado_en')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CompromisoActa)
class CompromisoActaAdmin(admin.ModelAdmin):
    list_display = ('descripcion', 'acta', 'responsable', 'fecha_limite', 'estado', 'actualizado_en')
    list_filter = ('estado', 'fecha_limite')
    search_fields = ('descripcion', 'responsable__email')
    readonly_fields = ('acta', 'estado', 'detalle_actualizacion', 'actualizado_en', 'actualizado_por')
    inlines = [CompromisoHistorialInline]

    def has_add_permission(self, request):
        return False


class DocumentoInline(admin.TabularInline):
    model = DocumentoActa
    extra = 0
    can_delete = False
    readonly_fields = ('nombre_original', 'archivo', 'mime_type', 'tamano', 'subido_por', 'creado_en')

    def has_add_permission(self, request, obj=None):
        return False


class HistorialInline(admin.TabularInline):
    model = HistorialActa
    extra = 0
    can_delete = False
    readonly_fields = ('tipo_evento', 'usuario', 'fecha', 'metadata')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Acta)
class ActaAdmin(admin.ModelAdmin):
    list_display = ('serial', 'objetivo', 'fecha', 'estado', 'creado_por', 'aprobada_en')
    list_filter = ('estado', 'fecha')
    search_fields = ('objetivo', 'contenido', 'integrantes__email')
    # El estado solo cambia por el flujo de aprobación
    readonly_fields = ('serial', 'estado', 'creado_por', 'creado_en', 'actualizado_en', 'aprobada_en')
    inlines = [IntegranteInline, AprobacionInline, CompromisoInline, DocumentoInline, HistorialInline]

    def has_add_permission(self, request):
        # Se crean desde /actas/nueva/ para que nazcan con sus aprobaciones pendientes
        return False

    def has_delete_permission(self, request, obj=None):
        return False
