"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Modelos del módulo de actas: el acta, sus integrantes, el registro
               de aprobación de cada integrante, documentos adjuntos, compromisos
               con fecha límite y su hoja de vida, y el historial de eventos.
               Las actas no se eliminan desde la aplicación.
--------------------------------------------------------------------------------
"""
import uuid

from django.db import models
from django.db.models import Q
from django.contrib.auth import get_user_model
from django.utils import timezone

from core.authz import es_admin
from core.semaforo import clasificar_fecha_limite, texto_estado_fecha_limite
from .estados import EstadoActa, EstadoAprobacion, EstadoCompromiso

User = get_user_model()


class ActaQuerySet(models.QuerySet):
    def visibles_para(self, user):
        """Administradores ven todo; el resto, las actas que creó o donde es integrante."""
        if es_admin(user):
            return self
        return self.filter(Q(creado_por=user) | Q(integrantes__usuario=user)).distinct()


class Acta(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Número correlativo legible para las personas (el id es opaco)
    serial = models.PositiveIntegerField(unique=True, editable=False)
    fecha = models.DateField(verbose_name="Fecha de la reunión")
    objetivo = models.CharField(max_length=255)
    contenido = models.TextField(blank=True, default="")
    estado = models.CharField(max_length=25, choices=EstadoActa.choices, default=EstadoActa.BORRADOR)

    creado_por = models.ForeignKey(User, on_delete=models.PROTECT, related_name="actas_creadas")
    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)
    aprobada_en = models.DateTimeField(null=True, blank=True)

    objects = ActaQuerySet.as_manager()

    class Meta:
        ordering = ["-creado_en"]

    def __str__(self):
        return f"Acta #{self.serial} - {self.objetivo}"

    @property
    def integrantes_requeridos(self):
        return self.integrantes.filter(solicitar_aprobacion=True)

    def resumen_aprobaciones(self) -> dict:
        qs = self.aprobaciones.filter(integrante__solicitar_aprobacion=True)
        total = qs.count()
        aprobadas = qs.filter(estado=EstadoAprobacion.APROBADA).count()
        return {"total": total, "aprobadas": aprobadas, "pendientes": total - aprobadas}


class ActaIntegrante(models.Model):
    class Tipo(models.TextChoices):
        INTERNO = "interno", "Interno"
        EXTERNO = "externo", "Externo"

    acta = models.ForeignKey(Acta, on_delete=models.CASCADE, related_name="integrantes")
    nombre = models.CharField(max_length=150)
    email = models.EmailField()
    cargo = models.CharField(max_length=120, blank=True, default="")
    tipo = models.CharField(max_length=10, choices=Tipo.choices, default=Tipo.EXTERNO)
    # Solo para integrantes internos (empleados con cuenta)
    usuario = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="participaciones_acta"
    )
    solicitar_aprobacion = models.BooleanField(
        default=True, help_text="Si está marcado, el acta no se aprueba sin su aprobación."
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.nombre} <{self.email}>"


class AprobacionActa(models.Model):
    """Una por (acta, integrante); se crea 'pendiente' junto con el integrante."""
    acta = models.ForeignKey(Acta, on_delete=models.CASCADE, related_name="aprobaciones")
    integrante = models.OneToOneField(ActaIntegrante, on_delete=models.CASCADE, related_name="aprobacion")
    estado = models.CharField(max_length=10, choices=EstadoAprobacion.choices, default=EstadoAprobacion.PENDIENTE)
    aprobado_en = models.DateTimeField(null=True, blank=True)
    ruta_foto = models.CharField(max_length=500, null=True, blank=True)
    foto_mime = models.CharField(max_length=50, null=True, blank=True)
    # Firma con la que se aprobó (auditoría)
    firma_usada = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["acta", "integrante"], name="aprobacion_unica_por_integrante"),
        ]

    def __str__(self):
        return f"{self.integrante.nombre}: {self.get_estado_display()}"

    @property
    def aprobada(self) -> bool:
        return self.estado == EstadoAprobacion.APROBADA


class DocumentoActa(models.Model):
    acta = models.ForeignKey(Acta, on_delete=models.CASCADE, related_name="documentos")
    nombre_original = models.CharField(max_length=255)
    # Ruta relativa dentro del almacenamiento (S3 o disco)
    archivo = models.CharField(max_length=500)
    mime_type = models.CharField(max_length=150)
    tamano = models.PositiveIntegerField()
    subido_por = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    creado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["creado_en"]

    def __str__(self):
        return self.nombre_original


class CompromisoActa(models.Model):
    acta = models.ForeignKey(Acta, on_delete=models.CASCADE, related_name="compromisos")
    descripcion = models.TextField()
    fecha_limite = models.DateField(null=True, blank=True)
    responsable = models.ForeignKey(
        ActaIntegrante, on_delete=models.SET_NULL, null=True, blank=True, related_name="compromisos"
    )

    # Seguimiento (último cambio; la hoja de vida está en CompromisoActaHistorial)
    estado = models.CharField(max_length=15, choices=EstadoCompromiso.choices, default=EstadoCompromiso.PENDIENTE)
    detalle_actualizacion = models.TextField(null=True, blank=True)
    actualizado_en = models.DateTimeField(null=True, blank=True)
    actualizado_por = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="compromisos_actualizados"
    )

    class Meta:
        ordering = ["fecha_limite", "id"]

    def __str__(self):
        return self.descripcion[:60]

    @property
    def semaforo(self) -> str:
        return clasificar_fecha_limite(self.fecha_limite).value

    @property
    def texto_fecha_limite(self) -> str:
        return texto_estado_fecha_limite(self.fecha_limite)


class CompromisoActaHistorial(models.Model):
    compromiso = models.ForeignKey(CompromisoActa, on_delete=models.CASCADE, related_name="historial")
    estado_anterior = models.CharField(max_length=15, choices=EstadoCompromiso.choices, null=True, blank=True)
    estado_nuevo = models.CharField(max_length=15, choices=EstadoCompromiso.choices)
    detalle = models.TextField(null=True, blank=True)
    creado_en = models.DateTimeField(auto_now_add=True)
    creado_por = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)

    class Meta:
        ordering = ["creado_en", "id"]

    def __str__(self):
        return f"{self.compromiso_id}: {self.estado_anterior} -> {self.estado_nuevo}"


class HistorialActa(models.Model):
    class TipoEvento(models.TextChoices):
        CREACION = "creacion", "Creación"
        EDICION = "edicion", "Edición"
        ENVIO_APROBACION = "envio_aprobacion", "Envío a aprobación"
        APROBACION_PARTICIPANTE = "aprobacion_participante", "Aprobación de integrante"
        APROBACION = "aprobacion", "Acta aprobada"
        ENVIO_CORREO = "envio_correo", "Envío por correo"
        DOCUMENTO = "documento", "Documento adjuntado"

    acta = models.ForeignKey(Acta, on_delete=models.CASCADE, related_name="historial")
    tipo_evento = models.CharField(max_length=30, choices=TipoEvento.choices)
    # Nulo en eventos de integrantes externos (aprueban sin sesión)
    usuario = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    fecha = models.DateTimeField(default=timezone.now)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["fecha", "id"]

    def __str__(self):
        return f"{self.get_tipo_evento_display()} ({self.fecha:%d/%m/%Y %H:%M})"
