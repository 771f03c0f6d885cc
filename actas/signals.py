"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Señales del módulo de actas: avisa al creador (tarea Celery)
               cuando un acta pasa a 'aprobada'.
--------------------------------------------------------------------------------
"""
from django.db import transaction
from django.db.models.signals import pre_save, post_save
from django.dispatch import receiver

from .estados import EstadoActa
from .models import Acta
from .tasks import notificar_acta_aprobada


@receiver(pre_save, sender=Acta) # Captura estado previo
def guardar_estado_anterior_acta(sender, instance, **kwargs):
    instance._estado_anterior = None
    if instance.pk and not instance._state.adding:
        instance._estado_anterior = (
            Acta.objects.filter(pk=instance.pk).values_list("estado", flat=True).first()
        )


@receiver(post_save, sender=Acta) # Dispara aviso si se aprueba
def notificar_aprobacion_acta(sender, instance, created, **kwargs):
    anterior = getattr(instance, "_estado_anterior", None)
    if anterior != EstadoActa.APROBADA and instance.estado == EstadoActa.APROBADA:
        acta_pk = str(instance.pk)
        transaction.on_commit(lambda: notificar_acta_aprobada.delay(acta_pk))
