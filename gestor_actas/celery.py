"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Configuración de Celery. Ejecuta en segundo plano el envío de 
               enlaces de aprobación y del PDF final de las actas, para no 
               bloquear la respuesta al usuario.
--------------------------------------------------------------------------------
"""
import os
from celery import Celery

# Celery necesita saber dónde están los settings de Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gestor_actas.settings')

app = Celery('gestor_actas')

# Lee las variables CELERY_* desde settings.py
app.config_from_object('django.conf:settings', namespace='CELERY')

# Registra los tasks.py de cada app instalada
app.autodiscover_tasks()
