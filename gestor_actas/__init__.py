"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Inicializador del paquete del proyecto. Configura PyMySQL como 
               driver de MySQL y carga la aplicación Celery para que las tareas 
               de envío de actas queden registradas al arrancar Django.
--------------------------------------------------------------------------------
"""
import pymysql  # Driver MySQL puro Python
pymysql.install_as_MySQLdb()  # Reemplaza MySQLdb (el backend de Django lo espera)
from .celery import app as celery_app  # Instancia Celery del proyecto

__all__ = ('celery_app',)
