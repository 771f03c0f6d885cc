#!/usr/bin/env python
"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Utilidad de línea de comandos de Django para el gestor de actas
               (servidor, migraciones, superusuarios y pruebas).
--------------------------------------------------------------------------------
"""
import os
import sys


def main():
    """Run administrative tasks."""
    # Las pruebas usan su propia configuración salvo que se indique otra
    por_defecto = 'gestor_actas.settings'
    if len(sys.argv) > 1 and sys.argv[1] == 'test':
        por_defecto = 'gestor_actas.settings_test'
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', por_defecto)
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
