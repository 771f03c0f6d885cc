"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:           Define la Matriz de Roles y Permisos (RBAC).
                       Centraliza qué roles (Administrador, Empleado) pueden
                       realizar qué acciones sobre las actas. La restricción
                       "solo el creador o un administrador" se verifica aparte
                       en core.authz.puede_gestionar_acta.
--------------------------------------------------------------------------------
"""

from typing import Dict, List

from core.models import Perfil

# Alias para los nombres exactos del enum Perfil.Roles (evita errores de tipeo).
ADMIN    = Perfil.Roles.ADMIN
EMPLEADO = Perfil.Roles.EMPLEADO

TODOS = [ADMIN, EMPLEADO]

# MATRIZ DE PERMISOS
# Estructura: { "Recurso": { "Acción": [Roles permitidos] } }
ROLE_MATRIX: Dict[str, Dict[str, List[str]]] = {
    "actas": {
        "view":          TODOS,   # Ver listado y detalle
        "create":        TODOS,   # Crear acta (queda como borrador)
        "send_approval": TODOS,   # Enviar a aprobación (si es el creador)
        "send":          TODOS,   # Enviar acta final por correo (si es el creador)
        "upload":        TODOS,   # Adjuntar documentos
        "edit":          TODOS,   # Editar un borrador (si es el creador)
        "follow_up":     TODOS,   # Actualizar el estado de los compromisos
    },
}
