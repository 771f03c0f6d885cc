"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:           Contiene la lógica de autorización del sistema (RBAC).
                       Define funciones helper ('can', 'user_role', 'es_admin')
                       para verificar si un usuario tiene permisos para realizar
                       una acción sobre un recurso, basándose en la matriz de
                       roles definida en roles.py. Incluye un decorador para
                       proteger vistas y la regla creador/administrador de actas.
--------------------------------------------------------------------------------
"""

# Importa wraps para conservar nombre y docstring de la vista decorada.
from functools import wraps

# Utilidades de redirección de Django.
from django.shortcuts import redirect
from django.urls import reverse

# Matriz de permisos por recurso y acción.
from core.roles import ROLE_MATRIX
# Modelo Perfil, donde vive el rol del usuario.
from core.models import Perfil


def user_role(user) -> str | None:
    """
    Devuelve el rol del usuario (string de Perfil.Roles) o None.
    Los superusuarios pasan directo por can() y no necesitan Perfil.
    """
    try:
        # Acceso por el related_name 'perfil' del OneToOne.
        perfil = user.perfil
    except (AttributeError, Perfil.DoesNotExist):
        # Usuario anónimo o sin Perfil creado: sin rol.
        return None
    return perfil.rol


def es_admin(user) -> bool:
    """Superusuario o perfil con rol 'admin'."""
    # Sin sesión nunca es administrador.
    if not (user and user.is_authenticated):
        return False
    # El superusuario cuenta como administrador aunque no tenga Perfil.
    if getattr(user, "is_superuser", False):
        return True
    # Resto: depende del rol guardado en el Perfil.
    return user_role(user) == Perfil.Roles.ADMIN


def can(user, resource: str, action: str) -> bool:
    """
    Regla única de autorización:
    - Usuario no autenticado => False
    - Superusuario => True (bypass total)
    - Si no tiene Perfil o rol => False
    - Si está en la matriz ROLE_MATRIX[resource][action] => True
    """
    # 1. Verifica que el usuario exista y tenga sesión.
    if not (user and user.is_authenticated):
        return False

    # 2. Bypass: el superusuario puede hacer TODO en el sistema.
    if getattr(user, "is_superuser", False):
        return True

    # 3. Rol del usuario normal; sin rol no hay permisos.
    rol = user_role(user)
    if not rol:
        return False

    # 4. Busca ROLE_MATRIX -> recurso (ej. 'actas') -> acción (ej. 'send').
    # Lista vacía si el recurso o la acción no existen.
    allowed = ROLE_MATRIX.get(resource, {}).get(action, [])

    # 5. El rol debe estar entre los permitidos.
    return rol in allowed


def puede_gestionar_acta(user, acta) -> bool:
    """El creador del acta o un administrador."""
    # Sin sesión no gestiona nada.
    if not (user and user.is_authenticated):
        return False
    # Administradores gestionan cualquier acta.
    if es_admin(user):
        return True
    # Empleados: solo las actas que crearon.
    return acta.creado_por_id == user.pk


def role_required(resource: str, action: str, *, redirect_name: str = "sin_permiso"):
    """
    Decorador para Vistas Basadas en Funciones (FBVs).
    Verifica permisos antes de ejecutar la vista.
    Redirige a 'sin_permiso' si la verificación falla.
    """
    def decorator(viewfunc):
        @wraps(viewfunc)
        def _wrapped(request, *args, **kwargs):
            # Consulta la matriz con el usuario de la request.
            if can(request.user, resource, action):
                # Con permiso, ejecuta la vista original.
                return viewfunc(request, *args, **kwargs)
            # Sin permiso, redirige a la página de error configurada.
            return redirect(reverse(redirect_name))
        return _wrapped
    return decorator
