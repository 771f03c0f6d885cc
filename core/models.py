"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:           Define el modelo 'Perfil', que extiende al usuario nativo
                       de Django con el rol dentro de la consultora (administrador
                       o empleado) y el cargo que ocupa. El rol es la única
                       información que usa la matriz de permisos (core.roles).
--------------------------------------------------------------------------------
"""

from django.db import models
from django.contrib.auth import get_user_model

User = get_user_model()


class Perfil(models.Model):
    """
    Extiende la información del usuario estándar de Django.
    Almacena su rol en el sistema y el cargo en la empresa.
    """

    class Roles(models.TextChoices):
        ADMIN    = "admin",    "ADMINISTRADOR" # Valor en BD, Etiqueta legible
        EMPLEADO = "empleado", "EMPLEADO"

    # Relación 1 a 1 con el usuario de Django. Si se borra el User, se borra el Perfil.
    usuario = models.OneToOneField(User, on_delete=models.CASCADE, related_name="perfil")

    rol = models.CharField(max_length=20, choices=Roles.choices, default=Roles.EMPLEADO)

    # Cargo dentro de la empresa (ej. "Abogado", "Gestor de cobro").
    cargo = models.CharField(max_length=120, blank=True, default="")

    @property
    def es_admin(self) -> bool:
        return self.rol == self.Roles.ADMIN

    def __str__(self):
        """Representación en texto del perfil (para el admin o consola)."""
        return f"{self.usuario.username} - {self.get_rol_display()}"
