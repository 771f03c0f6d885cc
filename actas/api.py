"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   API REST de actas (solo lectura, filtrable por estado) con las
               acciones de envío a aprobación y envío final.
--------------------------------------------------------------------------------
"""
from django.db.models import Prefetch
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.authz import can
from . import servicios
from .exceptions import AccesoDenegado, ErrorActa, RegistroNoEncontrado
from .models import Acta, ActaIntegrante
from .serializers import ActaDetalleSerializer, ActaSerializer


class DefaultPagination(PageNumberPagination): # Configuración de paginación por defecto
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


class ActaViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["estado"]
    search_fields = ["objetivo", "contenido"]
    ordering_fields = ["fecha", "serial", "creado_en"]

    def get_queryset(self):
        if not can(self.request.user, "actas", "view"):
            return Acta.objects.none()
        qs = Acta.objects.visibles_para(self.request.user).select_related("creado_por")
        if self.action == "retrieve":
            qs = qs.prefetch_related(
                Prefetch("integrantes", queryset=ActaIntegrante.objects.select_related("aprobacion")),
                "compromisos__responsable",
                "compromisos__historial__creado_por",
                "documentos",
            )
        return qs

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ActaDetalleSerializer
        return ActaSerializer

    def _ejecutar(self, operacion, pk, accion_permiso, mensaje):
        if not can(self.request.user, "actas", accion_permiso):
            raise PermissionDenied("No tienes permiso para esta acción.")
        try:
            acta = operacion(pk, self.request.user)
        except RegistroNoEncontrado:
            raise NotFound("Acta no encontrada.")
        except AccesoDenegado as e:
            raise PermissionDenied(e.mensaje_usuario)
        except ErrorActa as e:
            return Response({"ok": False, "message": e.mensaje_usuario}, status=e.codigo_http)
        return Response({"ok": True, "message": mensaje, "estado": acta.estado}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="enviar-aprobacion")
    def enviar_aprobacion(self, request, pk=None):
        return self._ejecutar(
            servicios.enviar_a_aprobacion, pk, "send_approval", "Acta enviada a aprobación."
        )

    @action(detail=True, methods=["post"], url_path="enviar")
    def enviar(self, request, pk=None):
        return self._ejecutar(servicios.marcar_enviada, pk, "send", "Acta enviada por correo.")
