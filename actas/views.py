"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Vistas del módulo de actas.
                 - Personal (sesión iniciada): listado, creación, edición del
                   borrador y detalle; acciones de envío, subida de documentos
                   y seguimiento de compromisos (respuestas JSON);
                   descarga de fotos, documentos y PDF.
                 - Integrantes (sin sesión, enlace firmado): página de
                   aprobación y descarga de documentos.
               Las excepciones de dominio se convierten aquí en un código HTTP
               y un mensaje corto; los detalles solo van al log.
--------------------------------------------------------------------------------
"""
import logging
from functools import wraps

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from core.authz import can, puede_gestionar_acta, role_required
from . import descargas, servicios
from .estados import EstadoActa, EstadoCompromiso
from .exceptions import AprobacionYaRegistrada, ArchivoNoPermitido, ErrorActa
from .forms import (
    ActaForm,
    AprobacionParticipanteForm,
    CompromisoEstadoForm,
    CompromisoFormSet,
    DocumentoForm,
    IntegranteFormSet,
    datos_de_formset,
    iniciales_de_acta,
)
from .models import Acta

logger = logging.getLogger(__name__)


# ---------------------------
# Utilidades de respuesta
# ---------------------------

def _registrar_error(request, error: ErrorActa):
    if error.codigo_http >= 500:
        logger.error("[ACTAS] %s en %s: %s", error.__class__.__name__, request.path, error.detalle)
    else:
        logger.info("[ACTAS] %s en %s: %s", error.__class__.__name__, request.path, error.detalle)


def _json_error(request, error: ErrorActa) -> JsonResponse:
    _registrar_error(request, error)
    return JsonResponse({"ok": False, "message": error.mensaje_usuario}, status=error.codigo_http)


def _pagina_error(request, error: ErrorActa):
    _registrar_error(request, error)
    return render(
        request, "actas/enlace_error.html", {"mensaje": error.mensaje_usuario}, status=error.codigo_http
    )


def sesion_requerida_json(viewfunc):
    """Como login_required, pero responde 401 en JSON en vez de redirigir."""
    @wraps(viewfunc)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"ok": False, "message": "Debes iniciar sesión."}, status=401)
        return viewfunc(request, *args, **kwargs)
    return _wrapped


def permiso_json(resource: str, action: str):
    def decorator(viewfunc):
        @wraps(viewfunc)
        def _wrapped(request, *args, **kwargs):
            if not can(request.user, resource, action):
                return JsonResponse({"ok": False, "message": "No tienes permiso para esta acción."}, status=403)
            return viewfunc(request, *args, **kwargs)
        return _wrapped
    return decorator


# ---------------------------
# Vistas de personal (HTML)
# ---------------------------

@login_required
@role_required("actas", "view")
def acta_lista(request):
    actas = Acta.objects.visibles_para(request.user).select_related("creado_por")

    estado = request.GET.get("estado", "")
    if estado in EstadoActa.values:
        actas = actas.filter(estado=estado)
    else:
        estado = ""

    return render(request, "actas/lista.html", {
        "actas": actas,
        "estado": estado,
        "estados": EstadoActa.choices,
    })


@login_required
@role_required("actas", "create")
def acta_nueva(request):
    if request.method == "POST":
        form = ActaForm(request.POST)
        integrantes = IntegranteFormSet(request.POST, prefix="integrantes")
        compromisos = CompromisoFormSet(request.POST, prefix="compromisos")
        if form.is_valid() and integrantes.is_valid() and compromisos.is_valid():
            acta = servicios.crear_acta(
                request.user,
                form.cleaned_data,
                datos_de_formset(integrantes),
                datos_de_formset(compromisos),
            )
            messages.success(request, f"Acta #{acta.serial} creada como borrador.")
            return redirect("actas:detalle", pk=acta.pk)
        messages.error(request, "Revisa los datos del formulario.")
    else:
        form = ActaForm()
        integrantes = IntegranteFormSet(prefix="integrantes")
        compromisos = CompromisoFormSet(prefix="compromisos")

    return render(request, "actas/form.html", {
        "form": form,
        "integrantes": integrantes,
        "compromisos": compromisos,
        "titulo": "Nueva acta",
    })


@login_required
@role_required("actas", "edit")
def acta_editar(request, pk):
    acta = get_object_or_404(Acta.objects.visibles_para(request.user), pk=pk)
    if not puede_gestionar_acta(request.user, acta):
        messages.error(request, "Solo el creador del acta o un administrador puede editarla.")
        return redirect("actas:detalle", pk=acta.pk)
    if acta.estado != EstadoActa.BORRADOR:
        messages.error(request, "Solo se pueden editar actas en estado borrador.")
        return redirect("actas:detalle", pk=acta.pk)

    if request.method == "POST":
        form = ActaForm(request.POST, instance=acta)
        integrantes = IntegranteFormSet(request.POST, prefix="integrantes")
        compromisos = CompromisoFormSet(request.POST, prefix="compromisos")
        if form.is_valid() and integrantes.is_valid() and compromisos.is_valid():
            try:
                servicios.actualizar_acta(
                    acta.pk,
                    request.user,
                    form.cleaned_data,
                    datos_de_formset(integrantes),
                    datos_de_formset(compromisos),
                )
            except ErrorActa as e:
                _registrar_error(request, e)
                messages.error(request, e.mensaje_usuario)
                return redirect("actas:detalle", pk=acta.pk)
            messages.success(request, f"Acta #{acta.serial} actualizada.")
            return redirect("actas:detalle", pk=acta.pk)
        messages.error(request, "Revisa los datos del formulario.")
    else:
        iniciales_integrantes, iniciales_compromisos = iniciales_de_acta(acta)
        form = ActaForm(instance=acta)
        integrantes = IntegranteFormSet(prefix="integrantes", initial=iniciales_integrantes)
        compromisos = CompromisoFormSet(prefix="compromisos", initial=iniciales_compromisos)

    return render(request, "actas/form.html", {
        "form": form,
        "integrantes": integrantes,
        "compromisos": compromisos,
        "titulo": f"Editar acta #{acta.serial}",
        "acta": acta,
    })


@login_required
@role_required("actas", "view")
def acta_detalle(request, pk):
    acta = get_object_or_404(Acta.objects.visibles_para(request.user), pk=pk)
    return render(request, "actas/detalle.html", {
        "acta": acta,
        "integrantes": acta.integrantes.select_related("aprobacion"),
        "compromisos": acta.compromisos.select_related("responsable", "actualizado_por"),
        "documentos": acta.documentos.all(),
        "historial": acta.historial.select_related("usuario"),
        "resumen": acta.resumen_aprobaciones(),
        "puede_gestionar": puede_gestionar_acta(request.user, acta),
        "puede_editar": puede_gestionar_acta(request.user, acta) and acta.estado == EstadoActa.BORRADOR,
        "documento_form": DocumentoForm(),
        "estados_compromiso": EstadoCompromiso.choices,
    })


# ---------------------------
# Acciones de personal (JSON)
# ---------------------------

@require_POST
@sesion_requerida_json
@permiso_json("actas", "send_approval")
def acta_enviar_aprobacion(request, pk):
    try:
        acta = servicios.enviar_a_aprobacion(pk, request.user)
    except ErrorActa as e:
        return _json_error(request, e)
    return JsonResponse({
        "ok": True,
        "message": "Acta enviada a aprobación. Los integrantes recibirán su enlace por correo.",
        "estado": acta.estado,
    })


@require_POST
@sesion_requerida_json
@permiso_json("actas", "send")
def acta_enviar(request, pk):
    try:
        acta = servicios.marcar_enviada(pk, request.user)
    except ErrorActa as e:
        return _json_error(request, e)
    return JsonResponse({
        "ok": True,
        "message": "Acta enviada por correo a los integrantes.",
        "estado": acta.estado,
    })


@require_POST
@sesion_requerida_json
@permiso_json("actas", "upload")
def acta_subir_documento(request, pk):
    form = DocumentoForm(request.POST, request.FILES)
    if not form.is_valid():
        return JsonResponse({"ok": False, "message": "Selecciona un archivo."}, status=400)
    try:
        documento = servicios.subir_documento(pk, request.user, form.cleaned_data["archivo"])
    except ErrorActa as e:
        return _json_error(request, e)
    return JsonResponse({
        "ok": True,
        "message": "Documento adjuntado.",
        "documento": {"id": documento.pk, "nombre": documento.nombre_original},
    })


@require_POST
@sesion_requerida_json
@permiso_json("actas", "follow_up")
def compromiso_actualizar_estado(request, compromiso_id):
    form = CompromisoEstadoForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"ok": False, "message": "Estado de compromiso inválido."}, status=400)
    try:
        compromiso = servicios.actualizar_estado_compromiso(
            compromiso_id, request.user, form.cleaned_data["estado"], form.cleaned_data["detalle"],
        )
    except ErrorActa as e:
        return _json_error(request, e)
    return JsonResponse({
        "ok": True,
        "message": "Estado del compromiso actualizado.",
        "compromiso": {
            "id": compromiso.pk,
            "estado": compromiso.estado,
            "estado_display": compromiso.get_estado_display(),
        },
    })


# ---------------------------
# Descargas de personal
# ---------------------------

@require_GET
@sesion_requerida_json
def foto_aprobacion(request, pk, integrante_id):
    try:
        archivo = descargas.obtener_foto_aprobacion(request.user, pk, integrante_id)
    except ErrorActa as e:
        return _json_error(request, e)
    return archivo.como_respuesta()


@require_GET
@sesion_requerida_json
def documento_acta(request, pk, documento_id):
    try:
        archivo = descargas.obtener_documento(request.user, pk, documento_id)
    except ErrorActa as e:
        return _json_error(request, e)
    return archivo.como_respuesta()


@require_GET
@sesion_requerida_json
def acta_pdf(request, pk):
    try:
        archivo = descargas.obtener_pdf_acta(request.user, pk)
    except ErrorActa as e:
        return _json_error(request, e)
    return archivo.como_respuesta()


# ---------------------------
# Enlaces firmados (integrantes, sin sesión)
# ---------------------------

def _confirmacion(request, aprobacion, ya_registrada):
    return render(request, "actas/aprobacion_confirmada.html", {
        "aprobacion": aprobacion,
        "acta": aprobacion.acta if aprobacion is not None else None,
        "ya_registrada": ya_registrada,
    })


def _formulario_aprobacion(request, form, acta, integrante, status=200):
    return render(request, "actas/aprobar_participante.html", {
        "form": form,
        "acta": acta,
        "integrante": integrante,
        "compromisos": acta.compromisos.select_related("responsable"),
    }, status=status)


@never_cache
@require_http_methods(["GET", "POST"])
def aprobar_participante(request):
    if request.method == "GET":
        acta_id = request.GET.get("acta")
        integrante_id = request.GET.get("integrante")
        firma = request.GET.get("firma", "")
        try:
            acta, integrante, _ = servicios.validar_enlace_aprobacion(acta_id, integrante_id, firma)
        except AprobacionYaRegistrada as e:
            return _confirmacion(request, e.aprobacion, ya_registrada=True)
        except ErrorActa as e:
            return _pagina_error(request, e)

        form = AprobacionParticipanteForm(initial={
            "acta": str(acta.pk), "integrante": integrante.pk, "firma": firma,
        })
        return _formulario_aprobacion(request, form, acta, integrante)

    form = AprobacionParticipanteForm(request.POST, request.FILES)
    if not form.is_valid():
        return render(request, "actas/enlace_error.html",
                      {"mensaje": "El enlace no es válido o el acta no existe."}, status=404)

    datos = form.cleaned_data
    try:
        aprobacion = servicios.registrar_aprobacion(
            datos["acta"], datos["integrante"], datos["firma"], foto=datos.get("foto"),
        )
    except AprobacionYaRegistrada as e:
        return _confirmacion(request, e.aprobacion, ya_registrada=True)
    except ArchivoNoPermitido as e:
        # El enlace ya fue validado: se vuelve a mostrar el formulario con el error
        acta = servicios.obtener_acta(datos["acta"])
        integrante = servicios.obtener_integrante(acta, datos["integrante"])
        form.add_error("foto", e.mensaje_usuario)
        return _formulario_aprobacion(request, form, acta, integrante, status=400)
    except ErrorActa as e:
        return _pagina_error(request, e)

    return _confirmacion(request, aprobacion, ya_registrada=False)


@never_cache
@require_GET
def descargar_documento_participante(request):
    try:
        archivo = descargas.obtener_documento_participante(
            request.GET.get("acta"),
            request.GET.get("integrante"),
            request.GET.get("doc"),
            request.GET.get("firma", ""),
        )
    except ErrorActa as e:
        return _pagina_error(request, e)
    return archivo.como_respuesta()
