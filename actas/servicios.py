"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Reglas de negocio del ciclo de vida de un acta:
                 - creación y edición del borrador (acta, integrantes,
                   aprobaciones pendientes, compromisos e historial en una
                   sola transacción),
                 - envío a aprobación y envío final por correo,
                 - registro de la aprobación de un integrante vía enlace firmado,
                 - seguimiento del estado de los compromisos.
               La última aprobación requerida pasa el acta a 'aprobada' dentro
               de la misma transacción y con la fila del acta bloqueada
               (select_for_update), de modo que ocurre una sola vez.
--------------------------------------------------------------------------------
"""
import logging
import uuid

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from core.authz import puede_gestionar_acta
from . import almacenamiento
from .estados import (
    EstadoActa,
    EstadoAprobacion,
    EstadoCompromiso,
    acepta_aprobaciones,
    validar_transicion_acta,
    validar_transicion_aprobacion,
)
from .exceptions import (
    AccesoDenegado,
    ActaNoDisponible,
    AprobacionYaRegistrada,
    DatoInvalido,
    FirmaInvalida,
    RegistroNoEncontrado,
    TransicionInvalida,
)
from .firmas import TIPO_APROBACION, obtener_firmador
from .models import (
    Acta,
    ActaIntegrante,
    AprobacionActa,
    CompromisoActa,
    CompromisoActaHistorial,
    DocumentoActa,
    HistorialActa,
)

logger = logging.getLogger(__name__)

Evento = HistorialActa.TipoEvento


# ---------------------------
# Búsquedas
# ---------------------------

def uuid_valido(valor):
    try:
        return uuid.UUID(str(valor))
    except (TypeError, ValueError, AttributeError):
        return None


def entero_valido(valor):
    try:
        numero = int(str(valor).strip())
    except (TypeError, ValueError):
        return None
    return numero if numero > 0 else None


def obtener_acta(acta_id, bloquear=False) -> Acta:
    pk = uuid_valido(acta_id)
    if pk is None:
        raise RegistroNoEncontrado(f"id de acta inválido: {acta_id!r}")
    qs = Acta.objects.select_for_update() if bloquear else Acta.objects.all()
    try:
        return qs.get(pk=pk)
    except Acta.DoesNotExist:
        raise RegistroNoEncontrado(f"acta {pk} no existe")


def obtener_integrante(acta: Acta, integrante_id) -> ActaIntegrante:
    pk = entero_valido(integrante_id)
    if pk is None:
        raise RegistroNoEncontrado(f"id de integrante inválido: {integrante_id!r}")
    try:
        return ActaIntegrante.objects.get(pk=pk, acta=acta)
    except ActaIntegrante.DoesNotExist:
        raise RegistroNoEncontrado(f"integrante {pk} no pertenece al acta {acta.pk}")


def registrar_evento(acta, tipo_evento, usuario=None, **metadata) -> HistorialActa:
    return HistorialActa.objects.create(
        acta=acta, tipo_evento=tipo_evento, usuario=usuario, metadata=metadata
    )


def _exigir_gestion(usuario, acta):
    if not puede_gestionar_acta(usuario, acta):
        raise AccesoDenegado(f"usuario {getattr(usuario, 'pk', None)} sobre acta {acta.pk}")


def _transicionar(acta: Acta, nuevo_estado):
    validar_transicion_acta(acta.estado, nuevo_estado)
    acta.estado = nuevo_estado


# ---------------------------
# Creación y edición (borrador)
# ---------------------------

# Reintentos si otra creación simultánea toma el mismo serial
INTENTOS_SERIAL = 5


def _crear_con_serial(**campos) -> Acta:
    """
    Crea el acta con serial = máximo + 1. Si otra transacción se adelantó con
    ese número, la restricción única falla dentro del savepoint y se reintenta
    leyendo de nuevo el máximo (la BD trabaja en READ COMMITTED).
    """
    for intento in range(1, INTENTOS_SERIAL + 1):
        serial = (Acta.objects.aggregate(m=Max("serial"))["m"] or 0) + 1
        try:
            with transaction.atomic():
                return Acta.objects.create(serial=serial, **campos)
        except IntegrityError:
            if intento == INTENTOS_SERIAL:
                raise
            logger.warning("Serial de acta %s ya tomado; reintento %s", serial, intento)


def _crear_integrante(acta, datos: dict) -> ActaIntegrante:
    integrante = ActaIntegrante.objects.create(
        acta=acta,
        nombre=datos["nombre"],
        email=datos["email"],
        cargo=datos.get("cargo") or "",
        tipo=datos.get("tipo") or ActaIntegrante.Tipo.EXTERNO,
        usuario=datos.get("usuario"),
        solicitar_aprobacion=datos.get("solicitar_aprobacion", True),
    )
    # La aprobación se crea junto con el integrante, nunca al aprobar
    AprobacionActa.objects.create(acta=acta, integrante=integrante)
    return integrante


def _crear_integrantes_y_compromisos(acta, integrantes, compromisos) -> int:
    """Devuelve cuántos integrantes distintos (por correo) quedaron."""
    por_email = {}
    for datos_integrante in integrantes:
        integrante = _crear_integrante(acta, datos_integrante)
        por_email.setdefault(integrante.email.lower(), integrante)

    for datos_compromiso in compromisos:
        email = (datos_compromiso.get("responsable_email") or "").lower()
        CompromisoActa.objects.create(
            acta=acta,
            descripcion=datos_compromiso["descripcion"],
            fecha_limite=datos_compromiso.get("fecha_limite"),
            responsable=por_email.get(email),
        )
    return len(por_email)


def _resumen_para_historial(acta: Acta) -> dict:
    return {
        "fecha": acta.fecha.isoformat() if acta.fecha else None,
        "objetivo": acta.objetivo,
        "integrantes": sorted(acta.integrantes.values_list("email", flat=True)),
        "compromisos": acta.compromisos.count(),
    }


@transaction.atomic
def crear_acta(usuario, datos: dict, integrantes=(), compromisos=()) -> Acta:
    """
    Crea un acta en borrador con sus integrantes y compromisos.
    'compromisos' puede indicar su responsable con 'responsable_email'.
    """
    acta = _crear_con_serial(
        fecha=datos["fecha"],
        objetivo=datos["objetivo"],
        contenido=datos.get("contenido") or "",
        creado_por=usuario,
    )
    total = _crear_integrantes_y_compromisos(acta, integrantes, compromisos)

    registrar_evento(acta, Evento.CREACION, usuario, integrantes=total)
    logger.info("Acta #%s creada por %s", acta.serial, usuario)
    return acta


def _exigir_borrador(acta: Acta, mensaje: str):
    if acta.estado != EstadoActa.BORRADOR:
        raise TransicionInvalida(f"acta {acta.pk} en {acta.estado}", mensaje_usuario=mensaje)


@transaction.atomic
def actualizar_acta(acta_id, usuario, datos: dict, integrantes=(), compromisos=()) -> Acta:
    """
    Reemplaza datos, integrantes y compromisos de un borrador. Las
    aprobaciones se vuelven a crear pendientes con cada integrante.
    """
    acta = obtener_acta(acta_id, bloquear=True)
    _exigir_gestion(usuario, acta)
    _exigir_borrador(acta, "Solo se pueden editar actas en estado borrador.")

    antes = _resumen_para_historial(acta)
    acta.fecha = datos["fecha"]
    acta.objetivo = datos["objetivo"]
    acta.contenido = datos.get("contenido") or ""
    acta.save(update_fields=["fecha", "objetivo", "contenido", "actualizado_en"])

    # Se borran en cascada las aprobaciones (todas pendientes en borrador)
    acta.compromisos.all().delete()
    acta.integrantes.all().delete()
    _crear_integrantes_y_compromisos(acta, integrantes, compromisos)

    registrar_evento(acta, Evento.EDICION, usuario, antes=antes, despues=_resumen_para_historial(acta))
    logger.info("Acta #%s editada por %s", acta.serial, usuario)
    return acta


@transaction.atomic
def agregar_integrante(acta_id, usuario, datos: dict) -> ActaIntegrante:
    """Solo mientras el acta está en borrador."""
    acta = obtener_acta(acta_id, bloquear=True)
    _exigir_gestion(usuario, acta)
    _exigir_borrador(acta, "Solo se pueden agregar integrantes a un acta en borrador.")
    integrante = _crear_integrante(acta, datos)
    registrar_evento(acta, Evento.EDICION, usuario, integrante_agregado=integrante.email)
    return integrante


# ---------------------------
# Ciclo de vida (personal)
# ---------------------------

def enviar_a_aprobacion(acta_id, usuario) -> Acta:
    from .tasks import enviar_correos_aprobacion

    with transaction.atomic():
        acta = obtener_acta(acta_id, bloquear=True)
        _exigir_gestion(usuario, acta)
        if not acta.integrantes_requeridos.exists():
            raise TransicionInvalida(
                f"acta {acta.pk} sin integrantes requeridos",
                mensaje_usuario="El acta no tiene integrantes que deban aprobarla.",
            )
        _transicionar(acta, EstadoActa.PENDIENTE_APROBACION)
        acta.save(update_fields=["estado", "actualizado_en"])
        registrar_evento(acta, Evento.ENVIO_APROBACION, usuario)

        acta_pk = str(acta.pk)
        transaction.on_commit(lambda: enviar_correos_aprobacion.delay(acta_pk))

    logger.info("Acta #%s enviada a aprobación", acta.serial)
    return acta


def marcar_enviada(acta_id, usuario) -> Acta:
    """aprobada -> enviada. No se puede deshacer."""
    from .tasks import enviar_acta_final

    with transaction.atomic():
        acta = obtener_acta(acta_id, bloquear=True)
        _exigir_gestion(usuario, acta)
        _transicionar(acta, EstadoActa.ENVIADA)
        acta.save(update_fields=["estado", "actualizado_en"])
        registrar_evento(acta, Evento.ENVIO_CORREO, usuario)

        acta_pk = str(acta.pk)
        transaction.on_commit(lambda: enviar_acta_final.delay(acta_pk))

    logger.info("Acta #%s marcada como enviada", acta.serial)
    return acta


@transaction.atomic
def subir_documento(acta_id, usuario, archivo) -> DocumentoActa:
    acta = obtener_acta(acta_id)
    _exigir_gestion(usuario, acta)
    ruta, mime = almacenamiento.guardar_documento(acta.pk, archivo)
    documento = DocumentoActa.objects.create(
        acta=acta,
        nombre_original=archivo.name,
        archivo=ruta,
        mime_type=mime,
        tamano=archivo.size,
        subido_por=usuario,
    )
    registrar_evento(acta, Evento.DOCUMENTO, usuario, documento=documento.pk)
    return documento


# ---------------------------
# Aprobación de integrantes (enlace firmado)
# ---------------------------

def validar_enlace_aprobacion(acta_id, integrante_id, firma):
    """
    Revisa un enlace de aprobación en el orden: acta, integrante, firma,
    aprobación ya registrada, acta recibiendo aprobaciones.
    Devuelve (acta, integrante, aprobacion).
    """
    acta = obtener_acta(acta_id)
    integrante = obtener_integrante(acta, integrante_id)

    if not obtener_firmador().verificar(TIPO_APROBACION, acta.pk, integrante.pk, None, firma):
        logger.warning("Firma inválida en enlace de aprobación (acta=%s, integrante=%s)", acta.pk, integrante.pk)
        raise FirmaInvalida(f"acta={acta.pk} integrante={integrante.pk}")

    try:
        aprobacion = integrante.aprobacion
    except AprobacionActa.DoesNotExist:
        raise RegistroNoEncontrado(f"integrante {integrante.pk} sin registro de aprobación")

    if aprobacion.estado == EstadoAprobacion.APROBADA:
        raise AprobacionYaRegistrada(aprobacion)
    if not acepta_aprobaciones(acta.estado):
        raise ActaNoDisponible(f"acta {acta.pk} en estado {acta.estado}")
    return acta, integrante, aprobacion


def _evaluar_aprobacion_total(acta: Acta) -> bool:
    """
    Debe llamarse con la fila del acta bloqueada. Pasa el acta a 'aprobada'
    si ya no quedan integrantes requeridos pendientes.
    """
    if acta.estado != EstadoActa.PENDIENTE_APROBACION:
        return False
    quedan_pendientes = (
        AprobacionActa.objects
        .filter(acta=acta, integrante__solicitar_aprobacion=True)
        .exclude(estado=EstadoAprobacion.APROBADA)
        .exists()
    )
    if quedan_pendientes:
        return False

    _transicionar(acta, EstadoActa.APROBADA)
    acta.aprobada_en = timezone.now()
    acta.save(update_fields=["estado", "aprobada_en", "actualizado_en"])
    registrar_evento(acta, Evento.APROBACION)
    logger.info("Acta #%s aprobada por todos los integrantes requeridos", acta.serial)
    return True


def registrar_aprobacion(acta_id, integrante_id, firma, foto=None) -> AprobacionActa:
    """
    Registra la aprobación de un integrante. Con la foto opcional como
    evidencia. Lanza las excepciones de validar_enlace_aprobacion,
    ArchivoNoPermitido si la foto no sirve y AprobacionYaRegistrada si otra
    petición aprobó primero.
    """
    acta, integrante, aprobacion = validar_enlace_aprobacion(acta_id, integrante_id, firma)

    ruta_foto = foto_mime = None
    if foto is not None:
        ruta_foto, foto_mime = almacenamiento.guardar_foto_aprobacion(acta.pk, integrante.pk, foto)

    try:
        with transaction.atomic():
            acta = Acta.objects.select_for_update().get(pk=acta.pk)
            aprobacion = AprobacionActa.objects.select_for_update().get(pk=aprobacion.pk)

            # Otra petición pudo aprobar o cambiar el acta mientras se subía la foto
            if aprobacion.estado == EstadoAprobacion.APROBADA:
                raise AprobacionYaRegistrada(aprobacion)
            if not acepta_aprobaciones(acta.estado):
                raise ActaNoDisponible(f"acta {acta.pk} en estado {acta.estado}")

            validar_transicion_aprobacion(aprobacion.estado, EstadoAprobacion.APROBADA)
            aprobacion.estado = EstadoAprobacion.APROBADA
            aprobacion.aprobado_en = timezone.now()
            aprobacion.ruta_foto = ruta_foto
            aprobacion.foto_mime = foto_mime
            aprobacion.firma_usada = firma
            aprobacion.save()

            registrar_evento(
                acta,
                Evento.APROBACION_PARTICIPANTE,
                integrante=integrante.pk,
                nombre=integrante.nombre,
                con_foto=ruta_foto is not None,
            )
            _evaluar_aprobacion_total(acta)
    except Exception:
        # La foto quedó huérfana (otra petición ganó o falló la BD)
        almacenamiento.eliminar_archivo(ruta_foto)
        raise

    logger.info("Integrante %s aprobó el acta #%s", integrante.pk, acta.serial)
    return aprobacion


# ---------------------------
# Seguimiento de compromisos
# ---------------------------

def actualizar_estado_compromiso(compromiso_id, usuario, estado, detalle="") -> CompromisoActa:
    """
    Cambia el estado de un compromiso y deja la entrada en su hoja de vida.
    Puede hacerlo quien ve el acta (creador, administrador o integrante con cuenta).
    """
    if estado not in EstadoCompromiso.values:
        raise DatoInvalido(f"estado de compromiso {estado!r}", mensaje_usuario="Estado de compromiso inválido.")
    pk = entero_valido(compromiso_id)
    if pk is None:
        raise RegistroNoEncontrado(f"id de compromiso inválido: {compromiso_id!r}")

    with transaction.atomic():
        try:
            compromiso = CompromisoActa.objects.select_for_update().select_related("acta").get(pk=pk)
        except CompromisoActa.DoesNotExist:
            raise RegistroNoEncontrado(f"compromiso {pk} no existe")
        if not Acta.objects.visibles_para(usuario).filter(pk=compromiso.acta_id).exists():
            raise AccesoDenegado(f"usuario {getattr(usuario, 'pk', None)} sobre compromiso {pk}")

        detalle = (detalle or "").strip()
        anterior = compromiso.estado
        compromiso.estado = estado
        compromiso.detalle_actualizacion = detalle or None
        compromiso.actualizado_en = timezone.now()
        compromiso.actualizado_por = usuario
        compromiso.save(update_fields=["estado", "detalle_actualizacion", "actualizado_en", "actualizado_por"])

        CompromisoActaHistorial.objects.create(
            compromiso=compromiso,
            estado_anterior=anterior,
            estado_nuevo=estado,
            detalle=detalle or None,
            creado_por=usuario,
        )

    logger.info("Compromiso %s: %s -> %s", compromiso.pk, anterior, estado)
    return compromiso
