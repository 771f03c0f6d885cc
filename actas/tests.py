"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Pruebas del módulo de actas: firma de enlaces, estados, ciclo de
               vida, edición del borrador, seguimiento de compromisos,
               aprobación de integrantes (incluida la carrera por la
               última aprobación), descargas, vistas, API y tareas de correo.
--------------------------------------------------------------------------------
"""
import datetime
import threading
import uuid
from unittest import mock
from urllib.parse import parse_qs, urlparse

from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError, connection
from django.db.models.query import QuerySet
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings, skipUnlessDBFeature
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.models import Perfil
from actas import almacenamiento, pdf, servicios
from actas.checks import verificar_clave_firma
from actas.estados import (
    EstadoActa,
    EstadoAprobacion,
    EstadoCompromiso,
    validar_transicion_acta,
    validar_transicion_aprobacion,
)
from actas.exceptions import (
    AccesoDenegado,
    ActaNoDisponible,
    AprobacionYaRegistrada,
    ArchivoNoPermitido,
    ConfiguracionFirmaError,
    DatoInvalido,
    FirmaInvalida,
    RegistroNoEncontrado,
    TransicionInvalida,
)
from actas.firmas import (
    TIPO_APROBACION,
    TIPO_DOCUMENTO,
    FirmadorEnlaces,
    comparar_en_tiempo_constante,
    construir_enlace_aprobacion,
    construir_enlace_documento,
    construir_payload,
    obtener_firmador,
)
from actas.models import Acta, AprobacionActa, CompromisoActaHistorial, HistorialActa
from actas.tasks import enviar_acta_final, enviar_correos_aprobacion, notificar_acta_aprobada

JPEG = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF = b"%PDF-1.4\n% documento de prueba\n"

ACTA_INEXISTENTE = "00000000-0000-4000-8000-000000000000"


def foto_jpeg(nombre="evidencia.jpg"):
    return SimpleUploadedFile(nombre, JPEG, content_type="image/jpeg")


def crear_usuario(username, rol=Perfil.Roles.EMPLEADO, **extra):
    user = User.objects.create_user(username=username, password="clave-segura-123", **extra)
    if rol:
        Perfil.objects.create(usuario=user, rol=rol)
    return user


def contar_eventos(acta, tipo):
    return HistorialActa.objects.filter(acta=acta, tipo_evento=tipo).count()


# ==========================================
# 1. PRUEBAS UNITARIAS (firmas y estados)
# ==========================================
class FirmadorEnlacesTest(SimpleTestCase):
    def setUp(self):
        self.firmador = FirmadorEnlaces("clave-unitaria")
        self.acta = str(uuid.uuid4())

    def test_determinista(self):
        """PU-FIR-01: Mismos datos y misma clave -> misma firma hex de 64 caracteres."""
        f1 = self.firmador.firmar(TIPO_APROBACION, self.acta, 7)
        f2 = FirmadorEnlaces("clave-unitaria").firmar(TIPO_APROBACION, self.acta, 7)
        self.assertEqual(f1, f2)
        self.assertEqual(len(f1), 64)
        int(f1, 16)

    def test_payload_canonico(self):
        self.assertEqual(
            construir_payload(TIPO_APROBACION, "abc", 3), "acta:abc:integrante:3"
        )
        self.assertEqual(
            construir_payload(TIPO_DOCUMENTO, "abc", 3, 9), "acta:abc:integrante:3:doc:9"
        )

    def test_separacion_de_tipos(self):
        """PU-FIR-02: Una firma de aprobación no sirve como firma de documento."""
        firma = self.firmador.firmar(TIPO_APROBACION, self.acta, 7)
        self.assertTrue(self.firmador.verificar(TIPO_APROBACION, self.acta, 7, None, firma))
        for doc in (1, 7, 99):
            self.assertFalse(self.firmador.verificar(TIPO_DOCUMENTO, self.acta, 7, doc, firma))

        firma_doc = self.firmador.firmar(TIPO_DOCUMENTO, self.acta, 7, 1)
        self.assertFalse(self.firmador.verificar(TIPO_APROBACION, self.acta, 7, None, firma_doc))

    def test_manipulacion(self):
        """PU-FIR-03: Cambiar cualquier dato o un carácter de la firma la invalida."""
        firma = self.firmador.firmar(TIPO_DOCUMENTO, self.acta, 7, 3)
        alterada = ("0" if firma[0] != "0" else "1") + firma[1:]
        self.assertFalse(self.firmador.verificar(TIPO_DOCUMENTO, self.acta, 7, 3, alterada))
        self.assertFalse(self.firmador.verificar(TIPO_DOCUMENTO, self.acta, 8, 3, firma))
        self.assertFalse(self.firmador.verificar(TIPO_DOCUMENTO, self.acta, 7, 4, firma))
        self.assertFalse(self.firmador.verificar(TIPO_DOCUMENTO, str(uuid.uuid4()), 7, 3, firma))
        self.assertFalse(FirmadorEnlaces("otra-clave").verificar(TIPO_DOCUMENTO, self.acta, 7, 3, firma))

    def test_verificar_nunca_lanza(self):
        firma = self.firmador.firmar(TIPO_APROBACION, self.acta, 7)
        casos = [
            (TIPO_APROBACION, self.acta, 7, None, ""),
            (TIPO_APROBACION, self.acta, 7, None, None),
            (TIPO_APROBACION, self.acta, 7, None, 12345),
            (TIPO_APROBACION, "", 7, None, firma),
            (TIPO_APROBACION, None, 7, None, firma),
            (TIPO_APROBACION, self.acta, "x", None, firma),
            (TIPO_APROBACION, self.acta, -1, None, firma),
            (TIPO_APROBACION, self.acta, 7, 5, firma),
            (TIPO_DOCUMENTO, self.acta, 7, None, firma),
            ("otro", self.acta, 7, None, firma),
        ]
        for caso in casos:
            with self.subTest(caso=caso):
                self.assertFalse(self.firmador.verificar(*caso))

    def test_firmar_rechaza_combinaciones_invalidas(self):
        with self.assertRaises(ValueError):
            self.firmador.firmar(TIPO_DOCUMENTO, self.acta, 7)
        with self.assertRaises(ValueError):
            self.firmador.firmar(TIPO_APROBACION, self.acta, 7, 2)
        with self.assertRaises(ValueError):
            self.firmador.firmar(TIPO_APROBACION, "a:b", 7)

    def test_clave_vacia_es_error_de_configuracion(self):
        for clave in ("", "   ", None):
            with self.subTest(clave=clave):
                with self.assertRaises(ConfiguracionFirmaError):
                    FirmadorEnlaces(clave)
        self.assertTrue(issubclass(ConfiguracionFirmaError, ImproperlyConfigured))

    def test_repr_no_expone_la_clave(self):
        self.assertNotIn("clave-unitaria", repr(self.firmador))

    @override_settings(ACTAS_FIRMA_SECRET="")
    def test_obtener_firmador_sin_clave(self):
        with self.assertRaises(ConfiguracionFirmaError):
            obtener_firmador()


class ComparacionTiempoConstanteTest(SimpleTestCase):
    def test_resultados(self):
        self.assertTrue(comparar_en_tiempo_constante("abc123", "abc123"))
        self.assertFalse(comparar_en_tiempo_constante("abc123", "abc124"))
        self.assertFalse(comparar_en_tiempo_constante("abc", "abcd"))
        self.assertFalse(comparar_en_tiempo_constante("abc", None))
        self.assertTrue(comparar_en_tiempo_constante("", ""))

    def test_recorre_todos_los_caracteres(self):
        """PU-FIR-04: Aunque difiera el primer carácter, se comparan todos."""
        class Contador(str):
            leidos = 0

            def __iter__(self):
                for caracter in str.__iter__(self):
                    type(self).leidos += 1
                    yield caracter

        esperado = "a" * 64
        recibido = Contador("b" + "a" * 63)
        self.assertFalse(comparar_en_tiempo_constante(esperado, recibido))
        self.assertEqual(Contador.leidos, 64)


class ChequeoClaveFirmaTest(SimpleTestCase):
    @override_settings(ACTAS_FIRMA_SECRET="")
    def test_sin_clave_reporta_error(self):
        errores = verificar_clave_firma(None)
        self.assertEqual([e.id for e in errores], ["actas.E001"])

    def test_con_clave_sin_errores(self):
        self.assertEqual(verificar_clave_firma(None), [])


class EstadosTest(SimpleTestCase):
    def test_transiciones_permitidas_del_acta(self):
        validar_transicion_acta(EstadoActa.BORRADOR, EstadoActa.PENDIENTE_APROBACION)
        validar_transicion_acta(EstadoActa.PENDIENTE_APROBACION, EstadoActa.APROBADA)
        validar_transicion_acta(EstadoActa.APROBADA, EstadoActa.ENVIADA)

    def test_sin_saltos_ni_retrocesos(self):
        prohibidas = [
            (EstadoActa.BORRADOR, EstadoActa.APROBADA),
            (EstadoActa.BORRADOR, EstadoActa.ENVIADA),
            (EstadoActa.PENDIENTE_APROBACION, EstadoActa.ENVIADA),
            (EstadoActa.PENDIENTE_APROBACION, EstadoActa.BORRADOR),
            (EstadoActa.APROBADA, EstadoActa.PENDIENTE_APROBACION),
            (EstadoActa.ENVIADA, EstadoActa.APROBADA),
        ]
        for actual, nuevo in prohibidas:
            with self.subTest(actual=actual, nuevo=nuevo):
                with self.assertRaises(TransicionInvalida):
                    validar_transicion_acta(actual, nuevo)

    def test_aprobacion_solo_pendiente_a_aprobada(self):
        validar_transicion_aprobacion(EstadoAprobacion.PENDIENTE, EstadoAprobacion.APROBADA)
        with self.assertRaises(TransicionInvalida):
            validar_transicion_aprobacion(EstadoAprobacion.APROBADA, EstadoAprobacion.PENDIENTE)
        with self.assertRaises(TransicionInvalida):
            validar_transicion_aprobacion(EstadoAprobacion.APROBADA, EstadoAprobacion.APROBADA)


# ==========================================
# 2. PRUEBAS DE SERVICIOS (BD)
# ==========================================
class BaseActaTest(TestCase):
    def setUp(self):
        self.creador = crear_usuario("creador", email="creador@example.com")
        self.otro = crear_usuario("otro")
        self.admin = crear_usuario("jefa", rol=Perfil.Roles.ADMIN)
        self.acta = servicios.crear_acta(
            self.creador,
            {
                "fecha": datetime.date(2024, 6, 1),
                "objetivo": "Revisión de cartera morosa",
                "contenido": "Se revisan los procesos de cobro coactivo.",
            },
            [
                {"nombre": "Ana", "email": "ana@example.com", "cargo": "Abogada"},
                {"nombre": "Beto", "email": "beto@example.com", "tipo": "interno", "usuario": self.otro},
                {"nombre": "Carla", "email": "carla@example.com", "solicitar_aprobacion": False},
            ],
            [
                {"descripcion": "Radicar acuerdo de pago", "fecha_limite": datetime.date(2025, 1, 15),
                 "responsable_email": "ANA@example.com"},
            ],
        )
        self.ana, self.beto, self.carla = list(self.acta.integrantes.order_by("id"))
        self.firmador = obtener_firmador()

    def firma(self, integrante, acta=None):
        return self.firmador.firmar(TIPO_APROBACION, (acta or self.acta).pk, integrante.pk)

    def enviar_a_aprobacion(self):
        with self.captureOnCommitCallbacks(execute=False):
            servicios.enviar_a_aprobacion(self.acta.pk, self.creador)
        self.acta.refresh_from_db()

    def aprobar(self, integrante, foto=None):
        with self.captureOnCommitCallbacks(execute=False):
            return servicios.registrar_aprobacion(
                str(self.acta.pk), str(integrante.pk), self.firma(integrante), foto=foto
            )


class CrearActaTest(BaseActaTest):
    def test_crea_borrador_con_aprobaciones_pendientes(self):
        self.assertEqual(self.acta.estado, EstadoActa.BORRADOR)
        self.assertEqual(self.acta.serial, 1)
        self.assertEqual(AprobacionActa.objects.filter(acta=self.acta).count(), 3)
        self.assertFalse(
            AprobacionActa.objects.filter(acta=self.acta).exclude(estado=EstadoAprobacion.PENDIENTE).exists()
        )
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.CREACION), 1)

    def test_compromiso_con_responsable_por_correo(self):
        compromiso = self.acta.compromisos.get()
        self.assertEqual(compromiso.responsable, self.ana)
        # Fecha límite ya vencida
        self.assertEqual(compromiso.semaforo, "rojo")

    def test_serial_correlativo(self):
        segunda = servicios.crear_acta(
            self.creador, {"fecha": datetime.date(2024, 7, 1), "objetivo": "Otra"}, [], []
        )
        self.assertEqual(segunda.serial, 2)

    def test_serial_tomado_por_otra_creacion_se_reintenta(self):
        """CP-ACT-008: Si el máximo leído ya está ocupado, se reintenta con el siguiente."""
        aggregate_real = QuerySet.aggregate
        llamadas = []

        def aggregate_desfasado(queryset, *args, **kwargs):
            llamadas.append(1)
            # La primera lectura no ve el acta ya creada (serial 1)
            if len(llamadas) == 1:
                return {"m": 0}
            return aggregate_real(queryset, *args, **kwargs)

        with mock.patch.object(QuerySet, "aggregate", autospec=True, side_effect=aggregate_desfasado):
            with self.assertLogs("actas.servicios", level="WARNING") as logs:
                segunda = servicios.crear_acta(
                    self.creador, {"fecha": datetime.date(2024, 7, 1), "objetivo": "Otra"}, [], []
                )
        self.assertEqual(segunda.serial, 2)
        self.assertEqual(len(llamadas), 2)
        self.assertIn("reintento 1", logs.output[0])
        self.assertEqual(Acta.objects.count(), 2)

    def test_serial_sin_reintentos_disponibles(self):
        with mock.patch.object(QuerySet, "aggregate", autospec=True, return_value={"m": 0}):
            with self.assertLogs("actas.servicios", level="WARNING"):
                with self.assertRaises(IntegrityError):
                    servicios.crear_acta(
                        self.creador, {"fecha": datetime.date(2024, 7, 1), "objetivo": "Otra"}, [], []
                    )
        self.assertEqual(Acta.objects.count(), 1)

    def test_agregar_integrante_solo_en_borrador(self):
        nuevo = servicios.agregar_integrante(
            self.acta.pk, self.creador, {"nombre": "Dani", "email": "dani@example.com"}
        )
        self.assertEqual(nuevo.aprobacion.estado, EstadoAprobacion.PENDIENTE)
        evento = HistorialActa.objects.get(acta=self.acta, tipo_evento=HistorialActa.TipoEvento.EDICION)
        self.assertEqual(evento.metadata, {"integrante_agregado": "dani@example.com"})

        self.enviar_a_aprobacion()
        with self.assertRaises(TransicionInvalida):
            servicios.agregar_integrante(
                self.acta.pk, self.creador, {"nombre": "Eva", "email": "eva@example.com"}
            )


class CicloVidaActaTest(BaseActaTest):
    def test_enviar_a_aprobacion(self):
        self.enviar_a_aprobacion()
        self.assertEqual(self.acta.estado, EstadoActa.PENDIENTE_APROBACION)
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.ENVIO_APROBACION), 1)

    @mock.patch("actas.tasks.enviar_correo_via_webhook", return_value=True)
    def test_enviar_a_aprobacion_envia_enlaces_firmados(self, webhook):
        with self.captureOnCommitCallbacks(execute=True):
            servicios.enviar_a_aprobacion(self.acta.pk, self.creador)

        destinos = sorted(c.kwargs["to_email"] for c in webhook.call_args_list)
        self.assertEqual(destinos, ["ana@example.com", "beto@example.com"])  # Carla no debe aprobar
        html = webhook.call_args_list[0].kwargs["html_body"]
        self.assertIn(construir_enlace_aprobacion(self.ana).replace("&", "&amp;"), html)

    def test_no_se_envia_dos_veces(self):
        self.enviar_a_aprobacion()
        with self.assertRaises(TransicionInvalida):
            servicios.enviar_a_aprobacion(self.acta.pk, self.creador)

    def test_requiere_integrantes_que_aprueben(self):
        acta = servicios.crear_acta(
            self.creador,
            {"fecha": datetime.date(2024, 7, 1), "objetivo": "Sin aprobadores"},
            [{"nombre": "Obs", "email": "obs@example.com", "solicitar_aprobacion": False}],
        )
        with self.assertRaises(TransicionInvalida):
            servicios.enviar_a_aprobacion(acta.pk, self.creador)
        acta.refresh_from_db()
        self.assertEqual(acta.estado, EstadoActa.BORRADOR)

    def test_solo_creador_o_admin(self):
        with self.assertRaises(AccesoDenegado):
            servicios.enviar_a_aprobacion(self.acta.pk, self.otro)
        with self.captureOnCommitCallbacks(execute=False):
            servicios.enviar_a_aprobacion(self.acta.pk, self.admin)

    def test_marcar_enviada_exige_aprobada(self):
        self.enviar_a_aprobacion()
        with self.assertRaises(TransicionInvalida):
            servicios.marcar_enviada(self.acta.pk, self.creador)

        self.aprobar(self.ana)
        self.aprobar(self.beto)
        with self.captureOnCommitCallbacks(execute=False):
            acta = servicios.marcar_enviada(self.acta.pk, self.creador)
        self.assertEqual(acta.estado, EstadoActa.ENVIADA)
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.ENVIO_CORREO), 1)

        # Irreversible y sin reenvíos
        with self.assertRaises(TransicionInvalida):
            servicios.marcar_enviada(self.acta.pk, self.creador)

    def test_acta_inexistente(self):
        with self.assertRaises(RegistroNoEncontrado):
            servicios.enviar_a_aprobacion(ACTA_INEXISTENTE, self.creador)
        with self.assertRaises(RegistroNoEncontrado):
            servicios.enviar_a_aprobacion("no-es-uuid", self.creador)


class RegistrarAprobacionTest(BaseActaTest):
    def test_borrador_no_acepta_aprobaciones(self):
        with self.assertRaises(ActaNoDisponible):
            self.aprobar(self.ana)
        self.assertTrue(issubclass(ActaNoDisponible, RegistroNoEncontrado))

    def test_precondiciones(self):
        self.enviar_a_aprobacion()
        with self.assertRaises(RegistroNoEncontrado):
            servicios.registrar_aprobacion(ACTA_INEXISTENTE, self.ana.pk, self.firma(self.ana))
        with self.assertRaises(RegistroNoEncontrado):
            servicios.registrar_aprobacion(self.acta.pk, 999999, self.firma(self.ana))
        with self.assertRaises(FirmaInvalida):
            servicios.registrar_aprobacion(self.acta.pk, self.ana.pk, "0" * 64)
        # La firma de Beto no sirve para Ana
        with self.assertRaises(FirmaInvalida):
            servicios.registrar_aprobacion(self.acta.pk, self.ana.pk, self.firma(self.beto))

    def test_integrante_de_otra_acta(self):
        otra = servicios.crear_acta(
            self.creador, {"fecha": datetime.date(2024, 7, 1), "objetivo": "Otra"},
            [{"nombre": "Zoe", "email": "zoe@example.com"}],
        )
        zoe = otra.integrantes.get()
        self.enviar_a_aprobacion()
        with self.assertRaises(RegistroNoEncontrado):
            servicios.registrar_aprobacion(self.acta.pk, zoe.pk, self.firma(zoe, acta=self.acta))

    def test_aprobacion_idempotente(self):
        """CP-ACT-001: La segunda aprobación no modifica el registro."""
        self.enviar_a_aprobacion()
        aprobacion = self.aprobar(self.ana)
        self.assertEqual(aprobacion.estado, EstadoAprobacion.APROBADA)
        self.assertIsNotNone(aprobacion.aprobado_en)
        self.assertEqual(aprobacion.firma_usada, self.firma(self.ana))

        with self.assertRaises(AprobacionYaRegistrada) as ctx:
            self.aprobar(self.ana, foto=foto_jpeg())
        self.assertEqual(ctx.exception.aprobacion.pk, aprobacion.pk)

        aprobacion.refresh_from_db()
        self.assertIsNone(aprobacion.ruta_foto)
        self.assertEqual(
            contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION_PARTICIPANTE), 1
        )

    def test_aprobacion_total_una_sola_vez(self):
        """CP-ACT-002: El acta pasa a aprobada con la última aprobación requerida."""
        self.enviar_a_aprobacion()
        self.aprobar(self.beto)
        self.acta.refresh_from_db()
        self.assertEqual(self.acta.estado, EstadoActa.PENDIENTE_APROBACION)
        self.assertIsNone(self.acta.aprobada_en)

        self.aprobar(self.ana)
        self.acta.refresh_from_db()
        # Carla no es requerida y sigue pendiente
        self.assertEqual(self.acta.estado, EstadoActa.APROBADA)
        self.assertIsNotNone(self.acta.aprobada_en)
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION), 1)

        # Ya no se reciben aprobaciones
        with self.assertRaises(ActaNoDisponible):
            self.aprobar(self.carla)
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION), 1)

    def test_foto_de_evidencia(self):
        self.enviar_a_aprobacion()
        aprobacion = self.aprobar(self.ana, foto=foto_jpeg())
        prefijo = f"actas/{self.acta.pk}/aprobaciones/{self.ana.pk}/"
        self.assertTrue(aprobacion.ruta_foto.startswith(prefijo))
        self.assertTrue(aprobacion.ruta_foto.endswith(".jpg"))
        self.assertEqual(aprobacion.foto_mime, "image/jpeg")
        with default_storage.open(aprobacion.ruta_foto, "rb") as f:
            self.assertEqual(f.read(), JPEG)

    def test_foto_invalida_no_registra_nada(self):
        self.enviar_a_aprobacion()
        invalidas = [
            SimpleUploadedFile("a.gif", b"GIF89a" + b"\x00" * 20, content_type="image/gif"),
            SimpleUploadedFile("a.jpg", PNG, content_type="image/jpeg"),  # contenido PNG
            SimpleUploadedFile("a.png", b"", content_type="image/png"),
        ]
        for foto in invalidas:
            with self.subTest(foto=foto.name):
                with self.assertRaises(ArchivoNoPermitido):
                    self.aprobar(self.ana, foto=foto)
        self.ana.aprobacion.refresh_from_db()
        self.assertEqual(self.ana.aprobacion.estado, EstadoAprobacion.PENDIENTE)

    @override_settings(ACTAS_MAX_TAMANO_ARCHIVO=16)
    def test_foto_demasiado_grande(self):
        self.enviar_a_aprobacion()
        with self.assertRaises(ArchivoNoPermitido):
            self.aprobar(self.ana, foto=foto_jpeg())

    def test_foto_huerfana_se_elimina_si_otro_aprobo_primero(self):
        """CP-ACT-003: Si otra petición gana mientras se sube la foto, la foto se borra."""
        self.enviar_a_aprobacion()
        guardar_real = almacenamiento.guardar_foto_aprobacion
        rutas = []

        def guardar_y_perder(acta_id, integrante_id, archivo):
            ruta, mime = guardar_real(acta_id, integrante_id, archivo)
            rutas.append(ruta)
            AprobacionActa.objects.filter(integrante_id=integrante_id).update(
                estado=EstadoAprobacion.APROBADA, aprobado_en=timezone.now()
            )
            return ruta, mime

        with mock.patch("actas.almacenamiento.guardar_foto_aprobacion", side_effect=guardar_y_perder):
            with self.assertRaises(AprobacionYaRegistrada):
                self.aprobar(self.ana, foto=foto_jpeg())

        self.assertEqual(len(rutas), 1)
        self.assertFalse(default_storage.exists(rutas[0]))
        self.assertEqual(
            contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION_PARTICIPANTE), 0
        )

    @mock.patch("actas.tasks.enviar_correo_via_webhook", return_value=True)
    def test_aviso_al_creador_cuando_queda_aprobada(self, webhook):
        self.enviar_a_aprobacion()
        self.aprobar(self.ana)
        with self.captureOnCommitCallbacks(execute=True):
            servicios.registrar_aprobacion(self.acta.pk, self.beto.pk, self.firma(self.beto))
        destinos = [c.kwargs["to_email"] for c in webhook.call_args_list]
        self.assertEqual(destinos, ["creador@example.com"])


class EdicionActaTest(BaseActaTest):
    datos = {"fecha": datetime.date(2024, 6, 3), "objetivo": "Revisión de cartera (corregida)", "contenido": "Texto nuevo"}

    def test_editar_borrador(self):
        """CP-ACT-009: Editar un borrador reemplaza integrantes y compromisos."""
        aprobaciones_antes = set(AprobacionActa.objects.filter(acta=self.acta).values_list("pk", flat=True))
        acta = servicios.actualizar_acta(
            self.acta.pk, self.creador, self.datos,
            [
                {"nombre": "Ana", "email": "ana@example.com", "cargo": "Abogada"},
                {"nombre": "Dani", "email": "dani@example.com"},
            ],
            [{"descripcion": "Llamar al deudor", "responsable_email": "dani@example.com"}],
        )
        acta.refresh_from_db()
        self.assertEqual(acta.objetivo, "Revisión de cartera (corregida)")
        self.assertEqual(acta.fecha, datetime.date(2024, 6, 3))
        self.assertEqual(acta.estado, EstadoActa.BORRADOR)
        self.assertEqual(acta.serial, self.acta.serial)
        self.assertEqual(
            sorted(acta.integrantes.values_list("email", flat=True)), ["ana@example.com", "dani@example.com"]
        )
        self.assertEqual(acta.compromisos.get().responsable.email, "dani@example.com")

        # Cada integrante vuelve a nacer con su aprobación pendiente
        aprobaciones = AprobacionActa.objects.filter(acta=acta)
        self.assertEqual(aprobaciones.count(), 2)
        self.assertFalse(aprobaciones.exclude(estado=EstadoAprobacion.PENDIENTE).exists())
        self.assertFalse(aprobaciones_antes & set(aprobaciones.values_list("pk", flat=True)))

        evento = HistorialActa.objects.get(acta=acta, tipo_evento=HistorialActa.TipoEvento.EDICION)
        self.assertEqual(evento.usuario, self.creador)
        self.assertEqual(evento.metadata["antes"]["objetivo"], "Revisión de cartera morosa")
        self.assertEqual(evento.metadata["despues"]["fecha"], "2024-06-03")
        self.assertEqual(evento.metadata["despues"]["compromisos"], 1)

    def test_solo_creador_o_admin(self):
        with self.assertRaises(AccesoDenegado):
            servicios.actualizar_acta(self.acta.pk, self.otro, self.datos)
        servicios.actualizar_acta(self.acta.pk, self.admin, self.datos)
        self.acta.refresh_from_db()
        self.assertEqual(self.acta.objetivo, "Revisión de cartera (corregida)")

    def test_solo_en_borrador(self):
        self.enviar_a_aprobacion()
        with self.assertRaises(TransicionInvalida) as ctx:
            servicios.actualizar_acta(self.acta.pk, self.creador, self.datos)
        self.assertEqual(ctx.exception.mensaje_usuario, "Solo se pueden editar actas en estado borrador.")
        self.acta.refresh_from_db()
        self.assertEqual(self.acta.objetivo, "Revisión de cartera morosa")
        self.assertEqual(self.acta.integrantes.count(), 3)

    def test_acta_inexistente(self):
        with self.assertRaises(RegistroNoEncontrado):
            servicios.actualizar_acta(ACTA_INEXISTENTE, self.creador, self.datos)


class SeguimientoCompromisoTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        self.compromiso = self.acta.compromisos.get()

    def test_estado_inicial_pendiente(self):
        self.assertEqual(self.compromiso.estado, EstadoCompromiso.PENDIENTE)
        self.assertFalse(self.compromiso.historial.exists())

    def test_actualizar_estado_deja_historial(self):
        """CP-ACT-010: Cada cambio de estado queda en la hoja de vida del compromiso."""
        servicios.actualizar_estado_compromiso(
            self.compromiso.pk, self.otro, EstadoCompromiso.CUMPLIDO, "  Acuerdo radicado  "
        )
        servicios.actualizar_estado_compromiso(self.compromiso.pk, self.creador, EstadoCompromiso.NO_CUMPLIDO)

        self.compromiso.refresh_from_db()
        self.assertEqual(self.compromiso.estado, EstadoCompromiso.NO_CUMPLIDO)
        self.assertIsNone(self.compromiso.detalle_actualizacion)
        self.assertEqual(self.compromiso.actualizado_por, self.creador)
        self.assertIsNotNone(self.compromiso.actualizado_en)

        historial = list(self.compromiso.historial.all())
        self.assertEqual(
            [(h.estado_anterior, h.estado_nuevo) for h in historial],
            [(EstadoCompromiso.PENDIENTE, EstadoCompromiso.CUMPLIDO),
             (EstadoCompromiso.CUMPLIDO, EstadoCompromiso.NO_CUMPLIDO)],
        )
        self.assertEqual(historial[0].detalle, "Acuerdo radicado")
        self.assertEqual(historial[0].creado_por, self.otro)

    def test_en_cualquier_estado_del_acta(self):
        self.enviar_a_aprobacion()
        compromiso = servicios.actualizar_estado_compromiso(
            str(self.compromiso.pk), self.creador, EstadoCompromiso.CUMPLIDO
        )
        self.assertEqual(compromiso.estado, EstadoCompromiso.CUMPLIDO)

    def test_errores(self):
        extrano = crear_usuario("extrano")
        with self.assertRaises(AccesoDenegado):
            servicios.actualizar_estado_compromiso(self.compromiso.pk, extrano, EstadoCompromiso.CUMPLIDO)
        with self.assertRaises(DatoInvalido):
            servicios.actualizar_estado_compromiso(self.compromiso.pk, self.creador, "archivado")
        for compromiso_id in ("abc", 999999):
            with self.subTest(compromiso_id=compromiso_id):
                with self.assertRaises(RegistroNoEncontrado):
                    servicios.actualizar_estado_compromiso(compromiso_id, self.creador, EstadoCompromiso.CUMPLIDO)

        self.compromiso.refresh_from_db()
        self.assertEqual(self.compromiso.estado, EstadoCompromiso.PENDIENTE)
        self.assertEqual(CompromisoActaHistorial.objects.count(), 0)


# ==========================================
# 3. PRUEBAS DE VISTAS PÚBLICAS (enlaces firmados)
# ==========================================
class AprobarParticipanteVistaTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        self.url = reverse("actas:aprobar_participante")

    def params(self, integrante, firma=None):
        return {
            "acta": str(self.acta.pk),
            "integrante": integrante.pk,
            "firma": firma if firma is not None else self.firma(integrante),
        }

    def test_get_muestra_formulario(self):
        self.enviar_a_aprobacion()
        response = self.client.get(self.url, self.params(self.ana))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Revisión de cartera morosa")
        self.assertContains(response, 'name="foto"')

    def test_enlace_invalido_responde_404(self):
        self.enviar_a_aprobacion()
        for params in (
            self.params(self.ana, firma="f" * 64),
            self.params(self.ana, firma=""),
            {"acta": ACTA_INEXISTENTE, "integrante": self.ana.pk, "firma": self.firma(self.ana)},
            {},
        ):
            with self.subTest(params=params):
                response = self.client.get(self.url, params)
                self.assertEqual(response.status_code, 404)
                self.assertContains(response, "El enlace no es válido", status_code=404)

    def test_acta_en_borrador_responde_404(self):
        response = self.client.get(self.url, self.params(self.ana))
        self.assertEqual(response.status_code, 404)

    def test_aprobar_con_foto_y_revisitar(self):
        self.enviar_a_aprobacion()
        datos = dict(self.params(self.ana), foto=foto_jpeg())
        with self.captureOnCommitCallbacks(execute=False):
            response = self.client.post(self.url, datos)
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Aprobación registrada")

        ruta = AprobacionActa.objects.get(integrante=self.ana).ruta_foto
        self.assertIsNotNone(ruta)

        # Revisitar el enlace muestra la confirmación
        response = self.client.get(self.url, self.params(self.ana))
        self.assertContains(response, "Ya aprobaste esta acta")

        # Reenviar el formulario no guarda otra foto
        response = self.client.post(self.url, dict(self.params(self.ana), foto=foto_jpeg()))
        self.assertContains(response, "Ya aprobaste esta acta")
        self.assertEqual(AprobacionActa.objects.get(integrante=self.ana).ruta_foto, ruta)

    def test_foto_no_permitida_vuelve_al_formulario(self):
        self.enviar_a_aprobacion()
        gif = SimpleUploadedFile("a.gif", b"GIF89a" + b"\x00" * 20, content_type="image/gif")
        response = self.client.post(self.url, dict(self.params(self.ana), foto=gif))
        self.assertEqual(response.status_code, 400)
        self.assertContains(response, "JPG, PNG o WEBP", status_code=400)
        self.assertEqual(
            AprobacionActa.objects.get(integrante=self.ana).estado, EstadoAprobacion.PENDIENTE
        )

    def test_foto_vacia_vuelve_al_formulario(self):
        """CP-ACT-011: Una foto de 0 bytes no invalida el enlace: se muestra el error."""
        self.enviar_a_aprobacion()
        vacia = SimpleUploadedFile("a.jpg", b"", content_type="image/jpeg")
        response = self.client.post(self.url, dict(self.params(self.ana), foto=vacia))
        self.assertEqual(response.status_code, 400)
        self.assertContains(response, "El archivo está vacío.", status_code=400)
        self.assertContains(response, 'name="foto"', status_code=400)
        self.assertEqual(
            AprobacionActa.objects.get(integrante=self.ana).estado, EstadoAprobacion.PENDIENTE
        )

        # El mismo enlace sigue sirviendo sin foto
        with self.captureOnCommitCallbacks(execute=False):
            response = self.client.post(self.url, self.params(self.ana))
        self.assertContains(response, "Aprobación registrada")

    def test_post_con_firma_manipulada(self):
        self.enviar_a_aprobacion()
        response = self.client.post(self.url, self.params(self.ana, firma=self.firma(self.beto)))
        self.assertEqual(response.status_code, 404)


class DescargaParticipanteVistaTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        archivo = SimpleUploadedFile("Informe final.pdf", PDF, content_type="application/pdf")
        self.documento = servicios.subir_documento(self.acta.pk, self.creador, archivo)

    def test_descarga_con_enlace_firmado(self):
        """CP-ACT-004: El integrante descarga sin sesión; no depende del estado del acta."""
        enlace = construir_enlace_documento(self.ana, self.documento)
        partes = urlparse(enlace)
        self.assertEqual(partes.path, reverse("actas:descargar_documento_participante"))

        response = self.client.get(partes.path, {k: v[0] for k, v in parse_qs(partes.query).items()})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, PDF)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertEqual(response["Content-Disposition"], 'attachment; filename="Informe final.pdf"')

    def test_firmas_incorrectas(self):
        url = reverse("actas:descargar_documento_participante")
        base = {"acta": str(self.acta.pk), "integrante": self.ana.pk, "doc": self.documento.pk}
        firma_doc_beto = self.firmador.firmar(TIPO_DOCUMENTO, self.acta.pk, self.beto.pk, self.documento.pk)
        for firma in (self.firma(self.ana), firma_doc_beto, "", "x"):
            with self.subTest(firma=firma):
                response = self.client.get(url, dict(base, firma=firma))
                self.assertEqual(response.status_code, 404)

    def test_documento_de_otra_acta(self):
        url = reverse("actas:descargar_documento_participante")
        response = self.client.get(url, {
            "acta": str(self.acta.pk), "integrante": self.ana.pk, "doc": 999999,
            "firma": self.firmador.firmar(TIPO_DOCUMENTO, self.acta.pk, self.ana.pk, 999999),
        })
        self.assertEqual(response.status_code, 404)


# ==========================================
# 4. PRUEBAS DE VISTAS DE PERSONAL
# ==========================================
class PdfActaCacheTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        cache.clear()

    def test_segunda_generacion_sale_de_cache(self):
        with mock.patch("actas.pdf.renderizar_documento", wraps=pdf.renderizar_documento) as render:
            primero = pdf.generar_pdf_acta(self.acta)
            segundo = pdf.generar_pdf_acta(self.acta)
        self.assertTrue(primero.startswith(b"%PDF"))
        self.assertEqual(segundo, primero)
        self.assertEqual(render.call_count, 1)
        self.assertEqual(cache.get(pdf.clave_cache_pdf(self.acta, pdf.huella_acta(self.acta))), primero)

    def test_cambios_del_acta_generan_otro_pdf(self):
        with mock.patch("actas.pdf.renderizar_documento", return_value=b"%PDF-1") as render:
            pdf.generar_pdf_acta(self.acta)
            huella = pdf.huella_acta(self.acta)

            servicios.actualizar_estado_compromiso(
                self.acta.compromisos.get().pk, self.creador, EstadoCompromiso.CUMPLIDO
            )
            self.assertNotEqual(pdf.huella_acta(self.acta), huella)
            pdf.generar_pdf_acta(self.acta)

            self.enviar_a_aprobacion()
            self.aprobar(self.ana)
            pdf.generar_pdf_acta(self.acta)
        self.assertEqual(render.call_count, 3)

    def test_pdf_fallido_no_se_guarda(self):
        with mock.patch("actas.pdf.renderizar_documento", return_value=b"") as render:
            self.assertEqual(pdf.generar_pdf_acta(self.acta), b"")
            self.assertEqual(pdf.generar_pdf_acta(self.acta), b"")
        self.assertEqual(render.call_count, 2)


class DescargasPersonalTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        archivo = SimpleUploadedFile("anexo.pdf", PDF, content_type="application/pdf")
        self.documento = servicios.subir_documento(self.acta.pk, self.creador, archivo)
        self.url_pdf = reverse("actas:pdf", args=[self.acta.pk])
        self.url_doc = reverse("actas:documento", args=[self.acta.pk, self.documento.pk])

    def test_matriz_de_autorizacion(self):
        """CP-ACT-005: 401 sin sesión, 403 si no es creador ni admin, 404 si no existe."""
        response = self.client.get(self.url_pdf)
        self.assertEqual(response.status_code, 401)

        self.client.force_login(self.otro)
        self.assertEqual(self.client.get(self.url_pdf).status_code, 403)
        self.assertEqual(self.client.get(self.url_doc).status_code, 403)

        self.client.force_login(self.creador)
        self.assertEqual(self.client.get(self.url_doc).status_code, 200)
        self.assertEqual(
            self.client.get(reverse("actas:pdf", args=[ACTA_INEXISTENTE])).status_code, 404
        )

        self.client.force_login(self.admin)
        self.assertEqual(self.client.get(self.url_doc).status_code, 200)

    def test_documento_inline(self):
        self.client.force_login(self.creador)
        response = self.client.get(self.url_doc)
        self.assertEqual(response.content, PDF)
        self.assertEqual(response["Content-Disposition"], 'inline; filename="anexo.pdf"')
        self.assertEqual(response["Content-Length"], str(len(PDF)))

    def test_pdf_del_acta(self):
        self.client.force_login(self.creador)
        response = self.client.get(self.url_pdf)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertEqual(
            response["Content-Disposition"], f'inline; filename="acta-{self.acta.pk}-2024-06-01.pdf"'
        )
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_pdf_vacio_responde_500(self):
        self.client.force_login(self.creador)
        with mock.patch("actas.descargas.generar_pdf_acta", return_value=b""):
            response = self.client.get(self.url_pdf)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["ok"], False)

    def test_archivo_perdido_responde_500_sin_detalles(self):
        default_storage.delete(self.documento.archivo)
        self.client.force_login(self.creador)
        response = self.client.get(self.url_doc)
        self.assertEqual(response.status_code, 500)
        self.assertNotIn(self.documento.archivo, response.content.decode())

    def test_foto_de_aprobacion(self):
        self.enviar_a_aprobacion()
        self.aprobar(self.ana, foto=foto_jpeg())
        self.client.force_login(self.creador)

        response = self.client.get(reverse("actas:foto_aprobacion", args=[self.acta.pk, self.ana.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "image/jpeg")
        self.assertEqual(response["Content-Length"], str(len(JPEG)))
        self.assertEqual(response.content, JPEG)

        # Beto no subió foto
        response = self.client.get(reverse("actas:foto_aprobacion", args=[self.acta.pk, self.beto.pk]))
        self.assertEqual(response.status_code, 404)


class AccionesPersonalTest(BaseActaTest):
    def test_enviar_aprobacion(self):
        url = reverse("actas:enviar_aprobacion", args=[self.acta.pk])
        self.assertEqual(self.client.post(url).status_code, 401)

        self.client.force_login(self.otro)
        self.assertEqual(self.client.post(url).status_code, 403)

        self.client.force_login(self.creador)
        self.assertEqual(self.client.get(url).status_code, 405)
        with self.captureOnCommitCallbacks(execute=False):
            response = self.client.post(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["estado"], EstadoActa.PENDIENTE_APROBACION)

        response = self.client.post(url)
        self.assertEqual(response.status_code, 409)

    def test_usuario_sin_rol(self):
        sin_rol = crear_usuario("sinrol", rol=None)
        self.client.force_login(sin_rol)
        response = self.client.post(reverse("actas:enviar_aprobacion", args=[self.acta.pk]))
        self.assertEqual(response.status_code, 403)

    def test_enviar_acta_final(self):
        url = reverse("actas:enviar", args=[self.acta.pk])
        self.client.force_login(self.creador)
        self.assertEqual(self.client.post(url).status_code, 409)

        self.enviar_a_aprobacion()
        self.aprobar(self.ana)
        self.aprobar(self.beto)
        with self.captureOnCommitCallbacks(execute=False):
            response = self.client.post(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["estado"], EstadoActa.ENVIADA)

    def test_subir_documento(self):
        url = reverse("actas:subir_documento", args=[self.acta.pk])
        self.client.force_login(self.creador)

        exe = SimpleUploadedFile("x.exe", b"MZ\x90", content_type="application/x-msdownload")
        self.assertEqual(self.client.post(url, {"archivo": exe}).status_code, 400)
        self.assertEqual(self.client.post(url, {}).status_code, 400)

        csv = SimpleUploadedFile("datos.csv", b"a,b\n1,2\n", content_type="text/csv")
        response = self.client.post(url, {"archivo": csv})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.acta.documentos.get().nombre_original, "datos.csv")

        self.client.force_login(self.otro)
        csv = SimpleUploadedFile("datos.csv", b"a,b\n", content_type="text/csv")
        self.assertEqual(self.client.post(url, {"archivo": csv}).status_code, 403)


class PaginasPersonalTest(BaseActaTest):
    def test_lista_requiere_sesion(self):
        response = self.client.get(reverse("actas:lista"))
        self.assertEqual(response.status_code, 302)

    def test_lista_y_filtro_por_estado(self):
        self.client.force_login(self.creador)
        response = self.client.get(reverse("actas:lista"))
        self.assertContains(response, "Revisión de cartera morosa")
        response = self.client.get(reverse("actas:lista"), {"estado": "enviada"})
        self.assertNotContains(response, "Revisión de cartera morosa")

    def test_detalle_visible_para_creador_e_integrante(self):
        url = reverse("actas:detalle", args=[self.acta.pk])
        self.client.force_login(self.creador)
        response = self.client.get(url)
        self.assertContains(response, "Radicar acuerdo de pago")

        # Beto es integrante interno con cuenta (self.otro)
        self.client.force_login(self.otro)
        self.assertEqual(self.client.get(url).status_code, 200)

        extrano = crear_usuario("extrano")
        self.client.force_login(extrano)
        self.assertEqual(self.client.get(url).status_code, 404)

    def test_crear_acta_desde_formulario(self):
        self.client.force_login(self.creador)
        datos = {
            "fecha": "2024-08-20",
            "objetivo": "Comité de cobro",
            "contenido": "Temas del comité",
            "integrantes-TOTAL_FORMS": "2",
            "integrantes-INITIAL_FORMS": "0",
            "integrantes-0-nombre": "Fer",
            "integrantes-0-email": "fer@example.com",
            "integrantes-0-tipo": "externo",
            "integrantes-0-solicitar_aprobacion": "on",
            "integrantes-1-nombre": "",
            "integrantes-1-email": "",
            "integrantes-1-tipo": "externo",
            "integrantes-1-solicitar_aprobacion": "on",
            "compromisos-TOTAL_FORMS": "1",
            "compromisos-INITIAL_FORMS": "0",
            "compromisos-0-descripcion": "Enviar oficio",
            "compromisos-0-fecha_limite": "2025-01-10",
            "compromisos-0-responsable_email": "fer@example.com",
        }
        response = self.client.post(reverse("actas:nueva"), datos)
        acta = Acta.objects.get(objetivo="Comité de cobro")
        self.assertRedirects(response, reverse("actas:detalle", args=[acta.pk]))
        self.assertEqual(acta.integrantes.count(), 1)
        self.assertEqual(acta.compromisos.get().responsable.email, "fer@example.com")
        self.assertEqual(AprobacionActa.objects.filter(acta=acta).count(), 1)

    def test_detalle_muestra_edicion_y_seguimiento(self):
        url = reverse("actas:detalle", args=[self.acta.pk])
        url_editar = reverse("actas:editar", args=[self.acta.pk])
        url_estado = reverse("actas:compromiso_estado", args=[self.acta.compromisos.get().pk])

        self.client.force_login(self.creador)
        response = self.client.get(url)
        self.assertContains(response, url_editar)
        self.assertContains(response, url_estado)
        self.assertContains(response, "Pendiente")

        # El integrante interno hace seguimiento pero no edita
        self.client.force_login(self.otro)
        response = self.client.get(url)
        self.assertNotContains(response, url_editar)
        self.assertContains(response, url_estado)


class EdicionActaVistaTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        self.url = reverse("actas:editar", args=[self.acta.pk])
        self.url_detalle = reverse("actas:detalle", args=[self.acta.pk])

    def datos_formulario(self, **extra):
        datos = {
            "fecha": "2024-06-02",
            "objetivo": "Revisión de cartera (editada)",
            "contenido": "Contenido corregido",
            "integrantes-TOTAL_FORMS": "1",
            "integrantes-INITIAL_FORMS": "0",
            "integrantes-0-nombre": "Ana",
            "integrantes-0-email": "ana@example.com",
            "integrantes-0-tipo": "externo",
            "integrantes-0-solicitar_aprobacion": "on",
            "compromisos-TOTAL_FORMS": "1",
            "compromisos-INITIAL_FORMS": "0",
            "compromisos-0-descripcion": "Radicar acuerdo de pago",
            "compromisos-0-fecha_limite": "2025-02-01",
            "compromisos-0-responsable_email": "ana@example.com",
        }
        datos.update(extra)
        return datos

    def test_get_precarga_el_borrador(self):
        self.client.force_login(self.creador)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, f"Editar acta #{self.acta.serial}")
        self.assertContains(response, 'value="Revisión de cartera morosa"')
        for email in ("ana@example.com", "beto@example.com", "carla@example.com"):
            self.assertContains(response, f'value="{email}"')
        self.assertContains(response, "Radicar acuerdo de pago")

    def test_post_guarda_y_redirige(self):
        self.client.force_login(self.creador)
        response = self.client.post(self.url, self.datos_formulario())
        self.assertRedirects(response, self.url_detalle)

        self.acta.refresh_from_db()
        self.assertEqual(self.acta.objetivo, "Revisión de cartera (editada)")
        self.assertEqual(list(self.acta.integrantes.values_list("email", flat=True)), ["ana@example.com"])
        self.assertEqual(self.acta.compromisos.get().fecha_limite, datetime.date(2025, 2, 1))
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.EDICION), 1)

    def test_formulario_invalido_no_guarda(self):
        self.client.force_login(self.creador)
        response = self.client.post(self.url, self.datos_formulario(objetivo=""))
        self.assertEqual(response.status_code, 200)
        self.acta.refresh_from_db()
        self.assertEqual(self.acta.objetivo, "Revisión de cartera morosa")

    def test_sin_permiso_o_fuera_de_borrador_redirige(self):
        # Sin sesión
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 302)
        self.assertNotEqual(response["Location"], self.url_detalle)

        # Integrante interno: ve el acta pero no la gestiona
        self.client.force_login(self.otro)
        self.assertRedirects(self.client.get(self.url), self.url_detalle)
        self.assertRedirects(self.client.post(self.url, self.datos_formulario()), self.url_detalle)

        # Quien no ve el acta recibe 404
        self.client.force_login(crear_usuario("extrano"))
        self.assertEqual(self.client.get(self.url).status_code, 404)

        self.enviar_a_aprobacion()
        self.client.force_login(self.creador)
        self.assertRedirects(self.client.get(self.url), self.url_detalle)
        self.assertRedirects(self.client.post(self.url, self.datos_formulario()), self.url_detalle)

        self.acta.refresh_from_db()
        self.assertEqual(self.acta.objetivo, "Revisión de cartera morosa")
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.EDICION), 0)


class SeguimientoCompromisoVistaTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        self.compromiso = self.acta.compromisos.get()
        self.url = reverse("actas:compromiso_estado", args=[self.compromiso.pk])

    def test_actualizar_estado(self):
        self.assertEqual(self.client.post(self.url, {"estado": "cumplido"}).status_code, 401)

        self.client.force_login(self.otro)
        self.assertEqual(self.client.get(self.url).status_code, 405)
        response = self.client.post(self.url, {"estado": "cumplido", "detalle": "Radicado el lunes"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["compromiso"]["estado"], "cumplido")
        self.assertEqual(response.json()["compromiso"]["estado_display"], "Cumplido")

        self.compromiso.refresh_from_db()
        self.assertEqual(self.compromiso.detalle_actualizacion, "Radicado el lunes")
        self.assertEqual(self.compromiso.historial.get().creado_por, self.otro)

    def test_errores(self):
        self.client.force_login(self.creador)
        response = self.client.post(self.url, {"estado": "archivado"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["ok"], False)

        url_inexistente = reverse("actas:compromiso_estado", args=[999999])
        self.assertEqual(self.client.post(url_inexistente, {"estado": "cumplido"}).status_code, 404)

        self.client.force_login(crear_usuario("extrano"))
        self.assertEqual(self.client.post(self.url, {"estado": "cumplido"}).status_code, 403)

        self.client.force_login(crear_usuario("sinrol", rol=None))
        self.assertEqual(self.client.post(self.url, {"estado": "cumplido"}).status_code, 403)

        self.assertFalse(CompromisoActaHistorial.objects.exists())


# ==========================================
# 5. API REST
# ==========================================
class ActaApiTest(BaseActaTest):
    def setUp(self):
        super().setUp()
        self.api = APIClient()
        self.url_lista = reverse("actas:api-actas-list")
        self.url_detalle = reverse("actas:api-actas-detail", args=[self.acta.pk])

    def test_requiere_autenticacion(self):
        response = self.api.get(self.url_lista)
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_lista_filtrada_por_estado(self):
        self.api.force_authenticate(user=self.creador)
        response = self.api.get(self.url_lista, {"estado": "borrador"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

        response = self.api.get(self.url_lista, {"estado": "aprobada"})
        self.assertEqual(response.data["count"], 0)

    def test_detalle_con_semaforo_y_sin_firmas(self):
        self.api.force_authenticate(user=self.creador)
        self.enviar_a_aprobacion()
        self.aprobar(self.ana)
        servicios.actualizar_estado_compromiso(
            self.acta.compromisos.get().pk, self.creador, EstadoCompromiso.CUMPLIDO, "Listo"
        )

        response = self.api.get(self.url_detalle)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        compromiso = response.data["compromisos"][0]
        self.assertIn(compromiso["semaforo"], ("rojo", "amarillo", "verde"))
        self.assertEqual(compromiso["estado"], "cumplido")
        self.assertEqual(compromiso["detalle_actualizacion"], "Listo")
        self.assertEqual(
            [(h["estado_anterior"], h["estado_nuevo"], h["creado_por"]) for h in compromiso["historial"]],
            [("pendiente", "cumplido", "creador")],
        )
        self.assertEqual(response.data["resumen_aprobaciones"], {"total": 2, "aprobadas": 1, "pendientes": 1})
        self.assertNotIn(self.firma(self.ana), response.content.decode())
        self.assertNotIn("firma_usada", response.content.decode())

    def test_acciones(self):
        url = reverse("actas:api-actas-enviar-aprobacion", args=[self.acta.pk])

        self.api.force_authenticate(user=self.otro)
        self.assertEqual(self.api.post(url).status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(user=self.creador)
        with self.captureOnCommitCallbacks(execute=False):
            response = self.api.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["estado"], EstadoActa.PENDIENTE_APROBACION)

        url_enviar = reverse("actas:api-actas-enviar", args=[self.acta.pk])
        self.assertEqual(self.api.post(url_enviar).status_code, status.HTTP_409_CONFLICT)


# ==========================================
# 6. TAREAS DE CORREO
# ==========================================
@mock.patch("actas.tasks.enviar_correo_via_webhook", return_value=True)
class TareasCorreoTest(BaseActaTest):
    def test_enlaces_solo_a_pendientes_requeridos(self, webhook):
        self.enviar_a_aprobacion()
        self.aprobar(self.ana)
        self.assertEqual(enviar_correos_aprobacion(str(self.acta.pk)), 1)
        self.assertEqual(webhook.call_args.kwargs["to_email"], "beto@example.com")

    def test_acta_final_con_pdf_y_enlaces(self, webhook):
        archivo = SimpleUploadedFile("anexo.pdf", PDF, content_type="application/pdf")
        documento = servicios.subir_documento(self.acta.pk, self.creador, archivo)

        self.assertEqual(enviar_acta_final(str(self.acta.pk)), 3)
        llamada = next(c for c in webhook.call_args_list if c.kwargs["to_email"] == "carla@example.com")
        self.assertTrue(llamada.kwargs["attachment_bytes"].startswith(b"%PDF"))
        self.assertEqual(llamada.kwargs["filename"], f"acta-{self.acta.pk}-2024-06-01.pdf")
        enlace = construir_enlace_documento(self.carla, documento).replace("&", "&amp;")
        self.assertIn(enlace, llamada.kwargs["html_body"])

    def test_acta_inexistente(self, webhook):
        self.assertEqual(enviar_correos_aprobacion(ACTA_INEXISTENTE), 0)
        webhook.assert_not_called()

    def test_creador_sin_correo(self, webhook):
        self.creador.email = ""
        self.creador.save()
        self.assertFalse(notificar_acta_aprobada(str(self.acta.pk)))
        webhook.assert_not_called()


# ==========================================
# 7. ESCENARIO COMPLETO
# ==========================================
class EscenarioCompletoTest(TestCase):
    @mock.patch("actas.tasks.enviar_correo_via_webhook", return_value=True)
    def test_flujo_de_aprobacion_y_envio(self, webhook):
        """CP-ACT-006: A y B deben aprobar; B aprueba con foto, luego A; se obtiene el PDF."""
        creador = crear_usuario("gestora", email="gestora@example.com")
        acta = servicios.crear_acta(
            creador,
            {"fecha": datetime.date(2024, 9, 3), "objetivo": "Acuerdo de pago", "contenido": "Texto"},
            [{"nombre": "A", "email": "a@example.com"}, {"nombre": "B", "email": "b@example.com"}],
        )
        a, b = list(acta.integrantes.order_by("id"))
        firmador = obtener_firmador()

        with self.captureOnCommitCallbacks(execute=True):
            servicios.enviar_a_aprobacion(acta.pk, creador)
        self.assertEqual(webhook.call_count, 2)

        url = reverse("actas:aprobar_participante")
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(url, {
                "acta": str(acta.pk), "integrante": b.pk,
                "firma": firmador.firmar(TIPO_APROBACION, acta.pk, b.pk), "foto": foto_jpeg(),
            })
        self.assertEqual(response.status_code, 200)
        acta.refresh_from_db()
        self.assertEqual(acta.estado, EstadoActa.PENDIENTE_APROBACION)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(url, {
                "acta": str(acta.pk), "integrante": a.pk,
                "firma": firmador.firmar(TIPO_APROBACION, acta.pk, a.pk),
            })
        self.assertEqual(response.status_code, 200)
        acta.refresh_from_db()
        self.assertEqual(acta.estado, EstadoActa.APROBADA)
        self.assertEqual(webhook.call_args.kwargs["to_email"], "gestora@example.com")

        self.client.force_login(creador)
        response = self.client.get(reverse("actas:pdf", args=[acta.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")

        webhook.reset_mock()
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse("actas:enviar", args=[acta.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(sorted(c.kwargs["to_email"] for c in webhook.call_args_list),
                         ["a@example.com", "b@example.com"])
        acta.refresh_from_db()
        self.assertEqual(acta.estado, EstadoActa.ENVIADA)


# ==========================================
# 8. CONCURRENCIA
# ==========================================
class AprobacionesIntercaladasTest(BaseActaTest):
    """
    Otra aprobación se registra completa entre la validación del enlace y el
    bloque con las filas bloqueadas. Corre en cualquier motor de BD.
    """

    def setUp(self):
        super().setUp()
        self.enviar_a_aprobacion()

    def aprobar_con_otra_en_medio(self, integrante, otro_integrante):
        validar_real = servicios.validar_enlace_aprobacion
        intercaladas = []

        def validar_e_intercalar(acta_id, integrante_id, firma):
            resultado = validar_real(acta_id, integrante_id, firma)
            if not intercaladas:
                intercaladas.append(otro_integrante.pk)
                self.aprobar(otro_integrante)
            return resultado

        with mock.patch("actas.servicios.validar_enlace_aprobacion", side_effect=validar_e_intercalar):
            try:
                return self.aprobar(integrante)
            finally:
                self.assertEqual(intercaladas, [otro_integrante.pk])

    def test_ultima_aprobacion_intercalada(self):
        """CP-ACT-012: Ambas pasan la validación; el acta se aprueba una sola vez."""
        aprobacion = self.aprobar_con_otra_en_medio(self.ana, self.beto)
        self.assertEqual(aprobacion.estado, EstadoAprobacion.APROBADA)

        self.acta.refresh_from_db()
        self.assertEqual(self.acta.estado, EstadoActa.APROBADA)
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION), 1)
        self.assertEqual(
            contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION_PARTICIPANTE), 2
        )

    def test_mismo_integrante_intercalado(self):
        with self.assertRaises(AprobacionYaRegistrada):
            self.aprobar_con_otra_en_medio(self.ana, self.ana)

        self.assertEqual(
            contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION_PARTICIPANTE), 1
        )
        self.acta.refresh_from_db()
        self.assertEqual(self.acta.estado, EstadoActa.PENDIENTE_APROBACION)


# Hilos reales: requiere SELECT ... FOR UPDATE (p. ej. MySQL con settings_test_mysql)
@skipUnlessDBFeature("has_select_for_update")
class AprobacionConcurrenteTest(TransactionTestCase):
    def setUp(self):
        self.creador = crear_usuario("concurrente")
        self.acta = servicios.crear_acta(
            self.creador,
            {"fecha": datetime.date(2024, 6, 1), "objetivo": "Carrera"},
            [{"nombre": "A", "email": "a@example.com"}, {"nombre": "B", "email": "b@example.com"}],
        )
        servicios.enviar_a_aprobacion(self.acta.pk, self.creador)
        self.firmador = obtener_firmador()

    def _aprobar_en_hilos(self, integrantes):
        resultados = [None] * len(integrantes)
        barrera = threading.Barrier(len(integrantes))

        def aprobar(indice, integrante):
            try:
                barrera.wait()
                servicios.registrar_aprobacion(
                    self.acta.pk, integrante.pk,
                    self.firmador.firmar(TIPO_APROBACION, self.acta.pk, integrante.pk),
                )
                resultados[indice] = "ok"
            except AprobacionYaRegistrada:
                resultados[indice] = "ya_registrada"
            finally:
                connection.close()

        hilos = [threading.Thread(target=aprobar, args=(i, x)) for i, x in enumerate(integrantes)]
        for hilo in hilos:
            hilo.start()
        for hilo in hilos:
            hilo.join()
        return resultados

    def test_ultimas_aprobaciones_simultaneas(self):
        """CP-ACT-007: Dos últimas aprobaciones a la vez aprueban el acta una sola vez."""
        a, b = list(self.acta.integrantes.order_by("id"))
        self.assertEqual(self._aprobar_en_hilos([a, b]), ["ok", "ok"])

        self.acta.refresh_from_db()
        self.assertEqual(self.acta.estado, EstadoActa.APROBADA)
        self.assertEqual(contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION), 1)

    def test_mismo_integrante_dos_veces(self):
        a = self.acta.integrantes.order_by("id").first()
        resultados = self._aprobar_en_hilos([a, a])
        self.assertEqual(sorted(resultados), ["ok", "ya_registrada"])
        self.assertEqual(
            contar_eventos(self.acta, HistorialActa.TipoEvento.APROBACION_PARTICIPANTE), 1
        )
