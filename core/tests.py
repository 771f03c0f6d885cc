"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Pruebas de la app core: semaforización de fechas límite,
               matriz de permisos, chequeo de salud y envío de correos por
               webhook (con requests simulado).
--------------------------------------------------------------------------------
"""
import base64
import datetime
from types import SimpleNamespace
from unittest import mock

import requests
from django.contrib.auth.models import AnonymousUser, User
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from core.authz import can, es_admin, puede_gestionar_acta, user_role
from core.models import Perfil
from core.notificaciones import enviar_correo_via_webhook
from core.semaforo import (
    Semaforo,
    clasificar_fecha_limite,
    dias_restantes,
    texto_estado_fecha_limite,
)

REFERENCIA = datetime.date(2024, 6, 1)


# ==========================================
# 1. PRUEBAS UNITARIAS (Semáforo)
# ==========================================
class SemaforoTest(SimpleTestCase):
    def test_umbrales_con_referencia_fija(self):
        """PU-SEM-01: Clasificación en los bordes de 183 y 365 días."""
        casos = {
            datetime.date(2023, 6, 1): Semaforo.ROJO,      # vencida
            datetime.date(2024, 11, 1): Semaforo.ROJO,     # 153 días
            datetime.date(2024, 12, 15): Semaforo.AMARILLO,  # 197 días
            datetime.date(2025, 6, 1): Semaforo.AMARILLO,  # 365 días
            datetime.date(2025, 6, 2): Semaforo.VERDE,     # 366 días
        }
        for fecha, esperado in casos.items():
            with self.subTest(fecha=fecha):
                self.assertEqual(clasificar_fecha_limite(fecha, REFERENCIA), esperado)

    def test_borde_exacto_183_dias_es_amarillo(self):
        fecha = REFERENCIA + datetime.timedelta(days=183)
        self.assertEqual(clasificar_fecha_limite(fecha, REFERENCIA), Semaforo.AMARILLO)
        self.assertEqual(
            clasificar_fecha_limite(fecha - datetime.timedelta(days=1), REFERENCIA), Semaforo.ROJO
        )

    def test_sin_fecha(self):
        """PU-SEM-02: None, vacío o texto inválido -> sin_fecha."""
        for valor in (None, "", "   ", "no-es-fecha", "2024-02-30", 12345):
            with self.subTest(valor=valor):
                self.assertEqual(clasificar_fecha_limite(valor, REFERENCIA), Semaforo.SIN_FECHA)
                self.assertIsNone(dias_restantes(valor, REFERENCIA))

    def test_acepta_texto_iso(self):
        self.assertEqual(clasificar_fecha_limite("2025-06-02", REFERENCIA), Semaforo.VERDE)
        self.assertEqual(dias_restantes("2024-06-11T08:30:00", REFERENCIA), 10)

    def test_datetime_con_zona_se_lleva_a_fecha_local(self):
        # 2024-06-02 03:00 UTC es todavía 1 de junio en Bogotá (UTC-5)
        instante = datetime.datetime(2024, 6, 2, 3, 0, tzinfo=datetime.timezone.utc)
        self.assertEqual(dias_restantes(instante, REFERENCIA), 0)

    def test_referencia_por_defecto_es_hoy(self):
        hoy = timezone.localdate()
        self.assertEqual(dias_restantes(hoy + datetime.timedelta(days=400)), 400)
        self.assertEqual(clasificar_fecha_limite(hoy), Semaforo.ROJO)

    def test_textos(self):
        """PU-SEM-03: Texto corto según los días restantes."""
        dia = datetime.timedelta(days=1)
        self.assertEqual(texto_estado_fecha_limite(None, REFERENCIA), "Sin fecha límite")
        self.assertEqual(texto_estado_fecha_limite(REFERENCIA - dia, REFERENCIA), "Vencido hace 1 día")
        self.assertEqual(texto_estado_fecha_limite(REFERENCIA - 3 * dia, REFERENCIA), "Vencido hace 3 días")
        self.assertEqual(texto_estado_fecha_limite(REFERENCIA, REFERENCIA), "Vence hoy")
        self.assertEqual(texto_estado_fecha_limite(REFERENCIA + dia, REFERENCIA), "Vence mañana")
        self.assertEqual(texto_estado_fecha_limite(REFERENCIA + 15 * dia, REFERENCIA), "Crítico: vence en 15 días")
        self.assertEqual(texto_estado_fecha_limite(REFERENCIA + 200 * dia, REFERENCIA), "Atención: vence en 200 días")
        self.assertEqual(texto_estado_fecha_limite(REFERENCIA + 500 * dia, REFERENCIA), "Vigente: vence en 500 días")


# ==========================================
# 2. PRUEBAS DE AUTORIZACIÓN
# ==========================================
class AutorizacionTest(TestCase):
    def setUp(self):
        self.empleado = User.objects.create_user(username='empleado', password='clave-segura-123')
        Perfil.objects.create(usuario=self.empleado, rol=Perfil.Roles.EMPLEADO)
        self.admin = User.objects.create_user(username='admin', password='clave-segura-123')
        Perfil.objects.create(usuario=self.admin, rol=Perfil.Roles.ADMIN)
        self.root = User.objects.create_superuser(username='root', password='clave-segura-123')
        self.sin_perfil = User.objects.create_user(username='sinperfil', password='clave-segura-123')

    def test_user_role(self):
        self.assertEqual(user_role(self.empleado), "empleado")
        self.assertIsNone(user_role(self.sin_perfil))

    def test_matriz(self):
        """PA-01: Empleado y administrador crean, editan, envían y hacen seguimiento."""
        for accion in ("view", "create", "edit", "send_approval", "send", "upload", "follow_up"):
            with self.subTest(accion=accion):
                self.assertTrue(can(self.empleado, "actas", accion))
                self.assertTrue(can(self.admin, "actas", accion))
        self.assertFalse(can(self.empleado, "actas", "accion_inexistente"))
        self.assertTrue(can(self.root, "actas", "cualquier_cosa"))
        self.assertFalse(can(self.sin_perfil, "actas", "view"))
        self.assertFalse(can(AnonymousUser(), "actas", "view"))

    def test_es_admin(self):
        self.assertTrue(es_admin(self.admin))
        self.assertTrue(es_admin(self.root))
        self.assertFalse(es_admin(self.empleado))
        self.assertFalse(es_admin(AnonymousUser()))

    def test_creador_o_admin(self):
        """PA-02: Un acta solo la gestiona su creador o un administrador."""
        acta = SimpleNamespace(creado_por_id=self.empleado.pk)
        otro = User.objects.create_user(username='otro', password='clave-segura-123')
        Perfil.objects.create(usuario=otro, rol=Perfil.Roles.EMPLEADO)

        self.assertTrue(puede_gestionar_acta(self.empleado, acta))
        self.assertTrue(puede_gestionar_acta(self.admin, acta))
        self.assertFalse(puede_gestionar_acta(otro, acta))
        self.assertFalse(puede_gestionar_acta(AnonymousUser(), acta))


class VistasCoreTest(TestCase):
    def test_health(self):
        response = self.client.get(reverse("health"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_sin_permiso_responde_403(self):
        response = self.client.get(reverse("sin_permiso"))
        self.assertEqual(response.status_code, 403)


# ==========================================
# 3. CORREO POR WEBHOOK
# ==========================================
@override_settings(APPSCRIPT_WEBHOOK_URL="https://script.example.com/exec", APPSCRIPT_WEBHOOK_SECRET="s3")
class WebhookCorreoTest(SimpleTestCase):
    def _respuesta(self, data):
        resp = mock.Mock()
        resp.content = b"{}"
        resp.json.return_value = data
        resp.raise_for_status.return_value = None
        return resp

    @mock.patch("core.notificaciones.requests.post")
    def test_envio_ok_con_adjunto(self, post):
        post.return_value = self._respuesta({"status": "ok"})
        ok = enviar_correo_via_webhook(
            "a@example.com", "Asunto", "<p>Hola</p>",
            attachment_bytes=b"%PDF-1.4", filename="acta.pdf",
        )
        self.assertTrue(ok)
        payload = post.call_args.kwargs["json"]
        self.assertEqual(payload["to"], "a@example.com")
        self.assertEqual(base64.b64decode(payload["attachment"]), b"%PDF-1.4")
        self.assertEqual(payload["filename"], "acta.pdf")

    @mock.patch("core.notificaciones.requests.post")
    def test_adjunto_vacio_no_se_envia(self, post):
        post.return_value = self._respuesta({"status": "ok"})
        enviar_correo_via_webhook("a@example.com", "x", "y", attachment_bytes=b"", filename="a.pdf")
        self.assertNotIn("attachment", post.call_args.kwargs["json"])

    @mock.patch("core.notificaciones.requests.post")
    def test_respuesta_no_ok(self, post):
        post.return_value = self._respuesta({"status": "error"})
        self.assertFalse(enviar_correo_via_webhook("a@example.com", "x", "y"))

    @mock.patch("core.notificaciones.requests.post", side_effect=requests.ConnectionError("caído"))
    def test_error_de_red(self, post):
        self.assertFalse(enviar_correo_via_webhook("a@example.com", "x", "y"))

    @override_settings(APPSCRIPT_WEBHOOK_URL=None)
    @mock.patch("core.notificaciones.requests.post")
    def test_sin_configuracion_no_llama(self, post):
        self.assertFalse(enviar_correo_via_webhook("a@example.com", "x", "y"))
        post.assert_not_called()
