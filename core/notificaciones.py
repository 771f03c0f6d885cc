"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Utilidad para enviar correos electrónicos utilizando un Webhook
               de Google Apps Script. Permite enviar correos simples y con un
               adjunto (PDF del acta) codificado en Base64.
--------------------------------------------------------------------------------
"""
import base64
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


def enviar_correo_via_webhook(
    to_email: str,
    subject: str,
    html_body: str,
    text_body: str = "",
    attachment_bytes: bytes | None = None,
    filename: str | None = None,
    content_type: str = "application/pdf",
    bcc: list[str] | None = None,
) -> bool:
    """
    Envía un correo usando el Webhook de Google Apps Script.
    Devuelve True solo si el webhook responde {"status": "ok"}.
    """
    url = getattr(settings, "APPSCRIPT_WEBHOOK_URL", None)
    secret = getattr(settings, "APPSCRIPT_WEBHOOK_SECRET", None)

    if not url or not secret:
        logger.error("[WEBHOOK EMAIL] Falta APPSCRIPT_WEBHOOK_URL o APPSCRIPT_WEBHOOK_SECRET")
        return False

    payload = {
        "secret": secret,
        "to": to_email,
        "subject": subject or "Sin asunto",
        "html_body": html_body or "",
        "text_body": text_body or " ",
    }
    if bcc:
        payload["bcc"] = ",".join(bcc)

    if attachment_bytes is not None and filename:
        if len(attachment_bytes) == 0:
            logger.error("[WEBHOOK EMAIL] Adjunto vacío (0 bytes). No se adjunta: %s", filename)
        else:
            payload["filename"] = filename
            payload["content_type"] = content_type
            payload["attachment"] = base64.b64encode(attachment_bytes).decode("utf-8")

    logger.info(
        "[WEBHOOK EMAIL] to=%s subject=%r adjunto=%s",
        to_email, subject, "attachment" in payload,
    )

    try:
        resp = requests.post(url, json=payload, timeout=30)
        resp.raise_for_status()
        data = resp.json() if resp.content else {}
    except (requests.RequestException, ValueError):
        logger.exception("[WEBHOOK EMAIL] Error llamando al webhook (to=%s)", to_email)
        return False

    if data.get("status") == "ok":
        return True

    logger.error("[WEBHOOK EMAIL] Respuesta no-ok para %s: %s", to_email, data)
    return False
