from __future__ import annotations

import logging
from typing import Callable

import httpx

from zappi.core.config import META_API_VERSION
from zappi.core.errors import TransportError
from zappi.schemas.whatsapp import WhatsAppCredentials
from zappi.whatsapp.base import TransportStatus, safe_json, sanitize_payload

logger = logging.getLogger(__name__)


class CloudTransport:
    """Envio pela WhatsApp Cloud API.

    Um 401 significa token revogado: o transporte passa a exigir novo
    pareamento e avisa o supervisor via ``on_credentials_invalidated``.
    Enquanto isso nenhum envio chega à API; a cada tentativa as credenciais
    são relidas e um token diferente encerra o pareamento pendente.
    """

    TIMEOUT_SECONDS = 20.0

    def __init__(
        self,
        tenant: str,
        credentials: WhatsAppCredentials,
        *,
        on_credentials_invalidated: Callable[[WhatsAppCredentials], None] | None = None,
        reload_credentials: Callable[[], WhatsAppCredentials | None] | None = None,
        credentials_invalid: bool = False,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.tenant = tenant
        self._credentials = credentials
        self._on_credentials_invalidated = on_credentials_invalidated
        self._reload_credentials = reload_credentials
        self._client = client or httpx.AsyncClient(timeout=self.TIMEOUT_SECONDS)
        self._credentials_invalid = credentials_invalid
        self._last_send_ok: bool | None = None

    @property
    def url(self) -> str:
        return f"https://graph.facebook.com/{META_API_VERSION}/{self._credentials.phone_number_id}/messages"

    async def send_text(self, identity: str, text: str) -> None:
        if self._credentials_invalid and not self._refresh_credentials():
            raise TransportError(f"[{self.tenant}] credenciais invalidadas, aguardando novo pareamento")

        payload = {
            "messaging_product": "whatsapp",
            "to": identity,
            "type": "text",
            "text": {"preview_url": False, "body": text},
        }
        headers = {
            "Authorization": f"Bearer {self._credentials.access_token}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._client.post(self.url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            self._last_send_ok = False
            raise TransportError(f"Erro de rede no WhatsApp: {exc}") from exc

        if 200 <= response.status_code < 300:
            self._last_send_ok = True
            return

        self._last_send_ok = False
        if response.status_code == 401:
            self._invalidate()
        logger.warning(
            "WhatsApp Cloud recusou envio: tenant=%s status=%s payload=%s",
            self.tenant,
            response.status_code,
            safe_json(sanitize_payload(payload)),
        )
        raise TransportError(f"Erro WhatsApp {response.status_code}: {response.text}")

    def _refresh_credentials(self) -> bool:
        if self._reload_credentials is None:
            return False
        fresh = self._reload_credentials()
        if fresh is None or fresh.access_token == self._credentials.access_token:
            return False
        logger.info("Novas credenciais do WhatsApp carregadas: tenant=%s", self.tenant)
        self._credentials = fresh
        self._credentials_invalid = False
        self._last_send_ok = None
        return True

    def _invalidate(self) -> None:
        if self._credentials_invalid:
            return
        self._credentials_invalid = True
        logger.warning("Credenciais do WhatsApp invalidadas: tenant=%s", self.tenant)
        if self._on_credentials_invalidated is not None:
            self._on_credentials_invalidated(self._credentials)

    def status(self) -> TransportStatus:
        if self._credentials_invalid:
            return TransportStatus(connected=False, pending_pairing_code=True)
        return TransportStatus(connected=self._last_send_ok is not False, pending_pairing_code=False)

    async def close(self) -> None:
        await self._client.aclose()
