from __future__ import annotations

import logging

from zappi.whatsapp.base import TransportStatus

logger = logging.getLogger(__name__)


class MockTransport:
    """Guarda as mensagens enviadas em memória. Usado em dev, simulador e testes."""

    def __init__(self, tenant: str) -> None:
        self.tenant = tenant
        self.sent: list[tuple[str, str]] = []
        self.closed = False

    async def send_text(self, identity: str, text: str) -> None:
        self.sent.append((identity, text))
        logger.debug("Mock enviou: tenant=%s to=%s", self.tenant, identity)

    def status(self) -> TransportStatus:
        return TransportStatus(connected=not self.closed, pending_pairing_code=False)

    async def close(self) -> None:
        self.closed = True

    def sent_to(self, identity: str) -> list[str]:
        return [text for to, text in self.sent if to == identity]
