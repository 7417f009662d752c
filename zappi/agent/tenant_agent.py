from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from zappi.agent.handler import HandleResult, MessageHandler
from zappi.core.errors import AgentStopped
from zappi.whatsapp.base import ChatTransport, InboundMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentStatus:
    tenant: str
    connected: bool
    pending_pairing_code: bool
    running: bool


class TenantAgent:
    """Agente de um estabelecimento.

    Uma fila e um único worker: as mensagens do estabelecimento são tratadas
    uma por vez, na ordem de chegada, cada uma até o fim (incluindo envios)
    antes da próxima.
    """

    def __init__(self, tenant: str, handler: MessageHandler, transport: ChatTransport) -> None:
        self.tenant = tenant
        self.handler = handler
        self.transport = transport
        self._queue: asyncio.Queue[tuple[InboundMessage, asyncio.Future]] = asyncio.Queue()
        self._worker: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._worker = loop.create_task(self._run(), name=f"agent:{self.tenant}")
        logger.info("Agente iniciado: tenant=%s", self.tenant)

    async def submit(self, message: InboundMessage) -> HandleResult:
        if not self.running:
            raise AgentStopped(f"[{self.tenant}] agente parado")
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._queue.put((message, future))
        return await future

    async def _run(self) -> None:
        while True:
            message, future = await self._queue.get()
            try:
                if future.done():
                    continue
                try:
                    result = await self.handler.handle(message)
                except asyncio.CancelledError:
                    # parado no meio da mensagem: quem submeteu não pode ficar esperando
                    if not future.done():
                        future.set_exception(AgentStopped(f"[{self.tenant}] agente parado"))
                    raise
                except Exception as exc:
                    if not future.done():
                        future.set_exception(exc)
                else:
                    if not future.done():
                        future.set_result(result)
            finally:
                self._queue.task_done()

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

        while not self._queue.empty():
            _message, future = self._queue.get_nowait()
            if not future.done():
                future.set_exception(AgentStopped(f"[{self.tenant}] agente parado"))
            self._queue.task_done()

        await self.transport.close()
        logger.info("Agente parado: tenant=%s", self.tenant)

    def status(self) -> AgentStatus:
        transport_status = self.transport.status()
        return AgentStatus(
            tenant=self.tenant,
            connected=transport_status.connected,
            pending_pairing_code=transport_status.pending_pairing_code,
            running=self.running,
        )
