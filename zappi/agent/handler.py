from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from zappi.core.config import COOLDOWN_SECONDS
from zappi.core.errors import PersistenceError, TransportError
from zappi.core.request_context import clear_message_context, set_message_context
from zappi.fsm import engine
from zappi.fsm.engine import StepResult
from zappi.models.processed_message import ProcessedMessage
from zappi.schemas.conversation import SessionData
from zappi.schemas.menu import Catalog
from zappi.services.cooldown_gate import CooldownGate
from zappi.services.order_recorder import OrderRecorder
from zappi.services.session_store import SessionStore
from zappi.whatsapp.base import ChatTransport, InboundMessage

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HandleResult:
    status: str
    replies: list[str] = field(default_factory=list)
    state: str | None = None
    order_recorded: bool = False
    delivered: int = 0

    @property
    def terminated(self) -> bool:
        return self.status == "ok" and self.state is None


class MessageHandler:
    """Trata uma mensagem recebida de ponta a ponta.

    Ordem: cooldown -> sessão -> engine -> gravação (uma transação) -> envio.
    O estado é gravado antes do envio, então uma falha de envio não desfaz a
    transição; uma falha de gravação sobe como ``PersistenceError`` e nada é
    enviado.
    """

    def __init__(
        self,
        *,
        tenant: str,
        catalog: Catalog,
        transport: ChatTransport,
        session_factory: Callable[[], Session],
        cooldown_seconds: int = COOLDOWN_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.tenant = tenant
        self.catalog = catalog
        self.transport = transport
        self._session_factory = session_factory
        self._cooldown = timedelta(seconds=cooldown_seconds)
        self._clock = clock

    async def handle(self, message: InboundMessage) -> HandleResult:
        set_message_context(tenant=self.tenant, identity=message.sender, message_id=message.message_id)
        try:
            return await self._handle(message)
        finally:
            clear_message_context()

    async def _handle(self, message: InboundMessage) -> HandleResult:
        if not message.text:
            return HandleResult(status="ignored")

        # banco fora do event loop; o worker do estabelecimento continua aguardando
        outcome = await asyncio.to_thread(self._advance, message)
        if isinstance(outcome, HandleResult):
            return outcome

        delivered = await self._deliver(message.sender, outcome.messages)
        return HandleResult(
            status="ok",
            replies=list(outcome.messages),
            state=None if outcome.terminated else outcome.session.state,
            order_recorded=outcome.order is not None,
            delivered=delivered,
        )

    def _advance(self, message: InboundMessage) -> HandleResult | StepResult:
        """Cooldown, sessão, engine e gravação, numa única transação."""
        identity = message.sender
        now = self._clock()
        db = self._session_factory()
        try:
            if message.message_id and db.get(ProcessedMessage, (self.tenant, message.message_id)):
                logger.info("Mensagem repetida ignorada: tenant=%s id=%s", self.tenant, message.message_id)
                return HandleResult(status="duplicate")

            if CooldownGate(db).is_active(identity, self.tenant, now):
                logger.info("Cooldown ativo para %s. Ignorando mensagem.", identity)
                return HandleResult(status="cooldown")

            session = SessionStore(db).get(identity, self.tenant)
            if session is None:
                logger.info("Nova sessão: tenant=%s identity=%s", self.tenant, identity)
                session = SessionData()

            result = engine.step(session, message.text, self.catalog)
            self._persist(db, message, result, now)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Falha ao gravar estado da conversa")
            raise PersistenceError(f"[{self.tenant}] falha ao gravar conversa de {identity}") from exc
        finally:
            db.close()

        logger.info(
            "Passo gravado: %s resposta(s)",
            len(result.messages),
            extra={"state": None if result.terminated else result.session.state},
        )
        return result

    def _persist(self, db: Session, message: InboundMessage, result: StepResult, now: datetime) -> None:
        identity = message.sender
        store = SessionStore(db)

        if result.order is not None:
            OrderRecorder(db).record(
                self.tenant,
                identity,
                result.order.items,
                result.order.fulfillment,
            )

        if result.terminated:
            store.delete(identity, self.tenant)
            CooldownGate(db).arm(identity, self.tenant, now + self._cooldown)
            logger.info("Sessão encerrada: tenant=%s identity=%s", self.tenant, identity)
        else:
            store.put(identity, self.tenant, result.session)

        if message.message_id:
            db.add(ProcessedMessage(tenant=self.tenant, message_id=message.message_id))
        db.commit()

    async def _deliver(self, identity: str, messages: list[str]) -> int:
        delivered = 0
        for text in messages:
            try:
                await self.transport.send_text(identity, text)
            except TransportError:
                # o estado já foi gravado; reenvio é assunto do transporte
                logger.exception("Falha ao enviar mensagem para %s", identity)
                break
            delivered += 1
        return delivered
