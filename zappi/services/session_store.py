from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from zappi.models.conversation import ConversationSession
from zappi.schemas.conversation import SessionData
from zappi.schemas.menu import MenuItem

logger = logging.getLogger(__name__)

_ORDER_ADAPTER = TypeAdapter(list[MenuItem])


def session_key(identity: str, tenant: str) -> tuple[str, str]:
    """Chave primária (tenant, identity) das tabelas por cliente."""
    return (tenant, identity)


class SessionStore:
    """Sessões de conversa por (identidade, estabelecimento).

    Não faz commit: quem chama decide a transação.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, identity: str, tenant: str) -> SessionData | None:
        row = self._db.get(ConversationSession, session_key(identity, tenant))
        if row is None:
            return None
        return SessionData(
            state=row.state or "",
            order=self._load_order(row),
            full_name=row.full_name,
            phone=row.phone,
            address=row.address,
        )

    def put(self, identity: str, tenant: str, session: SessionData) -> None:
        key = session_key(identity, tenant)
        row = self._db.get(ConversationSession, key)
        if row is None:
            row = ConversationSession(tenant=tenant, identity=identity)
            self._db.add(row)
        row.state = session.state
        row.order_items = json.dumps(
            _ORDER_ADAPTER.dump_python(session.order, mode="json"), ensure_ascii=False
        )
        row.full_name = session.full_name
        row.phone = session.phone
        row.address = session.address
        self._db.flush()

    def delete(self, identity: str, tenant: str) -> None:
        row = self._db.get(ConversationSession, session_key(identity, tenant))
        if row is not None:
            self._db.delete(row)
            self._db.flush()

    def _load_order(self, row: ConversationSession) -> list[MenuItem]:
        try:
            return _ORDER_ADAPTER.validate_json(row.order_items or "[]")
        except ValidationError:
            # pedido ilegível: o engine recomeça a conversa pelo estado
            logger.warning("Itens da sessão ilegíveis, descartando: tenant=%s identity=%s", row.tenant, row.identity)
            return []
