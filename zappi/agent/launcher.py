from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from sqlalchemy.orm import Session

from zappi.agent.handler import MessageHandler
from zappi.agent.registry import AgentFactory, AgentRegistry
from zappi.agent.tenant_agent import TenantAgent
from zappi.core.config import COOLDOWN_SECONDS, ESTABLISHMENTS_PATH
from zappi.core.errors import CatalogError
from zappi.schemas.menu import Catalog
from zappi.schemas.whatsapp import WhatsAppCredentials
from zappi.services.menu_catalog import load_catalog
from zappi.whatsapp.service import build_transport

logger = logging.getLogger(__name__)


def make_agent_factory(
    *,
    establishments_path: Path,
    session_factory: Callable[[], Session],
    cooldown_seconds: int = COOLDOWN_SECONDS,
) -> AgentFactory:
    # tenant -> access_token recusado; sobrevive aos reinícios do agente
    revoked_tokens: dict[str, str] = {}

    def factory(tenant: str, catalog: Catalog, on_credentials_invalidated: Callable[[], None]) -> TenantAgent:
        def credentials_invalidated(credentials: WhatsAppCredentials) -> None:
            revoked_tokens[tenant] = credentials.access_token
            on_credentials_invalidated()

        transport = build_transport(
            tenant,
            Path(establishments_path) / tenant,
            on_credentials_invalidated=credentials_invalidated,
            revoked_token=revoked_tokens.get(tenant),
        )
        handler = MessageHandler(
            tenant=tenant,
            catalog=catalog,
            transport=transport,
            session_factory=session_factory,
            cooldown_seconds=cooldown_seconds,
        )
        return TenantAgent(tenant, handler, transport)

    return factory


def discover_establishments(establishments_path: Path) -> list[str]:
    path = Path(establishments_path)
    if not path.exists():
        logger.info("Criando diretório de estabelecimentos em: %s", path)
        path.mkdir(parents=True, exist_ok=True)
    return sorted(entry.name for entry in path.iterdir() if entry.is_dir())


def launch_agents(registry: AgentRegistry, establishments_path: Path = ESTABLISHMENTS_PATH) -> list[str]:
    """Inicia um agente por estabelecimento com cardápio válido.

    Um cardápio ausente ou inválido impede só aquele estabelecimento.
    """
    names = discover_establishments(establishments_path)
    if not names:
        logger.warning("Nenhum estabelecimento encontrado em %s", establishments_path)
        return []

    started = []
    for name in names:
        try:
            catalog = load_catalog(name, establishments_path)
        except CatalogError as exc:
            logger.error("Falha ao iniciar o bot: %s", exc, extra={"tenant": name})
            continue
        registry.start(name, catalog)
        started.append(name)

    logger.info("Agentes iniciados: %s de %s estabelecimentos", len(started), len(names))
    return started
