from __future__ import annotations

import asyncio
import logging
from typing import Callable

from zappi.agent.tenant_agent import AgentStatus, TenantAgent
from zappi.core.errors import UnknownTenant
from zappi.schemas.menu import Catalog

logger = logging.getLogger(__name__)

# (tenant, cardápio, callback de credenciais invalidadas) -> agente ainda não iniciado
AgentFactory = Callable[[str, Catalog, Callable[[], None]], TenantAgent]


class AgentRegistry:
    """Agentes ativos por estabelecimento.

    Também aplica a política de supervisão: quando o transporte avisa que as
    credenciais foram invalidadas, o agente é destruído e recriado. Sessões,
    cooldowns e pedidos não são tocados.
    """

    def __init__(self, factory: AgentFactory) -> None:
        self._factory = factory
        self._agents: dict[str, TenantAgent] = {}
        self._catalogs: dict[str, Catalog] = {}
        self._pending: set[asyncio.Task] = set()

    def start(self, tenant: str, catalog: Catalog) -> TenantAgent:
        self._catalogs[tenant] = catalog
        agent = self._factory(tenant, catalog, lambda: self.schedule_restart(tenant))
        agent.start()
        self._agents[tenant] = agent
        return agent

    def get(self, tenant: str) -> TenantAgent:
        agent = self._agents.get(tenant)
        if agent is None:
            raise UnknownTenant(tenant)
        return agent

    def tenants(self) -> list[str]:
        return sorted(self._agents)

    def statuses(self) -> list[AgentStatus]:
        return [self._agents[tenant].status() for tenant in self.tenants()]

    async def restart(self, tenant: str) -> TenantAgent:
        catalog = self._catalogs.get(tenant)
        if catalog is None:
            raise UnknownTenant(tenant)
        logger.warning("Reiniciando agente para novo pareamento: tenant=%s", tenant)
        old = self._agents.pop(tenant, None)
        if old is not None:
            await old.stop()
        return self.start(tenant, catalog)

    def schedule_restart(self, tenant: str) -> None:
        # chamado de dentro do worker do próprio agente: não pode aguardar o stop ali
        task = asyncio.get_running_loop().create_task(self.restart(tenant), name=f"restart:{tenant}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def stop_all(self) -> None:
        for task in list(self._pending):
            await task
        for tenant in self.tenants():
            await self._agents.pop(tenant).stop()
