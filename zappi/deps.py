from __future__ import annotations

from pathlib import Path

from fastapi import HTTPException, Request

from zappi.agent.registry import AgentRegistry
from zappi.agent.tenant_agent import TenantAgent
from zappi.core.errors import UnknownTenant


def get_registry(request: Request) -> AgentRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Agentes ainda não iniciados")
    return registry


def get_establishments_path(request: Request) -> Path:
    return Path(request.app.state.establishments_path)


def resolve_agent(registry: AgentRegistry, tenant: str) -> TenantAgent:
    try:
        return registry.get(tenant)
    except UnknownTenant:
        raise HTTPException(status_code=404, detail="Estabelecimento não encontrado") from None
