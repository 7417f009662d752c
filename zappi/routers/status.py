from dataclasses import asdict

from fastapi import APIRouter, Depends

from zappi.agent.registry import AgentRegistry
from zappi.deps import get_registry

router = APIRouter()


@router.get("/status")
def agents_status(registry: AgentRegistry = Depends(get_registry)):
    return {"agents": [asdict(status) for status in registry.statuses()]}
