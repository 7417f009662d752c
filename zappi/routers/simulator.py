from fastapi import APIRouter, Depends, HTTPException

from zappi.agent.registry import AgentRegistry
from zappi.core.errors import PersistenceError
from zappi.deps import get_registry, resolve_agent
from zappi.whatsapp.base import InboundMessage

router = APIRouter(prefix="/simulator")


@router.post("/mensagem")
async def simular(
    tenant: str,
    telefone: str,
    texto: str,
    registry: AgentRegistry = Depends(get_registry),
):
    agent = resolve_agent(registry, tenant)
    try:
        result = await agent.submit(InboundMessage(sender=telefone, text=texto))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Falha ao gravar conversa") from None

    return {
        "status": result.status,
        "estado": result.state,
        "respostas": result.replies,
        "pedido_registrado": result.order_recorded,
    }
