import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from zappi.agent.registry import AgentRegistry
from zappi.core.errors import AgentStopped, PersistenceError
from zappi.deps import get_establishments_path, get_registry, resolve_agent
from zappi.whatsapp.base import parse_cloud_webhook
from zappi.whatsapp.service import get_verify_token

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/api/whatsapp/{tenant}/webhook")
async def verify_webhook_tenant(
    tenant: str,
    request: Request,
    registry: AgentRegistry = Depends(get_registry),
    establishments_path: Path = Depends(get_establishments_path),
):
    # só estabelecimentos com agente ativo; o nome vem do registro, não da URL
    agent = resolve_agent(registry, tenant)
    qp = request.query_params
    mode = qp.get("hub.mode")
    token = qp.get("hub.verify_token")
    challenge = qp.get("hub.challenge")

    verify_token = get_verify_token(establishments_path / agent.tenant)
    if mode == "subscribe" and verify_token and token == verify_token:
        return PlainTextResponse(challenge or "")

    raise HTTPException(status_code=403, detail="Verify token inválido")


@router.post("/api/whatsapp/{tenant}/webhook")
async def whatsapp_webhook_tenant(
    tenant: str,
    request: Request,
    registry: AgentRegistry = Depends(get_registry),
):
    agent = resolve_agent(registry, tenant)
    payload = await request.json()
    messages = parse_cloud_webhook(payload)
    if not messages:
        return {"status": "ignored"}

    results = []
    for message in messages:
        try:
            result = await agent.submit(message)
        except PersistenceError:
            # sem ack: a plataforma reenvia e o passo é refeito por inteiro
            raise HTTPException(status_code=500, detail="Falha ao gravar conversa") from None
        except AgentStopped:
            raise HTTPException(status_code=503, detail="Agente reiniciando") from None
        results.append({"message_id": message.message_id, "status": result.status})

    return {"status": "ok", "results": results}
