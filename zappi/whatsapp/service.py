from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from zappi.core.config import WHATSAPP_CONFIG_FILENAME, WHATSAPP_VERIFY_TOKEN
from zappi.schemas.whatsapp import WhatsAppCredentials
from zappi.whatsapp.base import ChatTransport
from zappi.whatsapp.cloud_provider import CloudTransport
from zappi.whatsapp.mock_provider import MockTransport

logger = logging.getLogger(__name__)


def load_credentials(establishment_path: Path) -> WhatsAppCredentials | None:
    config_path = Path(establishment_path) / WHATSAPP_CONFIG_FILENAME
    if not config_path.is_file():
        return None
    try:
        return WhatsAppCredentials.model_validate(json.loads(config_path.read_text(encoding="utf-8")))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError):
        logger.warning("Configuração do WhatsApp inválida, usando mock: path=%s", config_path)
        return None


def get_verify_token(establishment_path: Path) -> str:
    credentials = load_credentials(establishment_path)
    if credentials and credentials.verify_token:
        return credentials.verify_token
    return WHATSAPP_VERIFY_TOKEN


def build_transport(
    tenant: str,
    establishment_path: Path,
    *,
    on_credentials_invalidated: Callable[[WhatsAppCredentials], None] | None = None,
    revoked_token: str | None = None,
) -> ChatTransport:
    credentials = load_credentials(establishment_path)
    if credentials is None:
        logger.info("Sem credenciais do WhatsApp, usando mock: tenant=%s", tenant)
        return MockTransport(tenant)

    # o mesmo token já recusado pela API: começa aguardando novo pareamento
    pending = revoked_token is not None and credentials.access_token == revoked_token
    if pending:
        logger.warning("Token do WhatsApp já revogado, aguardando novo pareamento: tenant=%s", tenant)
    return CloudTransport(
        tenant,
        credentials,
        on_credentials_invalidated=on_credentials_invalidated,
        reload_credentials=lambda: load_credentials(establishment_path),
        credentials_invalid=pending,
    )
