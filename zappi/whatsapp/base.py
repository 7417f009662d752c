from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class InboundMessage:
    sender: str
    text: str
    message_id: str | None = None
    message_type: str = "text"


@dataclass(frozen=True)
class TransportStatus:
    connected: bool
    pending_pairing_code: bool


class ChatTransport(Protocol):
    async def send_text(self, identity: str, text: str) -> None:
        ...

    def status(self) -> TransportStatus:
        ...

    async def close(self) -> None:
        ...


SENSITIVE_KEYS = {"access_token", "verify_token", "authorization", "token"}


def _mask_value(value: Any) -> Any:
    if value is None:
        return None
    text = str(value)
    if len(text) <= 4:
        return "****"
    return f"****{text[-4:]}"


def sanitize_payload(payload: dict[str, Any]) -> dict[str, Any]:
    def _sanitize(value: Any) -> Any:
        if isinstance(value, dict):
            return {key: _sanitize_value(key, inner) for key, inner in value.items()}
        if isinstance(value, list):
            return [_sanitize(item) for item in value]
        return value

    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in SENSITIVE_KEYS:
            return _mask_value(value)
        return _sanitize(value)

    return _sanitize(payload)


def safe_json(payload: dict[str, Any]) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError):
        return "{}"


def parse_cloud_webhook(payload: dict[str, Any]) -> list[InboundMessage]:
    messages: list[InboundMessage] = []
    for entry in payload.get("entry", []) or []:
        for change in entry.get("changes", []) or []:
            value = change.get("value") or {}
            for msg in value.get("messages", []) or []:
                msg_type = msg.get("type") or "text"
                text = ""
                # só texto simples é considerado; o resto vira texto vazio
                if msg_type == "text":
                    text = ((msg.get("text") or {}).get("body")) or ""
                message_id = msg.get("id")
                from_number = msg.get("from")
                if not message_id or not from_number:
                    continue
                messages.append(
                    InboundMessage(
                        sender=from_number,
                        text=text,
                        message_id=message_id,
                        message_type=msg_type,
                    )
                )
    return messages
