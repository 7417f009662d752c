"""Conjunto de dados reutilizável para cenários de teste."""

import json
from pathlib import Path

TENANT = "pizzaria_padrao"
CUSTOMER = "5511999990000@s.whatsapp.net"

MENU_PAYLOAD = {
    "pizzas": [
        {"id": 1, "name": "Calabresa", "price": 30.00, "ingredients": "Calabresa, cebola e mussarela"},
        {"id": 2, "name": "Margherita", "price": 35.50, "ingredients": "Tomate, manjericão e mussarela"},
    ],
    "bebidas": [
        {"id": 3, "name": "Coca-Cola 2L", "price": 6.00},
        {"id": 4, "name": "Guaraná Lata", "price": 5.50},
    ],
}

CLOUD_TEXT_PAYLOAD = {
    "object": "whatsapp_business_account",
    "entry": [
        {
            "id": "waba-1",
            "changes": [
                {
                    "field": "messages",
                    "value": {
                        "metadata": {"phone_number_id": "123", "display_phone_number": "5511000000000"},
                        "contacts": [{"profile": {"name": "Maria"}}],
                        "messages": [
                            {
                                "id": "wamid.1",
                                "from": "5511988887777",
                                "type": "text",
                                "text": {"body": "oi"},
                            }
                        ],
                    },
                }
            ],
        }
    ],
}


def write_establishment(base: Path, name: str = TENANT, menu: dict | str | None = MENU_PAYLOAD) -> Path:
    path = base / name
    path.mkdir(parents=True, exist_ok=True)
    if menu is not None:
        content = menu if isinstance(menu, str) else json.dumps(menu, ensure_ascii=False)
        (path / "menu.json").write_text(content, encoding="utf-8")
    return path


def cloud_payload(message_id: str, sender: str, body: str, msg_type: str = "text") -> dict:
    message = {"id": message_id, "from": sender, "type": msg_type}
    if msg_type == "text":
        message["text"] = {"body": body}
    else:
        message[msg_type] = {"id": "media-1"}
    return {"entry": [{"changes": [{"value": {"messages": [message]}}]}]}
