"""Máquina de estados da conversa de pedido.

O engine não faz I/O: recebe a sessão atual, o texto recebido e o cardápio do
estabelecimento e devolve as mensagens a enviar, a nova sessão (ou ``None``
quando a conversa termina) e, se for o caso, o pedido a registrar.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from zappi.fsm import states
from zappi.schemas.conversation import Fulfillment, OrderRequest, SessionData
from zappi.schemas.menu import Catalog, MenuItem

FALLBACK_TEXT = "Desculpe, não entendi. Reiniciando atendimento."
INVALID_MENU_CHOICE_TEXT = "Opção inválida. Por favor, escolha 1, 2 ou 3."
ASK_ITEMS_TEXT = (
    "Ótimo! Por favor, digite os números dos itens que deseja pedir, "
    "separados por vírgula (ex: 1,4,5)."
)
NO_VALID_ITEMS_TEXT = "Nenhum item válido foi selecionado. Por favor, digite os números dos itens."
ATTENDANT_TEXT = "Encaminhando você para um atendente. Por favor, aguarde."
CANCELLED_TEXT = "Pedido cancelado. Voltando ao menu principal."
ASK_FULFILLMENT_TEXT = "Pedido confirmado!\n\nComo você prefere?\n*Retirar* no local ou *Delivery*?"
INVALID_FULFILLMENT_TEXT = 'Opção inválida. Por favor, digite "retirar" ou "delivery".'
ASK_FULL_NAME_TEXT = (
    "Ótimo! Para o delivery, preciso de algumas informações. Por favor, digite seu nome completo:"
)
ASK_PHONE_TEXT = "Obrigado! Agora, por favor, digite seu telefone para contato:"
ASK_ADDRESS_TEXT = "Perfeito! Por último, digite seu endereço completo para entrega:"

_ITEM_ID_RE = re.compile(r"^\d+$")


@dataclass
class StepResult:
    messages: list[str] = field(default_factory=list)
    # None = conversa encerrada (apagar sessão e armar cooldown)
    session: SessionData | None = None
    order: OrderRequest | None = None

    @property
    def terminated(self) -> bool:
        return self.session is None


def format_price(value: Decimal) -> str:
    price = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"R$ {price:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def order_total(items: list[MenuItem]) -> Decimal:
    return sum((item.price for item in items), Decimal("0"))


def display_name(tenant: str) -> str:
    return tenant.replace("_", " ")


def welcome_text(tenant: str) -> str:
    return (
        f"🍕 Bem-vindo(a) à *{display_name(tenant)}*! 🍕\n\n"
        "Como posso ajudar?\n\n"
        "*1. Ver Cardápio* 📋\n"
        "*2. Fazer Pedido* 📝\n"
        "*3. Falar com um atendente* 🧑‍💼"
    )


def format_menu(catalog: Catalog) -> str:
    lines = ["⭐ *Nosso Cardápio* ⭐", "", "🍕 *Pizzas*"]
    for pizza in catalog.pizzas:
        lines.append(f"*{pizza.id}. {pizza.name}* - {format_price(pizza.price)}")
        if pizza.ingredients:
            lines.append(f"_Ingredientes: {pizza.ingredients}_")
        lines.append("")
    lines.append("🥤 *Bebidas*")
    for drink in catalog.drinks:
        lines.append(f"*{drink.id}. {drink.name}* - {format_price(drink.price)}")
    lines.append("")
    lines.append("Para fazer um pedido, escolha a opção *2* no menu principal.")
    return "\n".join(lines)


def _item_lines(items: list[MenuItem]) -> list[str]:
    return [f"- {item.name} ({format_price(item.price)})" for item in items]


def format_cart(items: list[MenuItem]) -> str:
    lines = ["🛒 *Seu Pedido:* 🛒", ""]
    lines.extend(_item_lines(items))
    lines.append("")
    lines.append(f"💰 *Total:* {format_price(order_total(items))}")
    lines.append(
        "✅ Para confirmar, digite *Sim*. Para cancelar, digite *Não*.\n"
        "Se quiser adicionar mais itens, digite os números novamente."
    )
    return "\n".join(lines)


def _format_receipt(title: str, items: list[MenuItem]) -> list[str]:
    lines = [title, "", "*Seu Pedido:*"]
    lines.extend(_item_lines(items))
    lines.append("")
    lines.append(f"💰 *Total:* {format_price(order_total(items))}")
    lines.append("")
    return lines


def format_pickup_summary(items: list[MenuItem]) -> str:
    lines = _format_receipt("✅ *Pedido Confirmado para Retirada!* ✅", items)
    lines.append("Agradecemos a preferência! Seu pedido será preparado para retirada.")
    return "\n".join(lines)


def format_delivery_summary(session: SessionData) -> str:
    lines = _format_receipt("✅ *Pedido Confirmado para Delivery!* ✅", session.order)
    lines.extend(
        [
            "*Dados para Entrega:*",
            f"Nome: {session.full_name}",
            f"Telefone: {session.phone}",
            f"Endereço: {session.address}",
            "",
            "Agradecemos a preferência! Seu pedido será entregue em breve.",
        ]
    )
    return "\n".join(lines)


def parse_item_ids(text: str) -> list[int]:
    ids = []
    for token in text.split(","):
        token = token.strip()
        if _ITEM_ID_RE.match(token):
            ids.append(int(token))
    return ids


def _start(session: SessionData, tenant: str) -> StepResult:
    session.state = states.AWAITING_MENU_CHOICE
    return StepResult(messages=[welcome_text(tenant)], session=session)


def _handle_initial(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    return _start(session, catalog.tenant)


def _handle_menu_choice(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    if text == "1":
        return StepResult(messages=[format_menu(catalog)], session=session)
    if text == "2":
        session.order = []
        session.state = states.AWAITING_ORDER_ITEMS
        return StepResult(messages=[ASK_ITEMS_TEXT], session=session)
    if text == "3":
        order = OrderRequest(items=[], fulfillment=Fulfillment(type="Atendente"))
        return StepResult(messages=[ATTENDANT_TEXT], session=None, order=order)
    return StepResult(messages=[INVALID_MENU_CHOICE_TEXT], session=session)


def select_items(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    """Acrescenta ao pedido os itens cujos ids foram digitados.

    Usado tanto na escolha de itens quanto na confirmação, onde qualquer
    resposta que não seja sim/não é tratada como mais itens.
    """
    selected = [item for item in map(catalog.find, parse_item_ids(text)) if item is not None]
    if not selected:
        return StepResult(messages=[NO_VALID_ITEMS_TEXT], session=session)

    session.order = [*session.order, *selected]
    session.state = states.AWAITING_ORDER_CONFIRMATION
    return StepResult(messages=[format_cart(session.order)], session=session)


def _handle_order_confirmation(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    answer = text.lower()
    if answer == "sim":
        session.state = states.AWAITING_DELIVERY_CHOICE
        return StepResult(messages=[ASK_FULFILLMENT_TEXT], session=session)
    if answer == "não":
        return StepResult(messages=[CANCELLED_TEXT], session=None)
    return select_items(session, text, catalog)


def _handle_delivery_choice(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    choice = text.lower()
    if choice == "retirar":
        order = OrderRequest(items=list(session.order), fulfillment=Fulfillment(type="Retirada"))
        return StepResult(messages=[format_pickup_summary(session.order)], session=None, order=order)
    if choice == "delivery":
        session.state = states.AWAITING_FULL_NAME
        return StepResult(messages=[ASK_FULL_NAME_TEXT], session=session)
    return StepResult(messages=[INVALID_FULFILLMENT_TEXT], session=session)


def _handle_full_name(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    session.full_name = text
    session.state = states.AWAITING_PHONE
    return StepResult(messages=[ASK_PHONE_TEXT], session=session)


def _handle_phone(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    session.phone = text
    session.state = states.AWAITING_ADDRESS
    return StepResult(messages=[ASK_ADDRESS_TEXT], session=session)


def _handle_address(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    session.address = text
    order = OrderRequest(
        items=list(session.order),
        fulfillment=Fulfillment(
            type="Delivery",
            address=session.address,
            name=session.full_name,
            phone=session.phone,
        ),
    )
    return StepResult(messages=[format_delivery_summary(session)], session=None, order=order)


Handler = Callable[[SessionData, str, Catalog], StepResult]

HANDLERS: dict[str, Handler] = {
    states.INITIAL: _handle_initial,
    states.AWAITING_MENU_CHOICE: _handle_menu_choice,
    states.AWAITING_ORDER_ITEMS: select_items,
    states.AWAITING_ORDER_CONFIRMATION: _handle_order_confirmation,
    states.AWAITING_DELIVERY_CHOICE: _handle_delivery_choice,
    states.AWAITING_FULL_NAME: _handle_full_name,
    states.AWAITING_PHONE: _handle_phone,
    states.AWAITING_ADDRESS: _handle_address,
}


def step(session: SessionData, text: str, catalog: Catalog) -> StepResult:
    working = session.model_copy(deep=True)
    content = (text or "").strip()

    handler = HANDLERS.get(working.state)
    if handler is None:
        restarted = _start(working, catalog.tenant)
        restarted.messages.insert(0, FALLBACK_TEXT)
        return restarted
    return handler(working, content, catalog)
