import json
from decimal import Decimal

from zappi.fsm import engine, states
from zappi.schemas.conversation import SessionData
from zappi.services.menu_catalog import parse_catalog
from tests.fixtures_data import MENU_PAYLOAD, TENANT

CATALOG = parse_catalog(TENANT, json.dumps(MENU_PAYLOAD))


def _session(state: str, item_ids: tuple[int, ...] = (), **fields) -> SessionData:
    return SessionData(state=state, order=[CATALOG.find(item_id) for item_id in item_ids], **fields)


def test_initial_state_sends_welcome_with_establishment_name():
    result = engine.step(SessionData(), "olá", CATALOG)

    assert result.session.state == states.AWAITING_MENU_CHOICE
    assert len(result.messages) == 1
    assert "*pizzaria padrao*" in result.messages[0]
    assert "*3. Falar com um atendente*" in result.messages[0]
    assert result.order is None


def test_menu_choice_1_renders_catalog_and_keeps_state():
    result = engine.step(_session(states.AWAITING_MENU_CHOICE), " 1 ", CATALOG)

    assert result.session.state == states.AWAITING_MENU_CHOICE
    menu_text = result.messages[0]
    assert "*1. Calabresa* - R$ 30,00" in menu_text
    assert "_Ingredientes: Calabresa, cebola e mussarela_" in menu_text
    assert "*4. Guaraná Lata* - R$ 5,50" in menu_text


def test_menu_choice_2_clears_previous_order():
    result = engine.step(_session(states.AWAITING_MENU_CHOICE, (1, 2)), "2", CATALOG)

    assert result.session.state == states.AWAITING_ORDER_ITEMS
    assert result.session.order == []
    assert result.messages == [engine.ASK_ITEMS_TEXT]


def test_menu_choice_3_ends_with_attendant_order_without_items():
    result = engine.step(_session(states.AWAITING_MENU_CHOICE), "3", CATALOG)

    assert result.terminated
    assert result.order.items == []
    assert result.order.fulfillment.type == "Atendente"
    assert result.messages == [engine.ATTENDANT_TEXT]


def test_invalid_menu_choice_reprompts():
    result = engine.step(_session(states.AWAITING_MENU_CHOICE), "pizza", CATALOG)

    assert result.session.state == states.AWAITING_MENU_CHOICE
    assert result.messages == [engine.INVALID_MENU_CHOICE_TEXT]


def test_selecting_items_builds_summary_and_exact_total():
    result = engine.step(_session(states.AWAITING_ORDER_ITEMS), "1,3", CATALOG)

    assert result.session.state == states.AWAITING_ORDER_CONFIRMATION
    assert [item.id for item in result.session.order] == [1, 3]
    assert engine.order_total(result.session.order) == Decimal("36.00")
    summary = result.messages[0]
    assert "- Calabresa (R$ 30,00)" in summary
    assert "- Coca-Cola 2L (R$ 6,00)" in summary
    assert "💰 *Total:* R$ 36,00" in summary


def test_unknown_ids_are_dropped_silently():
    result = engine.step(_session(states.AWAITING_ORDER_ITEMS), "2, 99, abc", CATALOG)

    assert [item.id for item in result.session.order] == [2]
    assert result.session.state == states.AWAITING_ORDER_CONFIRMATION


def test_no_valid_id_reprompts_and_keeps_order():
    session = _session(states.AWAITING_ORDER_ITEMS, (2,))

    result = engine.step(session, "9,x", CATALOG)

    assert result.session.state == states.AWAITING_ORDER_ITEMS
    assert [item.id for item in result.session.order] == [2]
    assert result.messages == [engine.NO_VALID_ITEMS_TEXT]


def test_same_ids_twice_are_appended_twice():
    first = engine.step(_session(states.AWAITING_ORDER_ITEMS), "1,3", CATALOG)
    second = engine.step(first.session, "1,3", CATALOG)

    assert [item.id for item in second.session.order] == [1, 3, 1, 3]
    assert engine.order_total(second.session.order) == Decimal("72.00")


def test_confirmation_is_case_insensitive():
    result = engine.step(_session(states.AWAITING_ORDER_CONFIRMATION, (1,)), "SIM", CATALOG)

    assert result.session.state == states.AWAITING_DELIVERY_CHOICE
    assert result.messages == [engine.ASK_FULFILLMENT_TEXT]


def test_declining_confirmation_cancels_without_order():
    result = engine.step(_session(states.AWAITING_ORDER_CONFIRMATION, (1,)), "Não", CATALOG)

    assert result.terminated
    assert result.order is None
    assert result.messages == [engine.CANCELLED_TEXT]


def test_other_reply_during_confirmation_adds_more_items():
    result = engine.step(_session(states.AWAITING_ORDER_CONFIRMATION, (1,)), "4", CATALOG)

    assert result.session.state == states.AWAITING_ORDER_CONFIRMATION
    assert [item.id for item in result.session.order] == [1, 4]


def test_unrecognised_reply_during_confirmation_reprompts_for_items():
    result = engine.step(_session(states.AWAITING_ORDER_CONFIRMATION, (1,)), "talvez", CATALOG)

    assert result.session.state == states.AWAITING_ORDER_CONFIRMATION
    assert result.messages == [engine.NO_VALID_ITEMS_TEXT]


def test_pickup_finalizes_order():
    result = engine.step(_session(states.AWAITING_DELIVERY_CHOICE, (1, 3)), "Retirar", CATALOG)

    assert result.terminated
    assert result.order.fulfillment.type == "Retirada"
    assert [item.id for item in result.order.items] == [1, 3]
    assert result.order.total == Decimal("36.00")
    assert "Pedido Confirmado para Retirada" in result.messages[0]


def test_invalid_fulfillment_choice_reprompts():
    result = engine.step(_session(states.AWAITING_DELIVERY_CHOICE, (1,)), "entrega", CATALOG)

    assert result.session.state == states.AWAITING_DELIVERY_CHOICE
    assert result.messages == [engine.INVALID_FULFILLMENT_TEXT]


def test_delivery_branch_collects_name_phone_and_address_in_order():
    session = _session(states.AWAITING_DELIVERY_CHOICE, (2,))

    session = engine.step(session, "delivery", CATALOG).session
    assert session.state == states.AWAITING_FULL_NAME
    assert session.full_name is None

    session = engine.step(session, "  Maria Souza ", CATALOG).session
    assert session.state == states.AWAITING_PHONE
    assert session.full_name == "Maria Souza"
    assert session.phone is None

    session = engine.step(session, "11 98888-7777", CATALOG).session
    assert session.state == states.AWAITING_ADDRESS
    assert session.phone == "11 98888-7777"

    result = engine.step(session, "Rua das Flores, 10", CATALOG)
    assert result.terminated
    fulfillment = result.order.fulfillment
    assert fulfillment.type == "Delivery"
    assert (fulfillment.name, fulfillment.phone, fulfillment.address) == (
        "Maria Souza",
        "11 98888-7777",
        "Rua das Flores, 10",
    )
    summary = result.messages[0]
    assert "Nome: Maria Souza" in summary
    assert "Endereço: Rua das Flores, 10" in summary


def test_unknown_state_restarts_at_welcome():
    result = engine.step(_session("estado_antigo", (1,)), "qualquer", CATALOG)

    assert result.session.state == states.AWAITING_MENU_CHOICE
    assert result.messages[0] == engine.FALLBACK_TEXT
    assert result.messages[1] == engine.welcome_text(TENANT)


def test_step_does_not_mutate_input_session():
    session = _session(states.AWAITING_ORDER_ITEMS, (1,))

    engine.step(session, "2", CATALOG)

    assert session.state == states.AWAITING_ORDER_ITEMS
    assert [item.id for item in session.order] == [1]


def test_parse_item_ids_discards_non_numeric_tokens():
    assert engine.parse_item_ids(" 1, a ,3,,4x, 07") == [1, 3, 7]


def test_format_price_uses_brazilian_separators():
    assert engine.format_price(Decimal("1234.5")) == "R$ 1.234,50"
    assert engine.format_price(Decimal("0.005")) == "R$ 0,01"
