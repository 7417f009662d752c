from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError

from zappi.core.config import ESTABLISHMENTS_PATH, MENU_FILENAME
from zappi.core.errors import CatalogError, CatalogNotFound
from zappi.schemas.menu import Catalog, MenuFile, MenuItem

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: ValidationError) -> list[str]:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg')}")
    return problems


def parse_catalog(tenant: str, raw: str) -> Catalog:
    """Valida o conteúdo de um menu.json e devolve o cardápio tipado."""
    try:
        data = json.loads(raw, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise CatalogError(tenant, [f"JSON inválido: {exc.msg} (linha {exc.lineno})"]) from exc

    try:
        menu = MenuFile.model_validate(data)
    except ValidationError as exc:
        raise CatalogError(tenant, _describe_validation_error(exc)) from exc

    pizzas = tuple(
        MenuItem(
            id=entry.id,
            name=entry.name,
            price=entry.price,
            category="pizza",
            ingredients=entry.ingredients,
        )
        for entry in menu.pizzas
    )
    drinks = tuple(
        MenuItem(id=entry.id, name=entry.name, price=entry.price, category="drink")
        for entry in menu.bebidas
    )

    seen: set[int] = set()
    duplicated: list[int] = []
    for item in pizzas + drinks:
        if item.id in seen and item.id not in duplicated:
            duplicated.append(item.id)
        seen.add(item.id)
    if duplicated:
        raise CatalogError(tenant, [f"id duplicado: {item_id}" for item_id in duplicated])

    return Catalog(tenant=tenant, pizzas=pizzas, drinks=drinks)


def load_catalog(tenant: str, establishments_path: Path = ESTABLISHMENTS_PATH) -> Catalog:
    menu_path = Path(establishments_path) / tenant / MENU_FILENAME
    if not menu_path.is_file():
        raise CatalogNotFound(tenant, [f"arquivo {MENU_FILENAME} não encontrado em {menu_path.parent}"])

    try:
        raw = menu_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogError(tenant, [f"não foi possível ler {MENU_FILENAME}: {exc}"]) from exc

    catalog = parse_catalog(tenant, raw)
    logger.info(
        "Cardápio carregado: tenant=%s pizzas=%s bebidas=%s",
        tenant,
        len(catalog.pizzas),
        len(catalog.drinks),
    )
    return catalog
