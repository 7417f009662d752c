from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

Category = Literal["pizza", "drink"]


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("nome vazio")
    return value


ItemId = Annotated[int, Field(gt=0, strict=True)]
ItemName = Annotated[str, AfterValidator(_not_blank)]
Price = Annotated[Decimal, Field(ge=0)]


class MenuItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: ItemId
    name: ItemName
    price: Price
    category: Category
    ingredients: Optional[str] = None


class PizzaEntry(BaseModel):
    id: ItemId
    name: ItemName
    price: Price
    ingredients: Optional[str] = None


class DrinkEntry(BaseModel):
    id: ItemId
    name: ItemName
    price: Price


class MenuFile(BaseModel):
    """Formato lógico do menu.json de um estabelecimento."""

    pizzas: list[PizzaEntry]
    bebidas: list[DrinkEntry]


class Catalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    tenant: str
    pizzas: tuple[MenuItem, ...] = ()
    drinks: tuple[MenuItem, ...] = ()

    @property
    def items(self) -> tuple[MenuItem, ...]:
        return self.pizzas + self.drinks

    def find(self, item_id: int) -> MenuItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
