from __future__ import annotations

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

from zappi.fsm import states
from zappi.schemas.menu import MenuItem

FulfillmentType = Literal["Atendente", "Retirada", "Delivery"]


class SessionData(BaseModel):
    # pode vir do banco com um valor que o engine não conhece
    state: str = states.INITIAL
    order: list[MenuItem] = Field(default_factory=list)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class Fulfillment(BaseModel):
    type: FulfillmentType
    address: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


class OrderRequest(BaseModel):
    items: list[MenuItem] = Field(default_factory=list)
    fulfillment: Fulfillment

    @property
    def total(self) -> Decimal:
        return sum((item.price for item in self.items), Decimal("0"))
