from __future__ import annotations

import json
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from zappi.models.order import Order
from zappi.schemas.conversation import Fulfillment
from zappi.schemas.menu import MenuItem

logger = logging.getLogger(__name__)


class OrderRecorder:
    """Livro de pedidos concluídos. Só insere; nunca altera nem apaga."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def record(
        self,
        tenant: str,
        identity: str,
        items: list[MenuItem],
        fulfillment: Fulfillment,
    ) -> Order:
        total = sum((item.price for item in items), Decimal("0"))
        order = Order(
            tenant=tenant,
            identity=identity,
            order_details=json.dumps(
                [{"name": item.name, "price": str(item.price)} for item in items],
                ensure_ascii=False,
            ),
            total_price=total,
            customer_info=json.dumps(
                fulfillment.model_dump(exclude_none=True), ensure_ascii=False
            ),
        )
        self._db.add(order)
        # flush para que uma falha de escrita apareça aqui, antes do commit
        self._db.flush()
        logger.info(
            "Pedido registrado: tenant=%s identity=%s order_id=%s tipo=%s total=%s",
            tenant,
            identity,
            order.id,
            fulfillment.type,
            total,
        )
        return order
