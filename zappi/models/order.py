from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text, func

from zappi.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)

    tenant = Column(String, index=True, nullable=False)
    identity = Column(String, index=True, nullable=False)

    # [{"name": ..., "price": ...}]
    order_details = Column(Text, nullable=False)
    total_price = Column(Numeric(12, 4), nullable=False)

    # {"type": "Atendente" | "Retirada" | "Delivery", "address"?, "name"?, "phone"?}
    customer_info = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
