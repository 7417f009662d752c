from sqlalchemy import Column, DateTime, String, Text, func

from zappi.core.database import Base


class ConversationSession(Base):
    __tablename__ = "sessions"

    # uma sessão por cliente em cada estabelecimento
    tenant = Column(String, primary_key=True)
    identity = Column(String, primary_key=True)

    state = Column(String, nullable=True)

    # itens do pedido em andamento, JSON serializado
    order_items = Column(Text, default="[]", nullable=False)

    # dados de entrega, preenchidos nesta ordem
    full_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)

    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
