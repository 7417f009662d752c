from sqlalchemy import Column, String

from zappi.core.database import Base


class ProcessedMessage(Base):
    __tablename__ = "processed_messages"
    tenant = Column(String, primary_key=True)
    message_id = Column(String, primary_key=True)
