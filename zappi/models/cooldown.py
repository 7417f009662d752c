from sqlalchemy import Column, DateTime, String

from zappi.core.database import Base


class Cooldown(Base):
    __tablename__ = "cooldowns"

    tenant = Column(String, primary_key=True)
    identity = Column(String, primary_key=True)
    cooldown_until = Column(DateTime(timezone=True), nullable=False)
