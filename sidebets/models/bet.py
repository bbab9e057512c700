from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sidebets.core.database import Base, utcnow
from sidebets.models._ids import new_id
from sidebets.models.enums import BetStatus

class Bet(Base):
    __tablename__ = "bets"

    id = Column(String(36), primary_key=True, default=new_id)
    group_id = Column(String(36), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(String(36), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=BetStatus.OPEN.value)
    event_date = Column(DateTime, nullable=True)
    locks_at = Column(DateTime, nullable=True)
    settled_at = Column(DateTime, nullable=True)
    winning_option_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    options = relationship(
        "BetOption",
        back_populates="bet",
        order_by="BetOption.order",
        cascade="all, delete-orphan",
    )


class BetOption(Base):
    __tablename__ = "bet_options"

    id = Column(String(36), primary_key=True, default=new_id)
    bet_id = Column(String(36), ForeignKey("bets.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    american_odds = Column(Integer, nullable=False)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)

    bet = relationship("Bet", back_populates="options")
