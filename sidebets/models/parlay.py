from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sidebets.core.database import Base, utcnow
from sidebets.models._ids import new_id
from sidebets.models.enums import BetResult

class Parlay(Base):
    __tablename__ = "parlays"

    id = Column(String(36), primary_key=True, default=new_id)
    group_id = Column(String(36), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    combined_decimal_odds = Column(Numeric(12, 6), nullable=False)
    potential_payout = Column(Numeric(10, 2), nullable=False)
    result = Column(String(16), nullable=False, default=BetResult.PENDING.value)
    settled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    legs = relationship("ParlayLeg", back_populates="parlay", cascade="all, delete-orphan")


class ParlayLeg(Base):
    __tablename__ = "parlay_legs"

    id = Column(String(36), primary_key=True, default=new_id)
    parlay_id = Column(String(36), ForeignKey("parlays.id", ondelete="CASCADE"), nullable=False, index=True)
    bet_id = Column(String(36), ForeignKey("bets.id", ondelete="CASCADE"), nullable=False, index=True)
    option_id = Column(String(36), ForeignKey("bet_options.id", ondelete="CASCADE"), nullable=False)
    odds_at_placement = Column(Integer, nullable=False)
    result = Column(String(16), nullable=False, default=BetResult.PENDING.value)

    parlay = relationship("Parlay", back_populates="legs")
