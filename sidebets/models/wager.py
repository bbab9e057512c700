from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, UniqueConstraint
from sidebets.core.database import Base, utcnow
from sidebets.models._ids import new_id
from sidebets.models.enums import BetResult

class Wager(Base):
    __tablename__ = "wagers"
    __table_args__ = (UniqueConstraint("bet_id", "user_id", name="uq_wager_per_user_bet"),)

    id = Column(String(36), primary_key=True, default=new_id)
    bet_id = Column(String(36), ForeignKey("bets.id", ondelete="CASCADE"), nullable=False, index=True)
    option_id = Column(String(36), ForeignKey("bet_options.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    odds_at_wager = Column(Integer, nullable=False)
    potential_payout = Column(Numeric(10, 2), nullable=False)
    result = Column(String(16), nullable=False, default=BetResult.PENDING.value)
    created_at = Column(DateTime, default=utcnow)
