from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Text, Integer, UniqueConstraint
from sidebets.core.database import Base, utcnow
from sidebets.models._ids import new_id

class CreditTransaction(Base):
    __tablename__ = "credit_transactions"
    # seq is the position of the row in its (user, group) history
    __table_args__ = (UniqueConstraint("user_id", "group_id", "seq", name="uq_credit_tx_seq"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False, index=True)
    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    seq = Column(Integer, nullable=False)
    type = Column(String(32), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    balance_after = Column(Numeric(10, 2), nullable=False)
    allocated_after = Column(Numeric(10, 2), nullable=False)

    wager_id = Column(String(36), ForeignKey("wagers.id", ondelete="SET NULL"), nullable=True)
    bet_id = Column(String(36), ForeignKey("bets.id", ondelete="SET NULL"), nullable=True)
    parlay_id = Column(String(36), ForeignKey("parlays.id", ondelete="SET NULL"), nullable=True)
    adjusted_by_user_id = Column(String(36), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
