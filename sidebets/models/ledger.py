from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, CheckConstraint
from sidebets.core.database import Base, utcnow

class LedgerEntry(Base):
    __tablename__ = "member_credits"
    __table_args__ = (
        CheckConstraint("available_balance >= 0", name="ck_available_non_negative"),
        CheckConstraint("allocated_balance >= 0", name="ck_allocated_non_negative"),
    )

    user_id = Column(String(36), primary_key=True)
    group_id = Column(String(36), ForeignKey("groups.id"), primary_key=True)
    available_balance = Column(Numeric(10, 2), nullable=False, default=0)
    allocated_balance = Column(Numeric(10, 2), nullable=False, default=0)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
