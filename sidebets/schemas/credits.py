from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

class BalanceResponse(BaseModel):
    available_balance: Decimal
    allocated_balance: Decimal
    total_balance: Decimal

class LeaderboardEntry(BaseModel):
    user_id: str
    available_balance: Decimal
    allocated_balance: Decimal
    total_balance: Decimal

    class Config:
        from_attributes = True

class AdjustRequest(BaseModel):
    target_user_id: str
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    note: Optional[str] = Field(default=None, max_length=500)

class TransactionResponse(BaseModel):
    id: str
    seq: int
    type: str
    amount: Decimal
    balance_after: Decimal
    allocated_after: Decimal
    wager_id: Optional[str]
    bet_id: Optional[str]
    parlay_id: Optional[str]
    adjusted_by_user_id: Optional[str]
    note: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True

class ReconciliationResponse(BaseModel):
    user_id: str
    group_id: str
    ok: bool
    transaction_count: int
    available: Decimal
    allocated: Decimal
    issues: List[str]

    class Config:
        from_attributes = True
