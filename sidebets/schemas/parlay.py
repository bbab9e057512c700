from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

class LegCreate(BaseModel):
    bet_id: str
    option_id: str

class ParlayCreate(BaseModel):
    group_id: str
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    legs: List[LegCreate]

class LegResponse(BaseModel):
    id: str
    bet_id: str
    option_id: str
    odds_at_placement: int
    result: str

    class Config:
        from_attributes = True

class ParlayResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    amount: Decimal
    combined_decimal_odds: Decimal
    american_odds: Optional[int] = None
    potential_payout: Decimal
    result: str
    settled_at: Optional[datetime]
    created_at: datetime
    legs: List[LegResponse]

    class Config:
        from_attributes = True
