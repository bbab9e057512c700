from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

class OptionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    american_odds: int
    description: Optional[str] = Field(default=None, max_length=500)

class BetCreate(BaseModel):
    group_id: str
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_date: Optional[datetime] = None
    locks_at: Optional[datetime] = None
    options: List[OptionCreate]

class BetSettle(BaseModel):
    winning_option_id: str

class OptionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    american_odds: int
    order: int

    class Config:
        from_attributes = True

class BetResponse(BaseModel):
    id: str
    group_id: str
    created_by_id: str
    title: str
    description: Optional[str]
    status: str
    event_date: Optional[datetime]
    locks_at: Optional[datetime]
    settled_at: Optional[datetime]
    winning_option_id: Optional[str]
    options: List[OptionResponse]

    class Config:
        from_attributes = True

class WagerCreate(BaseModel):
    option_id: str
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)

class WagerResponse(BaseModel):
    id: str
    bet_id: str
    option_id: str
    user_id: str
    amount: Decimal
    odds_at_wager: int
    potential_payout: Decimal
    result: str
    created_at: datetime

    class Config:
        from_attributes = True
