from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    default_credits: Optional[Decimal] = Field(default=None, ge=0, le=1000000)
    allow_creator_wagers: bool = True

class GroupResponse(BaseModel):
    id: str
    name: str
    default_credits: Decimal
    allow_creator_wagers: bool
    created_by_id: str
    created_at: datetime

    class Config:
        from_attributes = True

class MemberAdmit(BaseModel):
    user_id: str
    role: str = Field(default="member", pattern="^(admin|member)$")

class MembershipResponse(BaseModel):
    user_id: str
    group_id: str
    role: str
    status: str
    joined_at: datetime

    class Config:
        from_attributes = True
