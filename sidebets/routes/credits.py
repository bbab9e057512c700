from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sidebets.core.database import transaction
from sidebets.routes.dependencies import get_current_user, get_db
from sidebets.schemas.credits import (
    AdjustRequest,
    BalanceResponse,
    LeaderboardEntry,
    ReconciliationResponse,
    TransactionResponse,
)
from sidebets.services import ledger_service, membership_service, stats_service

router = APIRouter(prefix="/credits", tags=["Credits"])

@router.get("/{group_id}", response_model=BalanceResponse)
def get_my_credits(group_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    membership_service.verify_membership(db, user_id, group_id)
    balance = ledger_service.get_balance(db, user_id, group_id)
    return {
        "available_balance": balance.available,
        "allocated_balance": balance.allocated,
        "total_balance": balance.total,
    }

@router.get("/{group_id}/leaderboard", response_model=list[LeaderboardEntry])
def leaderboard(group_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return stats_service.leaderboard(db, group_id, user_id)

@router.get("/{group_id}/transactions", response_model=list[TransactionResponse])
def transactions(
    group_id: str,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return stats_service.transaction_history(db, group_id, user_id, limit=limit, offset=offset)

@router.get("/{group_id}/reconcile", response_model=ReconciliationResponse)
def reconcile(
    group_id: str,
    member_id: Optional[str] = None,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return stats_service.reconcile_member(db, group_id, member_id or user_id, user_id)

@router.post("/{group_id}/adjust", response_model=TransactionResponse)
def adjust_credits(
    group_id: str,
    data: AdjustRequest,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with transaction(db):
        membership_service.verify_admin(db, user_id, group_id)
        membership_service.verify_membership(db, data.target_user_id, group_id)
        tx = ledger_service.admin_adjust(db, data.target_user_id, group_id, data.amount, data.note, user_id)
    return tx
