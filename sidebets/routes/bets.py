from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sidebets.routes.dependencies import get_current_user, get_db
from sidebets.schemas.bet import BetCreate, BetResponse, BetSettle
from sidebets.services import bet_service
from sidebets.services.bet_service import OptionSpec

router = APIRouter(prefix="/bets", tags=["Bets"])

@router.post("/", response_model=BetResponse, status_code=201)
def create_bet(data: BetCreate, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return bet_service.create_bet(
        db, user_id, data.group_id, data.title,
        [OptionSpec(name=o.name, american_odds=o.american_odds, description=o.description) for o in data.options],
        description=data.description,
        event_date=data.event_date,
        locks_at=data.locks_at,
    )

@router.get("/group/{group_id}", response_model=list[BetResponse])
def list_bets(group_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return bet_service.list_group_bets(db, group_id, user_id)

@router.get("/{bet_id}", response_model=BetResponse)
def get_bet(bet_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return bet_service.get_bet(db, bet_id, user_id)

@router.post("/{bet_id}/lock", response_model=BetResponse)
def lock_bet(bet_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return bet_service.lock_bet(db, bet_id, user_id)

@router.post("/{bet_id}/settle", response_model=BetResponse)
def settle_bet(
    bet_id: str,
    data: BetSettle,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return bet_service.settle_bet(db, bet_id, data.winning_option_id, user_id)

@router.post("/{bet_id}/cancel", response_model=BetResponse)
def cancel_bet(bet_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return bet_service.cancel_bet(db, bet_id, user_id)

@router.delete("/{bet_id}", status_code=204)
def delete_bet(bet_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    bet_service.delete_bet(db, bet_id, user_id)
