from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sidebets.routes.dependencies import get_current_user, get_db
from sidebets.schemas.bet import WagerCreate, WagerResponse
from sidebets.services import wager_service

router = APIRouter(prefix="/wagers", tags=["Wagers"])

@router.post("/", response_model=WagerResponse, status_code=201)
def place_wager(data: WagerCreate, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return wager_service.place_wager(db, user_id, data.option_id, data.amount)

@router.delete("/{wager_id}", status_code=204)
def cancel_wager(wager_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    wager_service.cancel_wager(db, user_id, wager_id)

@router.get("/group/{group_id}", response_model=list[WagerResponse])
def my_wagers(group_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return wager_service.list_my_wagers(db, user_id, group_id)
