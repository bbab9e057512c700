from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sidebets.routes.dependencies import get_current_user, get_db
from sidebets.schemas.parlay import ParlayCreate, ParlayResponse
from sidebets.services import parlay_service
from sidebets.services.parlay_service import LegSpec

router = APIRouter(prefix="/parlays", tags=["Parlays"])


def _to_response(parlay) -> ParlayResponse:
    response = ParlayResponse.model_validate(parlay)
    response.american_odds = parlay_service.effective_american_odds(parlay)
    return response

@router.post("/", response_model=ParlayResponse, status_code=201)
def create_parlay(data: ParlayCreate, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    parlay = parlay_service.create_parlay(
        db, user_id, data.group_id, data.amount,
        [LegSpec(bet_id=leg.bet_id, option_id=leg.option_id) for leg in data.legs],
    )
    return _to_response(parlay)

@router.delete("/{parlay_id}", status_code=204)
def cancel_parlay(parlay_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    parlay_service.cancel_parlay(db, user_id, parlay_id)

@router.get("/group/{group_id}", response_model=list[ParlayResponse])
def group_parlays(group_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_to_response(p) for p in parlay_service.list_group_parlays(db, group_id, user_id)]

@router.get("/group/{group_id}/mine", response_model=list[ParlayResponse])
def my_parlays(group_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_to_response(p) for p in parlay_service.list_my_parlays(db, group_id, user_id)]

@router.get("/{parlay_id}", response_model=ParlayResponse)
def get_parlay(parlay_id: str, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return _to_response(parlay_service.get_parlay(db, parlay_id, user_id))
