from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sidebets.routes.dependencies import get_db
from sidebets.services import stats_service

router = APIRouter(prefix="/stats", tags=["Stats"])

@router.get("/summary")
def summary(db: Session = Depends(get_db)):
    return stats_service.platform_summary(db)
