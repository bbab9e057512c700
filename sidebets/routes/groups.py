from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sidebets.models.enums import MemberRole
from sidebets.routes.dependencies import get_current_user, get_db
from sidebets.schemas.group import GroupCreate, GroupResponse, MemberAdmit, MembershipResponse
from sidebets.services import membership_service

router = APIRouter(prefix="/groups", tags=["Groups"])

@router.post("/", response_model=GroupResponse, status_code=201)
def create_group(data: GroupCreate, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return membership_service.create_group(
        db, user_id, data.name,
        default_credits=data.default_credits,
        allow_creator_wagers=data.allow_creator_wagers,
    )

@router.post("/{group_id}/members", response_model=MembershipResponse, status_code=201)
def admit_member(
    group_id: str,
    data: MemberAdmit,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return membership_service.admit_member(db, group_id, data.user_id, user_id, role=MemberRole(data.role))
