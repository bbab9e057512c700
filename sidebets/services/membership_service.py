import logging
from typing import Optional

from sqlalchemy.orm import Session

from sidebets.core.config import settings
from sidebets.core.database import transaction
from sidebets.core.errors import Conflict, Forbidden, NotFound, ValidationError
from sidebets.models import Group, GroupMembership
from sidebets.models.enums import MemberRole, MembershipStatus
from sidebets.services import ledger_service, queries

logger = logging.getLogger(__name__)


def verify_membership(db: Session, user_id: str, group_id: str) -> GroupMembership:
    membership = queries.get_membership(db, user_id, group_id)
    if membership is None or membership.status != MembershipStatus.APPROVED.value:
        raise Forbidden("You are not a member of this group")
    return membership


def verify_admin(db: Session, user_id: str, group_id: str) -> GroupMembership:
    membership = verify_membership(db, user_id, group_id)
    if membership.role != MemberRole.ADMIN.value:
        raise Forbidden("Only admins can perform this action")
    return membership


def is_admin(membership: GroupMembership) -> bool:
    return membership.role == MemberRole.ADMIN.value


def get_group(db: Session, group_id: str) -> Group:
    group = queries.get_group(db, group_id)
    if group is None:
        raise NotFound("Group not found")
    return group


def create_group(
    db: Session,
    user_id: str,
    name: str,
    default_credits=None,
    allow_creator_wagers: bool = True,
) -> Group:
    """Create a group with the caller as its approved admin, seeding their credits."""
    if not name or not name.strip():
        raise ValidationError("Group name is required")
    if default_credits is None:
        default_credits = settings.DEFAULT_CREDITS
    if default_credits < 0:
        raise ValidationError("Default credits cannot be negative")

    with transaction(db):
        group = Group(
            name=name.strip(),
            default_credits=default_credits,
            allow_creator_wagers=allow_creator_wagers,
            created_by_id=user_id,
        )
        db.add(group)
        db.flush()

        db.add(GroupMembership(
            user_id=user_id,
            group_id=group.id,
            role=MemberRole.ADMIN.value,
            status=MembershipStatus.APPROVED.value,
        ))
        ledger_service.initialize(db, user_id, group.id, group.default_credits)

    logger.info("group %s created by %s with %s default credits", group.id, user_id, group.default_credits)
    return group


def admit_member(
    db: Session,
    group_id: str,
    user_id: str,
    admitted_by: str,
    role: MemberRole = MemberRole.MEMBER,
) -> GroupMembership:
    """Approve a user into a group and seed their ledger with the group's default credits.

    Invites and approval queues live outside the credit engine; this is the
    single point where an approved membership gets its starting balance.
    """
    with transaction(db):
        verify_admin(db, admitted_by, group_id)
        group = get_group(db, group_id)

        membership: Optional[GroupMembership] = queries.get_membership(db, user_id, group_id)
        if membership is not None and membership.status == MembershipStatus.APPROVED.value:
            raise Conflict("User is already a member of this group")
        if membership is None:
            membership = GroupMembership(user_id=user_id, group_id=group_id)
            db.add(membership)
        membership.role = role.value
        membership.status = MembershipStatus.APPROVED.value

        # a returning member keeps their historical ledger instead of a second seeding
        if queries.get_ledger_entry(db, user_id, group_id) is None:
            ledger_service.initialize(db, user_id, group_id, group.default_credits)

    logger.info("user %s admitted to group %s by %s", user_id, group_id, admitted_by)
    return membership
