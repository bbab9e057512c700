from sqlalchemy import Column, String, Boolean, Numeric, DateTime, ForeignKey
from sidebets.core.database import Base, utcnow
from sidebets.models._ids import new_id
from sidebets.models.enums import MemberRole, MembershipStatus

class Group(Base):
    __tablename__ = "groups"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    default_credits = Column(Numeric(10, 2), nullable=False, default=1000)
    allow_creator_wagers = Column(Boolean, nullable=False, default=True)
    created_by_id = Column(String(36), nullable=False)
    created_at = Column(DateTime, default=utcnow)


class GroupMembership(Base):
    __tablename__ = "group_memberships"

    user_id = Column(String(36), primary_key=True)
    group_id = Column(String(36), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True)
    role = Column(String(16), nullable=False, default=MemberRole.MEMBER.value)
    status = Column(String(16), nullable=False, default=MembershipStatus.PENDING.value)
    joined_at = Column(DateTime, default=utcnow)
