# expense_tracker/models/household.py
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, UniqueConstraint, Uuid
from expense_tracker.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemberRole(str, enum.Enum):
    owner = "owner"
    member = "member"


class MemberStatus(str, enum.Enum):
    active = "active"
    invited = "invited"
    removed = "removed"


class Household(Base):
    __tablename__ = "households"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(length=255), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Household name={self.name} id={self.id}>"


class HouseholdMember(Base):
    __tablename__ = "household_members"
    __table_args__ = (
        UniqueConstraint("household_id", "user_id", name="uq_household_members_household_user"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    household_id = Column(Uuid(as_uuid=True), ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(MemberRole, native_enum=False, length=20), nullable=False, default=MemberRole.member)
    status = Column(Enum(MemberStatus, native_enum=False, length=20), nullable=False, default=MemberStatus.invited)

    # Tenure: the oldest active member is the successor on ownership transfer
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def is_owner(self) -> bool:
        return self.role == MemberRole.owner

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.active

    def __repr__(self):
        return (
            f"<HouseholdMember household_id={self.household_id} user_id={self.user_id} "
            f"role={self.role} status={self.status}>"
        )
