# expense_tracker/models/user.py
import uuid
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from expense_tracker.core.database import Base
from expense_tracker.models.household import MemberStatus, utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(length=255), unique=True, index=True, nullable=False)
    name = Column(String(length=255), nullable=False)
    # Subject of the external identity provider (token "sub" claim)
    auth_provider_id = Column(String(length=255), unique=True, index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    memberships = relationship(
        "HouseholdMember",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def households(self):
        """Ids of the households this user is an active member of."""
        return [m.household_id for m in self.memberships if m.status == MemberStatus.active]

    def __repr__(self):
        return f"<User email={self.email} auth_provider_id={self.auth_provider_id}>"
