# expense_tracker/models/expense.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Numeric, DateTime, Text, Uuid
from expense_tracker.core.database import Base
from expense_tracker.models.household import utcnow

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    household_id = Column(Uuid(as_uuid=True), ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    # Category and subcategory are stored by name, as the AI ingestion path produces them
    category = Column(String(length=255), nullable=False)
    subcategory = Column(String(length=255), nullable=True)
    expense_datetime = Column(DateTime(timezone=True), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Expense description={self.description} amount={self.amount} household_id={self.household_id}>"
