# expense_tracker/models/category.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from expense_tracker.core.database import Base

class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("household_id", "name", name="uq_categories_household_name"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    household_id = Column(Uuid(as_uuid=True), ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=255), nullable=False)

    subcategories = relationship("Subcategory", back_populates="category", passive_deletes="all")

    def __repr__(self):
        return f"<Category name={self.name} household_id={self.household_id}>"


class Subcategory(Base):
    __tablename__ = "subcategories"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    household_id = Column(Uuid(as_uuid=True), ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True)
    # No ON DELETE action: a category with subcategories is only removed when forced
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(length=255), nullable=False)

    category = relationship("Category", back_populates="subcategories")

    def __repr__(self):
        return f"<Subcategory name={self.name} category_id={self.category_id}>"
