"""
Database models for the category tree.
"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.core.time_utils import utcnow
from storefront.db.session import Base


class Category(Base):
    """
    Top level of the category tree.
    """

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    order_index = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    subcategories = relationship("Subcategory", back_populates="category", order_by="Subcategory.order_index")


class Subcategory(Base):
    """
    Second level of the category tree.
    """

    __tablename__ = "subcategories"
    __table_args__ = (UniqueConstraint("category_id", "slug", name="uq_subcategories_category_slug"),)

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    category = relationship("Category", back_populates="subcategories")
    subsubcategories = relationship(
        "Subsubcategory", back_populates="subcategory", order_by="Subsubcategory.order_index"
    )


class Subsubcategory(Base):
    """
    Leaf level of the category tree.
    """

    __tablename__ = "subsubcategories"
    __table_args__ = (UniqueConstraint("subcategory_id", "slug", name="uq_subsubcategories_subcategory_slug"),)

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    subcategory_id = Column(String(36), ForeignKey("subcategories.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    subcategory = relationship("Subcategory", back_populates="subsubcategories")
