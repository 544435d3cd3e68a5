"""
Database model for products.
"""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)

from storefront.core.time_utils import utcnow
from storefront.db.session import Base


class Product(Base):
    """
    Database model for products.
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price_ht >= 0", name="ck_products_price_ht_non_negative"),
        CheckConstraint("price_ttc >= 0", name="ck_products_price_ttc_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    name = Column(String(255), nullable=False, index=True)
    reference = Column(String(100), nullable=False, unique=True, index=True)

    # Foreign keys
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    subcategory_id = Column(String(36), ForeignKey("subcategories.id", ondelete="SET NULL"), nullable=True)
    subsubcategory_id = Column(String(36), ForeignKey("subsubcategories.id", ondelete="SET NULL"), nullable=True)

    description = Column(Text, nullable=True)
    price_ht = Column(Float, nullable=False, default=0.0)
    price_ttc = Column(Float, nullable=False, default=0.0)
    images = Column(JSON, nullable=False, default=list)
    technical_specs = Column(JSON, nullable=False, default=dict)
    technical_doc_url = Column(String(500), nullable=True)
    video_url = Column(String(500), nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
