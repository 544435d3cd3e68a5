"""
Database models.
"""

from storefront.db.models.category import Category, Subcategory, Subsubcategory
from storefront.db.models.product import Product
from storefront.db.models.user import User, UserRole, UserSession

__all__ = [
    "Category",
    "Product",
    "Subcategory",
    "Subsubcategory",
    "User",
    "UserRole",
    "UserSession",
]
