"""
Models owned by the admin panel.

Import models from this module to ensure they're registered with SQLAlchemy.
"""

from adminpanel.models.base import Base, ModelMixin, TimestampMixin, utc_now
from adminpanel.models.user import AdminRole, AdminUser, MongoAdminUser

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "ModelMixin",
    "utc_now",
    # Models
    "AdminRole",
    "AdminUser",
    "MongoAdminUser",
]
