"""
Admin panel data access core.

CRUD over arbitrary entities through one contract backed by SQLAlchemy
Core, SQLAlchemy ORM or MongoDB, plus the session store gating access.
"""

__version__ = "0.3.0"
