# ============================================================================
# FILE: songshare/db/base.py
# ============================================================================
from sqlalchemy import Boolean, Column
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class SoftDeleteMixin:
    """Adds the is_deleted flag; rows are never physically removed"""
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)

def load_models():
    """Import every model module so Base.metadata knows all tables"""
    from songshare.db.models import user, song, favorite, playlist, history  # noqa: F401
