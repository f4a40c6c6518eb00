# ============================================================================
# FILE: songshare/db/models/history.py
# ============================================================================
from sqlalchemy import Column, Integer, DateTime, ForeignKey
from datetime import datetime
from songshare.db.base import Base, SoftDeleteMixin

class History(SoftDeleteMixin, Base):
    """One row per play event; immutable apart from is_deleted"""
    __tablename__ = "history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    song_id = Column(Integer, ForeignKey("songs.id"), nullable=False)
    listened_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
