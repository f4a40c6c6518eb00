# ============================================================================
# FILE: songshare/db/models/favorite.py
# ============================================================================
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index, text
from datetime import datetime
from songshare.db.base import Base, SoftDeleteMixin

class Favorite(SoftDeleteMixin, Base):
    """A user liking a song"""
    __tablename__ = "favorites"
    __table_args__ = (
        Index(
            "uq_favorites_user_song_live",
            "user_id",
            "song_id",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    song_id = Column(Integer, ForeignKey("songs.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
