# ============================================================================
# FILE: songshare/db/models/song.py
# ============================================================================
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from songshare.config import settings
from songshare.db.base import Base, SoftDeleteMixin

class Song(SoftDeleteMixin, Base):
    """Uploaded song; img_url is the cover handle, track_url the audio handle"""
    __tablename__ = "songs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    img_url = Column(String, nullable=False, default=settings.DEFAULT_COVER)
    track_url = Column(String, nullable=False)
    # Display counters, maintained by increments rather than recounted
    count_play = Column(Integer, nullable=False, default=0)
    count_like = Column(Integer, nullable=False, default=0)
    uploader_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    uploader = relationship("User", back_populates="songs")
