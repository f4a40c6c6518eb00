# ============================================================================
# FILE: songshare/schemas/song.py
# ============================================================================
from typing import Optional
from datetime import datetime
from songshare.schemas.common import CamelModel

class SongResponse(CamelModel):
    """Schema for song response"""
    id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    img_url: str
    track_url: str
    count_play: int = 0
    count_like: int = 0
    uploader_id: int
    created_at: datetime

class LikeResponse(CamelModel):
    song_id: int
    liked: bool
    count_like: int
