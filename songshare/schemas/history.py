# ============================================================================
# FILE: songshare/schemas/history.py
# ============================================================================
from datetime import datetime
from songshare.schemas.common import CamelModel

class HistoryEntry(CamelModel):
    """A play event joined with its song and the song's uploader"""
    history_id: int
    id: int  # song id
    title: str
    artist: str
    img_url: str = ""
    track_url: str
    count_play: int = 0
    count_like: int = 0
    listened_at: datetime

class PlayRecorded(CamelModel):
    history_id: int
    song_id: int
    listened_at: datetime
