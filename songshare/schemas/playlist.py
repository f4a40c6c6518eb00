# ============================================================================
# FILE: songshare/schemas/playlist.py
# ============================================================================
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from songshare.schemas.common import CamelModel
from songshare.schemas.song import SongResponse

class PlaylistCreate(BaseModel):
    """Schema for creating a playlist"""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None

class PlaylistUpdate(BaseModel):
    """Schema for updating a playlist"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None

class PlaylistSongAdd(CamelModel):
    """Schema for adding a song to playlist"""
    song_id: int

class PlaylistResponse(CamelModel):
    """Schema for playlist response; songs are in playlist order"""
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    songs: List[SongResponse] = []
