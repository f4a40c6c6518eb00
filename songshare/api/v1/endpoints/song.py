# ============================================================================
# FILE: songshare/api/v1/endpoints/song.py
# ============================================================================
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
from songshare.db.session import get_db
from songshare.api.dependencies import get_blob_store, require_principal
from songshare.core.security import Principal
from songshare.core.storage import BlobStore
from songshare.schemas.common import MessageResponse
from songshare.schemas.history import PlayRecorded
from songshare.schemas.song import LikeResponse, SongResponse
from songshare.services.history_service import history_service
from songshare.services.song_service import song_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[SongResponse])
def list_songs(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Newest songs first"""
    return song_service.list_songs(db, limit, offset)

@router.post("/upload", response_model=List[SongResponse], status_code=status.HTTP_201_CREATED)
def upload_songs(
    files: Optional[List[UploadFile]] = File(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    principal: Principal = Depends(require_principal)
):
    """
    Upload up to 10 audio files at once
    One song is created per file, titled after the file name
    """
    return song_service.upload_tracks(db, store, principal, files, description, category)

@router.get("/{song_id}", response_model=SongResponse)
def get_song(
    song_id: int,
    db: Session = Depends(get_db)
):
    """Get a single song"""
    return song_service.get_song(db, song_id)

@router.put("/{song_id}", response_model=SongResponse)
def update_song(
    song_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    cover: Optional[UploadFile] = File(None),
    track: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    principal: Principal = Depends(require_principal)
):
    """
    Update song info, optionally replacing cover and/or track
    Uploader or admin only
    """
    result = song_service.update_song(
        db, store, principal, song_id,
        title=title, description=description, category=category,
        cover=cover, track=track,
    )
    return result.entity

@router.post("/{song_id}/cover", response_model=SongResponse)
def update_cover(
    song_id: int,
    cover: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    principal: Principal = Depends(require_principal)
):
    """
    Replace a song's cover image
    Uploader or admin only
    """
    return song_service.replace_cover(db, store, principal, song_id, cover).entity

@router.delete("/{song_id}", response_model=MessageResponse)
def delete_song(
    song_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    principal: Principal = Depends(require_principal)
):
    """Soft-delete a song (uploader or admin)"""
    song_service.delete_song(db, store, principal, song_id)
    return MessageResponse(message="Song deleted successfully")

@router.post("/{song_id}/play", response_model=PlayRecorded, status_code=status.HTTP_201_CREATED)
def track_play(
    song_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Track song play in history
    Requires authentication
    """
    entry = history_service.record_play(db, principal.id, song_id)
    return PlayRecorded(history_id=entry.id, song_id=entry.song_id, listened_at=entry.listened_at)

@router.post("/{song_id}/like", response_model=LikeResponse)
def like_song(
    song_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """Add the song to the caller's favorites"""
    song = song_service.like_song(db, principal.id, song_id)
    return LikeResponse(song_id=song.id, liked=True, count_like=song.count_like)

@router.delete("/{song_id}/like", response_model=LikeResponse)
def unlike_song(
    song_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """Remove the song from the caller's favorites"""
    song = song_service.unlike_song(db, principal.id, song_id)
    return LikeResponse(song_id=song.id, liked=False, count_like=song.count_like)
