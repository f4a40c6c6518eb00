# ============================================================================
# FILE: songshare/api/v1/endpoints/playlist.py
# ============================================================================
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from songshare.db.session import get_db
from songshare.api.dependencies import require_principal
from songshare.core.security import Principal
from songshare.schemas.common import MessageResponse
from songshare.schemas.playlist import (
    PlaylistCreate,
    PlaylistUpdate,
    PlaylistResponse,
    PlaylistSongAdd
)
from songshare.services.playlist_service import playlist_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
def create_playlist(
    playlist_data: PlaylistCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Create a new playlist
    Requires authentication
    """
    playlist = playlist_service.create_playlist(db, principal.id, playlist_data)
    return playlist_service.to_response(db, playlist)

@router.get("/{playlist_id}", response_model=PlaylistResponse)
def get_playlist(
    playlist_id: int,
    db: Session = Depends(get_db)
):
    """Get a specific playlist with its songs in order"""
    playlist = playlist_service.get_playlist(db, playlist_id)
    return playlist_service.to_response(db, playlist)

@router.put("/{playlist_id}", response_model=PlaylistResponse)
def update_playlist(
    playlist_id: int,
    update_data: PlaylistUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Update playlist details (name, description)
    Requires authentication and ownership
    """
    playlist = playlist_service.update_playlist(db, playlist_id, principal, update_data)
    return playlist_service.to_response(db, playlist)

@router.delete("/{playlist_id}", response_model=MessageResponse)
def delete_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Delete a playlist
    Requires authentication and ownership
    """
    playlist_service.delete_playlist(db, playlist_id, principal)
    return MessageResponse(message="Playlist deleted successfully")

@router.post("/{playlist_id}/songs", response_model=PlaylistResponse)
def add_song_to_playlist(
    playlist_id: int,
    song_data: PlaylistSongAdd,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Append a song to a playlist
    Requires authentication and ownership
    """
    playlist = playlist_service.add_song_to_playlist(db, playlist_id, principal, song_data.song_id)
    return playlist_service.to_response(db, playlist)

@router.delete("/{playlist_id}/songs/{song_id}", response_model=PlaylistResponse)
def remove_song_from_playlist(
    playlist_id: int,
    song_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Remove a song from a playlist
    Requires authentication and ownership
    """
    playlist = playlist_service.remove_song_from_playlist(db, playlist_id, principal, song_id)
    return playlist_service.to_response(db, playlist)
