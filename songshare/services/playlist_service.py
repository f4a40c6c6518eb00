# ============================================================================
# FILE: songshare/services/playlist_service.py
# ============================================================================
from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session
from songshare.core.exceptions import DependencyError, ForbiddenError, NotFoundError
from songshare.core.security import Principal
from songshare.db.models.playlist import Playlist, PlaylistSong
from songshare.db.repository import playlist_repository, song_repository
from songshare.schemas.playlist import PlaylistCreate, PlaylistResponse, PlaylistUpdate
from songshare.schemas.song import SongResponse
from songshare.services.song_service import song_service
import logging

logger = logging.getLogger(__name__)

class PlaylistService:
    """Service layer for playlist operations"""

    def create_playlist(self, db: Session, user_id: int, playlist_data: PlaylistCreate) -> Playlist:
        """Create a new playlist for a user"""
        try:
            playlist = Playlist(
                user_id=user_id,
                name=playlist_data.name,
                description=playlist_data.description
            )
            db.add(playlist)
            db.commit()
            db.refresh(playlist)
            logger.info(f"Playlist created: {playlist.id} for user {user_id}")
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating playlist: {e}")
            raise DependencyError("Failed to create playlist") from e

    def get_user_playlists(self, db: Session, user_id: int) -> List[Playlist]:
        """Get all live playlists for a user"""
        return (
            playlist_repository.query(db)
            .filter(Playlist.user_id == user_id)
            .order_by(Playlist.created_at.desc(), Playlist.id.desc())
            .all()
        )

    def get_playlist(self, db: Session, playlist_id: int) -> Playlist:
        playlist = playlist_repository.get(db, playlist_id)
        if not playlist:
            raise NotFoundError("Playlist", playlist_id)
        return playlist

    def get_owned_playlist(self, db: Session, playlist_id: int, principal: Principal) -> Playlist:
        """Get a playlist the principal may modify"""
        playlist = self.get_playlist(db, playlist_id)
        if not principal.can_modify(playlist.user_id, allow_admin=False):
            raise ForbiddenError("Forbidden")
        return playlist

    def update_playlist(self, db: Session, playlist_id: int, principal: Principal, update_data: PlaylistUpdate) -> Playlist:
        """Update playlist details"""
        playlist = self.get_owned_playlist(db, playlist_id, principal)

        try:
            if update_data.name is not None:
                playlist.name = update_data.name
            if update_data.description is not None:
                playlist.description = update_data.description

            db.commit()
            db.refresh(playlist)
            logger.info(f"Playlist updated: {playlist_id}")
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating playlist: {e}")
            raise DependencyError("Failed to update playlist") from e

    def delete_playlist(self, db: Session, playlist_id: int, principal: Principal) -> None:
        """Soft-delete a playlist"""
        playlist = self.get_owned_playlist(db, playlist_id, principal)

        try:
            playlist_repository.soft_delete(db, playlist)
            db.commit()
            logger.info(f"Playlist deleted: {playlist_id}")
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting playlist: {e}")
            raise DependencyError("Failed to delete playlist") from e

    def add_song_to_playlist(self, db: Session, playlist_id: int, principal: Principal, song_id: int) -> Playlist:
        """Append a song to the end of a playlist"""
        playlist = self.get_owned_playlist(db, playlist_id, principal)
        song_service.get_song(db, song_id)

        # Check if song already exists in playlist
        existing = db.query(PlaylistSong).filter(
            PlaylistSong.playlist_id == playlist_id,
            PlaylistSong.song_id == song_id
        ).first()

        if existing:
            logger.info(f"Song already in playlist: {song_id}")
            return playlist

        try:
            last = db.query(func.max(PlaylistSong.position)).filter(
                PlaylistSong.playlist_id == playlist_id
            ).scalar()
            position = 0 if last is None else last + 1
            db.add(PlaylistSong(playlist_id=playlist_id, song_id=song_id, position=position))
            db.commit()
            db.refresh(playlist)
            logger.info(f"Song added to playlist {playlist_id}: {song_id}")
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error adding song to playlist: {e}")
            raise DependencyError("Failed to add song to playlist") from e

    def remove_song_from_playlist(self, db: Session, playlist_id: int, principal: Principal, song_id: int) -> Playlist:
        """Remove a song from a playlist"""
        playlist = self.get_owned_playlist(db, playlist_id, principal)

        playlist_song = db.query(PlaylistSong).filter(
            PlaylistSong.playlist_id == playlist_id,
            PlaylistSong.song_id == song_id
        ).first()
        if not playlist_song:
            raise NotFoundError("Song in playlist", song_id)

        try:
            db.delete(playlist_song)
            db.commit()
            db.refresh(playlist)
            logger.info(f"Song removed from playlist {playlist_id}: {song_id}")
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error removing song from playlist: {e}")
            raise DependencyError("Failed to remove song from playlist") from e

    def to_response(self, db: Session, playlist: Playlist) -> PlaylistResponse:
        """Playlist with its live songs in playlist order"""
        songs = song_repository.get_many(db, [entry.song_id for entry in playlist.entries])
        return PlaylistResponse(
            id=playlist.id,
            user_id=playlist.user_id,
            name=playlist.name,
            description=playlist.description,
            created_at=playlist.created_at,
            updated_at=playlist.updated_at,
            songs=[
                SongResponse.model_validate(songs[entry.song_id])
                for entry in playlist.entries
                if entry.song_id in songs
            ],
        )

# Create singleton instance
playlist_service = PlaylistService()
