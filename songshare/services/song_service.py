# ============================================================================
# FILE: songshare/services/song_service.py
# ============================================================================
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from songshare.config import settings
from songshare.core.exceptions import DependencyError, NotFoundError, ValidationError
from songshare.core.security import Principal
from songshare.core.storage import AssetCategory, BlobStore
from songshare.db.models.favorite import Favorite
from songshare.db.models.song import Song
from songshare.db.repository import favorite_repository, song_repository
from songshare.services.asset_service import COVER_SLOT, TRACK_SLOT, ReplaceResult, asset_service
from songshare.services.upload_service import TRACK_BATCH_POLICY, upload_service
import logging

logger = logging.getLogger(__name__)

class SongService:
    """Service layer for song operations"""

    def list_songs(self, db: Session, limit: int = 50, offset: int = 0) -> List[Song]:
        """Newest live songs first"""
        return (
            song_repository.query(db)
            .order_by(Song.created_at.desc(), Song.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_song(self, db: Session, song_id: int) -> Song:
        song = song_repository.get(db, song_id)
        if not song:
            raise NotFoundError("Song", song_id)
        return song

    def get_songs_by_uploader(self, db: Session, uploader_id: int) -> List[Song]:
        return (
            song_repository.query(db)
            .filter(Song.uploader_id == uploader_id)
            .order_by(Song.created_at.desc(), Song.id.desc())
            .all()
        )

    def upload_tracks(self, db: Session, store: BlobStore, principal: Principal,
                      files: Sequence[UploadFile], description: Optional[str] = None,
                      category: Optional[str] = None) -> List[Song]:
        """
        Store up to MAX_TRACK_FILES audio files and create one song per file

        Titles come from the original file names. If the songs can't be saved
        the freshly stored tracks are removed again, since nothing references them.
        """
        handles = upload_service.store_all(store, TRACK_BATCH_POLICY, files)
        names = [f.filename for f in files if f is not None and f.filename]

        songs = [
            Song(
                title=Path(name).stem or name,
                description=description,
                category=category,
                img_url=settings.DEFAULT_COVER,
                track_url=handle,
                uploader_id=principal.id,
            )
            for name, handle in zip(names, handles)
        ]
        try:
            db.add_all(songs)
            db.commit()
            for song in songs:
                db.refresh(song)
        except Exception as e:
            db.rollback()
            upload_service.discard(store, AssetCategory.TRACKS, handles)
            logger.error(f"Error creating songs: {e}")
            raise DependencyError("Failed to save uploaded songs") from e

        logger.info(f"User {principal.id} uploaded {len(songs)} song(s)")
        return songs

    def replace_cover(self, db: Session, store: BlobStore, principal: Principal,
                      song_id: int, upload: Optional[UploadFile]) -> ReplaceResult:
        song = self.get_song(db, song_id)
        asset_service.ensure_can_modify(principal, song.uploader_id)
        result = asset_service.replace(db, store, song, COVER_SLOT, upload)
        logger.info(f"Cover updated for song {song_id}: {song.img_url}")
        return result

    def update_song(self, db: Session, store: BlobStore, principal: Principal, song_id: int,
                    title: Optional[str] = None, description: Optional[str] = None,
                    category: Optional[str] = None, cover: Optional[UploadFile] = None,
                    track: Optional[UploadFile] = None) -> ReplaceResult:
        """Edit text fields and optionally swap cover and/or track in one commit"""
        song = self.get_song(db, song_id)
        asset_service.ensure_can_modify(principal, song.uploader_id)

        changes: Dict[str, Optional[str]] = {}
        if title is not None:
            if not title.strip():
                raise ValidationError("title must not be empty")
            changes["title"] = title.strip()
        if description is not None:
            changes["description"] = description
        if category is not None:
            changes["category"] = category

        result = asset_service.replace_many(
            db, store, song, [(COVER_SLOT, cover), (TRACK_SLOT, track)], changes=changes
        )
        logger.info(f"Song updated: {song_id}")
        return result

    def delete_song(self, db: Session, store: BlobStore, principal: Principal, song_id: int) -> None:
        """Soft-delete a song and remove its cover and track blobs"""
        song = self.get_song(db, song_id)
        asset_service.ensure_can_modify(principal, song.uploader_id)
        asset_service.retire(db, store, song, song_repository, [COVER_SLOT, TRACK_SLOT])
        logger.info(f"Song deleted: {song_id}")

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def like_song(self, db: Session, user_id: int, song_id: int) -> Song:
        """Mark a song as liked; liking twice is a no-op"""
        song = self.get_song(db, song_id)
        if favorite_repository.find_one(db, user_id=user_id, song_id=song_id):
            return song

        try:
            db.add(Favorite(user_id=user_id, song_id=song_id))
            db.query(Song).filter(Song.id == song_id).update(
                {Song.count_like: Song.count_like + 1}, synchronize_session=False
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(f"Song {song_id} already liked by user {user_id}")
        except Exception as e:
            db.rollback()
            logger.error(f"Error liking song: {e}")
            raise DependencyError("Failed to like song") from e

        db.refresh(song)
        return song

    def unlike_song(self, db: Session, user_id: int, song_id: int) -> Song:
        song = self.get_song(db, song_id)
        favorite = favorite_repository.find_one(db, user_id=user_id, song_id=song_id)
        if not favorite:
            return song

        try:
            favorite_repository.soft_delete(db, favorite)
            db.query(Song).filter(Song.id == song_id, Song.count_like > 0).update(
                {Song.count_like: Song.count_like - 1}, synchronize_session=False
            )
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error unliking song: {e}")
            raise DependencyError("Failed to unlike song") from e

        db.refresh(song)
        return song

    def get_liked_songs(self, db: Session, user_id: int) -> List[Song]:
        """Live songs the user has liked, most recent like first"""
        return (
            song_repository.query(db)
            .join(
                Favorite,
                (Favorite.song_id == Song.id) & favorite_repository.live(),
            )
            .filter(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .all()
        )

# Create singleton instance
song_service = SongService()
