# ============================================================================
# FILE: songshare/services/history_service.py
# ============================================================================
"""
Listening history: append play events and read them back joined with songs.

Reads run in three steps: the user's latest history rows (sorted and limited
in the database), one batched query for the referenced live songs outer-joined
to their live uploaders, then an in-memory merge. Rows whose song is gone are
dropped; a missing uploader becomes UNKNOWN_ARTIST.
"""
from datetime import datetime
from typing import Dict, Iterator, Optional, Tuple
from sqlalchemy.orm import Session
from songshare.config import settings
from songshare.core.exceptions import DependencyError, ValidationError
from songshare.db.models.history import History
from songshare.db.models.song import Song
from songshare.db.models.user import User
from songshare.db.repository import history_repository, song_repository, user_repository
from songshare.schemas.history import HistoryEntry
from songshare.services.song_service import song_service
import logging

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"

class HistoryService:
    """Service layer for listening history"""

    def record_play(self, db: Session, user_id: int, song_id: int) -> History:
        """
        Append a play event and bump the song's play counter

        Every call creates a new row; repeated plays are not merged.
        """
        song_service.get_song(db, song_id)

        entry = History(user_id=user_id, song_id=song_id, listened_at=datetime.utcnow())
        try:
            db.add(entry)
            db.query(Song).filter(Song.id == song_id).update(
                {Song.count_play: Song.count_play + 1}, synchronize_session=False
            )
            db.commit()
            db.refresh(entry)
        except Exception as e:
            db.rollback()
            logger.error(f"Error tracking playback: {e}")
            raise DependencyError("Failed to record play") from e

        logger.info(f"Playback tracked for user {user_id}: song {song_id}")
        return entry

    def get_history(self, db: Session, user_id: int, limit: Optional[int] = None) -> Iterator[HistoryEntry]:
        """
        Most recent plays first, at most `limit` entries

        Returns a generator: nothing is queried until it is iterated, and each
        call starts from fresh queries. A limit below 1 is rejected up front.
        """
        limit = settings.HISTORY_LIMIT if limit is None else limit
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        return self._iter_history(db, user_id, limit)

    def _iter_history(self, db: Session, user_id: int, limit: int) -> Iterator[HistoryEntry]:
        rows = (
            history_repository.query(db)
            .filter(History.user_id == user_id)
            .order_by(History.listened_at.desc(), History.id.desc())
            .limit(limit)
            .all()
        )
        if not rows:
            return

        songs = self._load_songs(db, {row.song_id for row in rows})

        for row in rows:
            joined = songs.get(row.song_id)
            if joined is None:
                continue
            song, artist = joined
            try:
                yield HistoryEntry(
                    history_id=row.id,
                    id=song.id,
                    title=song.title,
                    artist=artist or UNKNOWN_ARTIST,
                    img_url=song.img_url or "",
                    track_url=song.track_url,
                    count_play=song.count_play or 0,
                    count_like=song.count_like or 0,
                    listened_at=row.listened_at,
                )
            except ValueError as e:
                # pydantic.ValidationError; one broken row must not sink the page
                logger.warning(f"Skipping history row {row.id}: {e}")

    def _load_songs(self, db: Session, song_ids) -> Dict[int, Tuple[Song, Optional[str]]]:
        """One query: live songs with their live uploader's username (or None)"""
        results = (
            db.query(Song, User.username)
            .outerjoin(User, (User.id == Song.uploader_id) & user_repository.live())
            .filter(Song.id.in_(song_ids), song_repository.live())
            .all()
        )
        return {song.id: (song, username) for song, username in results}

# Create singleton instance
history_service = HistoryService()
