# ============================================================================
# FILE: songshare/services/stats_service.py
# ============================================================================
import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from songshare.core.exceptions import DependencyError
from songshare.db.models.user import User
from songshare.db.repository import (
    SoftDeleteRepository,
    favorite_repository,
    playlist_repository,
    song_repository,
)
from songshare.schemas.user import UserStats
import logging

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400

def days_since(created_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Whole days elapsed since created_at; a missing timestamp counts as now"""
    if created_at is None:
        return 0
    if created_at.tzinfo is not None:
        now = now or datetime.now(timezone.utc)
    else:
        now = now or datetime.utcnow()
    elapsed = (now - created_at).total_seconds()
    return max(0, int(elapsed // SECONDS_PER_DAY))

class StatsService:
    """Profile statistics computed from sibling tables"""

    async def get_stats(self, session_factory: Callable[[], Session], user_id: int) -> UserStats:
        """
        Run the four sub-queries in parallel and combine them

        Each query gets its own session on a worker thread. All four are awaited
        before anything is combined; if any one failed, the whole call fails.
        """
        results = await asyncio.gather(
            run_in_threadpool(self._count, session_factory, song_repository, uploader_id=user_id),
            run_in_threadpool(self._count, session_factory, favorite_repository, user_id=user_id),
            run_in_threadpool(self._count, session_factory, playlist_repository, user_id=user_id),
            run_in_threadpool(self._created_at, session_factory, user_id),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(f"Stats query failed for user {user_id}: {failures[0]}")
            raise DependencyError("Failed to load user stats") from failures[0]

        uploaded_count, favorite_count, playlist_count, created_at = results
        return UserStats(
            uploaded_count=uploaded_count,
            favorite_count=favorite_count,
            playlist_count=playlist_count,
            days_since_created=days_since(created_at),
            followed_count=0,
        )

    @staticmethod
    def _count(session_factory: Callable[[], Session], repository: SoftDeleteRepository, **filters) -> int:
        db = session_factory()
        try:
            return repository.count(db, **filters)
        finally:
            db.close()

    @staticmethod
    def _created_at(session_factory: Callable[[], Session], user_id: int) -> Optional[datetime]:
        db = session_factory()
        try:
            return db.query(User.created_at).filter(User.id == user_id).scalar()
        finally:
            db.close()

# Create singleton instance
stats_service = StatsService()
