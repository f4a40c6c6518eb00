"""Tests for the user stats aggregate."""

from datetime import datetime, timedelta, timezone

import pytest

from songshare.core.exceptions import DependencyError
from songshare.db.models.favorite import Favorite
from songshare.db.models.playlist import Playlist
from songshare.db.repository import song_repository
from songshare.services.stats_service import days_since, stats_service


class TestDaysSince:
    def test_floors_to_whole_days(self) -> None:
        now = datetime(2024, 3, 10, 12, 0)
        assert days_since(now - timedelta(days=3, hours=23), now) == 3

    def test_missing_timestamp_counts_as_now(self) -> None:
        assert days_since(None) == 0

    def test_timezone_aware_timestamps(self) -> None:
        created = datetime.now(timezone.utc) - timedelta(days=2, minutes=1)
        assert days_since(created) == 2


class TestGetStats:
    async def test_counts_only_live_rows(self, db, session_factory, make_user, make_song) -> None:
        user = make_user()
        other = make_user("bob")
        songs = [make_song(user, title=f"S{i}") for i in range(3)]
        make_song(other)
        song_repository.soft_delete(db, songs[2])
        db.add_all([
            Favorite(user_id=user.id, song_id=songs[0].id),
            Favorite(user_id=user.id, song_id=songs[1].id, is_deleted=True),
            Playlist(user_id=user.id, name="Mix"),
            Playlist(user_id=user.id, name="Old", is_deleted=True),
            Playlist(user_id=other.id, name="Theirs"),
        ])
        db.commit()

        stats = await stats_service.get_stats(session_factory, user.id)

        assert stats.uploaded_count == 2
        assert stats.favorite_count == 1
        assert stats.playlist_count == 1
        assert stats.days_since_created == 0
        assert stats.followed_count == 0

    async def test_days_since_created_uses_account_timestamp(self, db, session_factory, make_user) -> None:
        user = make_user()
        user.created_at = datetime.utcnow() - timedelta(days=10, hours=1)
        db.commit()

        stats = await stats_service.get_stats(session_factory, user.id)

        assert stats.days_since_created == 10

    async def test_any_failing_query_fails_the_whole_call(self, session_factory, make_user, monkeypatch) -> None:
        user = make_user()
        calls = []

        def flaky_count(factory, repository, **filters):
            calls.append(repository.model.__name__)
            if repository.model.__name__ == "Favorite":
                raise RuntimeError("favorites table locked")
            return 1

        monkeypatch.setattr(stats_service, "_count", flaky_count)

        with pytest.raises(DependencyError):
            await stats_service.get_stats(session_factory, user.id)
        # the other queries still ran to completion
        assert sorted(calls) == ["Favorite", "Playlist", "Song"]
