"""Tests for the replace-then-cleanup asset lifecycle."""

import io
import logging

import pytest

from conftest import make_upload
from songshare.config import settings
from songshare.core.exceptions import DependencyError, ForbiddenError, ValidationError
from songshare.core.security import Principal
from songshare.core.storage import AssetCategory, LocalBlobStore
from songshare.db.models.user import User
from songshare.db.repository import song_repository
from songshare.services.asset_service import (
    AVATAR_SLOT,
    COVER_SLOT,
    FAILED,
    SKIPPED,
    TRACK_SLOT,
    asset_service,
)


class FailingDeleteStore(LocalBlobStore):
    """Stores normally but every delete blows up"""

    def delete(self, category, handle):
        raise OSError("permission denied")


def _give_avatar(db, store, user, name="old.png"):
    handle = store.put(AssetCategory.AVATARS, io.BytesIO(b"old"), name, prefix="avatar-")
    user.img_url = handle
    db.commit()
    return handle


class TestReplace:
    def test_replace_commits_new_and_removes_old(self, db, store, make_user) -> None:
        user = make_user()
        old = _give_avatar(db, store, user)

        result = asset_service.replace(db, store, user, AVATAR_SLOT, make_upload("new.png"))

        new = result.handles["img_url"]
        assert db.get(User, user.id).img_url == new
        assert store.exists(AssetCategory.AVATARS, new)
        assert not store.exists(AssetCategory.AVATARS, old)
        assert result.cleanup[0].outcome == "deleted"

    def test_old_asset_stays_resolvable_until_commit(self, db, store, make_user, monkeypatch) -> None:
        user = make_user()
        old = _give_avatar(db, store, user)
        seen = {}
        real_commit = db.commit

        def observing_commit():
            seen["old_exists"] = store.exists(AssetCategory.AVATARS, old)
            real_commit()

        monkeypatch.setattr(db, "commit", observing_commit)
        asset_service.replace(db, store, user, AVATAR_SLOT, make_upload("new.png"))

        assert seen["old_exists"] is True
        assert not store.exists(AssetCategory.AVATARS, old)

    def test_sentinel_default_is_never_deleted(self, db, store, make_user) -> None:
        user = make_user()
        assert user.img_url == settings.DEFAULT_AVATAR
        sentinel = store.path_for(AssetCategory.AVATARS, settings.DEFAULT_AVATAR)
        sentinel.write_bytes(b"default")

        result = asset_service.replace(db, store, user, AVATAR_SLOT, make_upload("new.png"))

        assert sentinel.exists()
        assert result.cleanup[0].outcome == SKIPPED

    def test_cleanup_failure_keeps_committed_handle(self, db, tmp_path, make_user, caplog) -> None:
        store = FailingDeleteStore(str(tmp_path / "failing"))
        user = make_user()
        old = _give_avatar(db, store, user)

        with caplog.at_level(logging.WARNING, logger="songshare.services.asset_service"):
            result = asset_service.replace(db, store, user, AVATAR_SLOT, make_upload("new.png"))

        new = result.handles["img_url"]
        db.expire_all()
        assert db.get(User, user.id).img_url == new
        assert result.cleanup[0].failed
        assert result.cleanup[0].outcome == FAILED
        assert "permission denied" in result.cleanup[0].error
        assert store.exists(AssetCategory.AVATARS, old)
        assert any(getattr(r, "event", None) == "asset_cleanup_failed" for r in caplog.records)

    def test_upload_failure_leaves_entity_untouched(self, db, store, make_user) -> None:
        user = make_user()
        old = _give_avatar(db, store, user)

        with pytest.raises(ValidationError):
            asset_service.replace(db, store, user, AVATAR_SLOT, None)

        db.expire_all()
        assert db.get(User, user.id).img_url == old
        assert store.exists(AssetCategory.AVATARS, old)

    def test_commit_failure_keeps_old_state_and_old_blob(self, db, store, make_user, monkeypatch) -> None:
        user = make_user()
        old = _give_avatar(db, store, user)

        def failing_commit():
            raise RuntimeError("database went away")

        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(DependencyError):
            asset_service.replace(db, store, user, AVATAR_SLOT, make_upload("new.png"))
        monkeypatch.undo()

        db.expire_all()
        assert db.get(User, user.id).img_url == old
        assert store.exists(AssetCategory.AVATARS, old)
        # the new blob is an accepted orphan
        assert len(list(store.namespace(AssetCategory.AVATARS).iterdir())) == 2

    def test_replace_many_updates_fields_and_slots_in_one_commit(self, db, store, make_user, make_song) -> None:
        uploader = make_user()
        song = make_song(uploader, title="Before")
        old_track = song.track_url

        result = asset_service.replace_many(
            db,
            store,
            song,
            [(COVER_SLOT, make_upload("c.jpg")), (TRACK_SLOT, make_upload("t.mp3"))],
            changes={"title": "After"},
        )

        db.expire_all()
        saved = song_repository.get(db, song.id)
        assert saved.title == "After"
        assert saved.img_url == result.handles["img_url"]
        assert saved.track_url == result.handles["track_url"]
        assert not store.exists(AssetCategory.TRACKS, old_track)
        assert [r.outcome for r in result.cleanup] == [SKIPPED, "deleted"]

    def test_replace_many_without_files_only_changes_fields(self, db, store, make_user, make_song) -> None:
        song = make_song(make_user(), title="Before")
        track = song.track_url

        result = asset_service.replace_many(db, store, song, [(COVER_SLOT, None)], changes={"title": "After"})

        assert result.cleanup == []
        assert song.title == "After"
        assert store.exists(AssetCategory.TRACKS, track)


class TestRetire:
    def test_retire_soft_deletes_then_removes_assets(self, db, store, make_user, make_song) -> None:
        song = make_song(make_user())
        track = song.track_url

        reports = asset_service.retire(db, store, song, song_repository, [COVER_SLOT, TRACK_SLOT])

        assert song_repository.get(db, song.id) is None
        assert song.is_deleted is True
        assert not store.exists(AssetCategory.TRACKS, track)
        assert [r.outcome for r in reports] == [SKIPPED, "deleted"]


class TestOwnership:
    def test_owner_may_modify(self) -> None:
        asset_service.ensure_can_modify(Principal(id=1, username="a"), owner_id=1)

    def test_admin_may_modify_when_allowed(self) -> None:
        admin = Principal(id=9, username="root", role="admin")
        asset_service.ensure_can_modify(admin, owner_id=1)
        with pytest.raises(ForbiddenError):
            asset_service.ensure_can_modify(admin, owner_id=1, allow_admin=False)

    def test_stranger_is_forbidden(self) -> None:
        with pytest.raises(ForbiddenError):
            asset_service.ensure_can_modify(Principal(id=2, username="b"), owner_id=1)
