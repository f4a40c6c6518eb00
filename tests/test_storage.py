"""Tests for the filesystem blob store."""

import io
import re

import pytest

from songshare.core.storage import (
    AssetCategory,
    BlobTooLargeError,
    DeleteResult,
    InvalidHandleError,
    LocalBlobStore,
    generate_handle,
)


class TestGenerateHandle:
    def test_keeps_only_the_extension(self) -> None:
        handle = generate_handle("../../etc/My Song.mp3")
        assert re.fullmatch(r"\d+-\d+\.mp3", handle)

    def test_prefix_is_prepended(self) -> None:
        assert generate_handle("me.png", prefix="avatar-").startswith("avatar-")

    def test_missing_name_gives_no_extension(self) -> None:
        assert re.fullmatch(r"\d+-\d+", generate_handle(None))

    def test_handles_are_practically_unique(self) -> None:
        handles = {generate_handle("a.mp3") for _ in range(200)}
        assert len(handles) == 200


class TestLocalBlobStore:
    def test_put_then_exists(self, store: LocalBlobStore) -> None:
        handle = store.put(AssetCategory.TRACKS, io.BytesIO(b"abc"), "A.mp3")

        assert store.exists(AssetCategory.TRACKS, handle)
        assert store.path_for(AssetCategory.TRACKS, handle).read_bytes() == b"abc"

    def test_categories_are_separate_namespaces(self, store: LocalBlobStore) -> None:
        handle = store.put(AssetCategory.COVERS, io.BytesIO(b"img"), "c.png")

        assert store.exists(AssetCategory.COVERS, handle)
        assert not store.exists(AssetCategory.AVATARS, handle)
        assert store.namespace(AssetCategory.COVERS) != store.namespace(AssetCategory.AVATARS)

    def test_put_creates_missing_namespace(self, tmp_path) -> None:
        store = LocalBlobStore(str(tmp_path / "fresh"))
        assert not store.namespace(AssetCategory.AVATARS).exists()

        handle = store.put(AssetCategory.AVATARS, io.BytesIO(b"x"), "a.png")

        assert store.exists(AssetCategory.AVATARS, handle)

    def test_ensure_namespaces_is_idempotent(self, store: LocalBlobStore) -> None:
        store.ensure_namespaces()
        store.ensure_namespaces()
        for category in AssetCategory:
            assert store.namespace(category).is_dir()

    def test_delete_existing_blob(self, store: LocalBlobStore) -> None:
        handle = store.put(AssetCategory.TRACKS, io.BytesIO(b"abc"), "A.mp3")

        assert store.delete(AssetCategory.TRACKS, handle) == DeleteResult.DELETED
        assert not store.exists(AssetCategory.TRACKS, handle)

    def test_delete_missing_blob_is_a_no_op(self, store: LocalBlobStore) -> None:
        assert store.delete(AssetCategory.TRACKS, "123-456.mp3") == DeleteResult.NOT_FOUND
        # and again, still no error
        assert store.delete(AssetCategory.TRACKS, "123-456.mp3") == DeleteResult.NOT_FOUND

    def test_oversized_payload_leaves_nothing_behind(self, store: LocalBlobStore) -> None:
        with pytest.raises(BlobTooLargeError):
            store.put(AssetCategory.COVERS, io.BytesIO(b"x" * 11), "big.png", max_bytes=10)

        assert list(store.namespace(AssetCategory.COVERS).iterdir()) == []

    @pytest.mark.parametrize("handle", ["../secret", "a/b.png", "..", ""])
    def test_path_escaping_handles_are_rejected(self, store: LocalBlobStore, handle: str) -> None:
        with pytest.raises(InvalidHandleError):
            store.delete(AssetCategory.AVATARS, handle)
        assert store.exists(AssetCategory.AVATARS, handle) is False
