# ============================================================================
# FILE: songshare/services/upload_service.py
# ============================================================================
from dataclasses import dataclass
from typing import List, Optional, Sequence
from fastapi import UploadFile
from songshare.config import settings
from songshare.core.exceptions import DependencyError, ValidationError
from songshare.core.storage import AssetCategory, BlobStore, BlobTooLargeError
import logging

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class UploadPolicy:
    """Per-category limits for incoming payloads"""
    category: AssetCategory
    field_name: str
    max_count: int
    max_bytes: int
    prefix: str = ""

TRACK_BATCH_POLICY = UploadPolicy(
    AssetCategory.TRACKS, "files", settings.MAX_TRACK_FILES, settings.MAX_TRACK_BYTES
)
TRACK_POLICY = UploadPolicy(AssetCategory.TRACKS, "track", 1, settings.MAX_TRACK_BYTES)
COVER_POLICY = UploadPolicy(AssetCategory.COVERS, "cover", 1, settings.MAX_IMAGE_BYTES)
AVATAR_POLICY = UploadPolicy(
    AssetCategory.AVATARS, "avatar", 1, settings.MAX_IMAGE_BYTES, prefix="avatar-"
)

class UploadService:
    """Validates incoming files and routes them into the blob store"""

    def store_all(self, store: BlobStore, policy: UploadPolicy,
                  files: Optional[Sequence[UploadFile]]) -> List[str]:
        """
        Store every file of a request under its policy

        Args:
            store: Destination blob store
            policy: Limits for this field
            files: Uploaded files in submission order

        Returns:
            One handle per file, in the same order

        Raises:
            ValidationError: no file, too many files, or a file too large
            DependencyError: the blob store failed
        """
        files = [f for f in (files or []) if f is not None and f.filename]
        if not files:
            raise ValidationError(f"No {policy.field_name} file uploaded")
        if len(files) > policy.max_count:
            raise ValidationError(
                f"Too many {policy.field_name} files (max {policy.max_count})"
            )

        handles: List[str] = []
        try:
            for upload in files:
                handles.append(self._put(store, policy, upload))
        except Exception:
            # A request stores all of its files or none of them
            self.discard(store, policy.category, handles)
            raise

        logger.info(f"Accepted {len(handles)} {policy.category.value} upload(s)")
        return handles

    def store_one(self, store: BlobStore, policy: UploadPolicy, upload: Optional[UploadFile]) -> str:
        """Store a single required file"""
        return self.store_all(store, policy, [upload] if upload is not None else [])[0]

    def discard(self, store: BlobStore, category: AssetCategory, handles: Sequence[str]) -> None:
        """Best-effort removal of blobs that no entity will reference"""
        for handle in handles:
            try:
                store.delete(category, handle)
            except Exception as e:
                logger.warning(f"Could not discard {category.value}/{handle}: {e}")

    def _put(self, store: BlobStore, policy: UploadPolicy, upload: UploadFile) -> str:
        try:
            return store.put(
                policy.category,
                upload.file,
                upload.filename,
                prefix=policy.prefix,
                max_bytes=policy.max_bytes,
            )
        except BlobTooLargeError:
            raise ValidationError(
                f"{policy.field_name} file '{upload.filename}' exceeds {policy.max_bytes} bytes"
            )
        except OSError as e:
            logger.error(f"Blob store write failed for {policy.category.value}: {e}")
            raise DependencyError("Failed to store uploaded file")

# Create singleton instance
upload_service = UploadService()
