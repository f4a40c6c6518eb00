# ============================================================================
# FILE: songshare/core/storage.py
# ============================================================================
"""
Blob storage for uploaded assets.

Each AssetCategory is an independent namespace backed by its own directory,
so a handle can never collide across categories. Handles are bare file
names generated at upload time; the store never trusts a handle that could
escape its namespace directory.
"""
import logging
import os
import random
import time
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Dict, Optional
from songshare.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB
TEMP_SUFFIX = ".part"

class AssetCategory(str, Enum):
    TRACKS = "tracks"
    COVERS = "covers"
    AVATARS = "avatars"

class DeleteResult(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"

class InvalidHandleError(ValueError):
    """Handle is not a bare file name inside its namespace"""

class BlobTooLargeError(Exception):
    """Payload exceeded the allowed size; nothing was stored"""

    def __init__(self, limit: int):
        super().__init__(f"Payload exceeds {limit} bytes")
        self.limit = limit

def generate_handle(original_name: Optional[str], prefix: str = "") -> str:
    """
    Build a collision-resistant handle: <prefix><millis>-<random><ext>

    Only the extension of the client-supplied name survives.
    """
    ext = Path(original_name or "").suffix
    millis = time.time_ns() // 1_000_000
    return f"{prefix}{millis}-{random.randint(0, 10**9)}{ext}"

class BlobStore(ABC):
    """Abstract put/delete/exists store keyed by (category, handle)"""

    @abstractmethod
    def put(self, category: AssetCategory, payload: BinaryIO, original_name: Optional[str],
            prefix: str = "", max_bytes: Optional[int] = None) -> str:
        """
        Store a payload under a fresh handle.

        Args:
            category: Namespace to store into
            payload: Readable binary stream
            original_name: Client file name, used for its extension only
            prefix: Optional handle prefix (e.g. "avatar-")
            max_bytes: Reject payloads larger than this

        Returns:
            The new handle
        """

    @abstractmethod
    def delete(self, category: AssetCategory, handle: str) -> DeleteResult:
        """Remove a blob; a missing handle is a no-op reported as NOT_FOUND"""

    @abstractmethod
    def exists(self, category: AssetCategory, handle: str) -> bool:
        """Check whether a handle resolves to a stored blob"""

class LocalBlobStore(BlobStore):
    """Filesystem store: one directory per category under a root path"""

    def __init__(self, root: str, directories: Optional[Dict[AssetCategory, str]] = None):
        self.root = Path(root).expanduser().absolute()
        self.directories = directories or {
            AssetCategory.TRACKS: settings.TRACKS_DIR,
            AssetCategory.COVERS: settings.COVERS_DIR,
            AssetCategory.AVATARS: settings.AVATARS_DIR,
        }

    def namespace(self, category: AssetCategory) -> Path:
        return self.root / self.directories[AssetCategory(category)]

    def ensure_namespace(self, category: AssetCategory) -> Path:
        """Create the category directory if needed (idempotent)"""
        directory = self.namespace(category)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def ensure_namespaces(self) -> None:
        for category in AssetCategory:
            self.ensure_namespace(category)

    def path_for(self, category: AssetCategory, handle: str) -> Path:
        """Resolve a handle to its on-disk path, rejecting anything but a bare name"""
        if not handle or handle in {".", ".."} or Path(handle).name != handle or "\\" in handle:
            raise InvalidHandleError(f"Invalid blob handle: {handle!r}")
        return self.namespace(category) / handle

    def put(self, category: AssetCategory, payload: BinaryIO, original_name: Optional[str],
            prefix: str = "", max_bytes: Optional[int] = None) -> str:
        directory = self.ensure_namespace(category)
        handle = generate_handle(original_name, prefix)
        target = directory / handle
        temp = directory / (handle + TEMP_SUFFIX)

        written = 0
        try:
            with open(temp, "wb") as out:
                while True:
                    chunk = payload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise BlobTooLargeError(max_bytes)
                    out.write(chunk)
                out.flush()
                os.fsync(out.fileno())
            # Publish atomically so readers never see a partial blob
            os.replace(temp, target)
        except BaseException:
            temp.unlink(missing_ok=True)
            raise

        logger.info(f"Stored {category.value}/{handle} ({written} bytes)")
        return handle

    def delete(self, category: AssetCategory, handle: str) -> DeleteResult:
        path = self.path_for(category, handle)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"Delete of missing blob {category.value}/{handle} ignored")
            return DeleteResult.NOT_FOUND
        logger.info(f"Deleted {category.value}/{handle}")
        return DeleteResult.DELETED

    def exists(self, category: AssetCategory, handle: str) -> bool:
        try:
            return self.path_for(category, handle).is_file()
        except InvalidHandleError:
            return False

# Singleton store rooted at the configured storage directory
blob_store = LocalBlobStore(settings.STORAGE_ROOT)
