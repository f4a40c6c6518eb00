# ============================================================================
# FILE: songshare/services/asset_service.py
# ============================================================================
"""
Replace and retire flows for entity asset slots.

A replace runs in three phases: upload the new blob, commit the entity so it
references the new handle, then delete the superseded blob. The old blob stays
resolvable until the commit has succeeded, and a failed delete afterwards is
reported, never raised.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
from fastapi import UploadFile
from sqlalchemy.orm import Session
from songshare.config import settings
from songshare.core.exceptions import DependencyError, ForbiddenError
from songshare.core.security import Principal
from songshare.core.storage import AssetCategory, BlobStore
from songshare.db.repository import SoftDeleteRepository
from songshare.services.upload_service import (
    AVATAR_POLICY,
    COVER_POLICY,
    TRACK_POLICY,
    UploadPolicy,
    upload_service,
)
import logging

logger = logging.getLogger(__name__)

SKIPPED = "skipped"
FAILED = "failed"

@dataclass(frozen=True)
class AssetSlot:
    """A single-valued asset column on an entity"""
    attr: str
    policy: UploadPolicy
    default: Optional[str] = None

    @property
    def category(self) -> AssetCategory:
        return self.policy.category

    def is_sentinel(self, handle: Optional[str]) -> bool:
        return not handle or handle == self.default

AVATAR_SLOT = AssetSlot("img_url", AVATAR_POLICY, settings.DEFAULT_AVATAR)
COVER_SLOT = AssetSlot("img_url", COVER_POLICY, settings.DEFAULT_COVER)
TRACK_SLOT = AssetSlot("track_url", TRACK_POLICY)

@dataclass
class CleanupReport:
    """Outcome of removing one superseded blob"""
    category: AssetCategory
    handle: Optional[str]
    outcome: str
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.outcome == FAILED

@dataclass
class ReplaceResult:
    entity: Any
    handles: Dict[str, str] = field(default_factory=dict)
    cleanup: List[CleanupReport] = field(default_factory=list)

class AssetService:
    """Asset lifecycle: upload, commit, then clean up"""

    def ensure_can_modify(self, principal: Principal, owner_id: int, allow_admin: bool = True) -> None:
        """Raise ForbiddenError unless the principal owns the entity (or is an allowed admin)"""
        if not principal.can_modify(owner_id, allow_admin):
            logger.info(f"User {principal.id} denied asset change on entity owned by {owner_id}")
            raise ForbiddenError("Forbidden")

    def replace(self, db: Session, store: BlobStore, entity: Any, slot: AssetSlot,
                upload: Optional[UploadFile]) -> ReplaceResult:
        """Replace one asset slot with a newly uploaded file"""
        return self.replace_many(db, store, entity, [(slot, upload)], require_upload=True)

    def replace_many(self, db: Session, store: BlobStore, entity: Any,
                     uploads: Sequence[Tuple[AssetSlot, Optional[UploadFile]]],
                     changes: Optional[Dict[str, Any]] = None,
                     require_upload: bool = False) -> ReplaceResult:
        """
        Replace any number of slots and apply plain field changes in one commit

        Args:
            db: Session owning the entity
            store: Blob store for new and superseded assets
            entity: ORM instance to update
            uploads: (slot, file) pairs; None files leave the slot untouched
            changes: Extra column values to set in the same commit
            require_upload: Fail with ValidationError when no file is given

        Returns:
            ReplaceResult with the committed handles and cleanup reports
        """
        if require_upload:
            uploads = list(uploads)
        else:
            uploads = [(slot, upload) for slot, upload in uploads if upload is not None]

        # Phase 1: upload. Nothing on the entity changes if this fails.
        staged: List[Tuple[AssetSlot, str]] = []
        try:
            for slot, upload in uploads:
                staged.append((slot, upload_service.store_one(store, slot.policy, upload)))
        except Exception:
            for slot, handle in staged:
                upload_service.discard(store, slot.category, [handle])
            raise

        # Phase 2: commit the new references.
        superseded: List[Tuple[AssetSlot, Optional[str]]] = []
        for slot, handle in staged:
            superseded.append((slot, getattr(entity, slot.attr)))
            setattr(entity, slot.attr, handle)
        for name, value in (changes or {}).items():
            setattr(entity, name, value)
        self._commit(db, entity, staged)

        # Phase 3: best-effort cleanup of what the entity no longer references.
        reports = [self.cleanup(store, slot, previous) for slot, previous in superseded]
        return ReplaceResult(
            entity=entity,
            handles={slot.attr: handle for slot, handle in staged},
            cleanup=reports,
        )

    def retire(self, db: Session, store: BlobStore, entity: Any, repository: SoftDeleteRepository,
               slots: Sequence[AssetSlot]) -> List[CleanupReport]:
        """Soft-delete an entity, then remove the assets it referenced"""
        handles = [(slot, getattr(entity, slot.attr)) for slot in slots]
        repository.soft_delete(db, entity)
        self._commit(db, entity, [])
        return [self.cleanup(store, slot, handle) for slot, handle in handles]

    def cleanup(self, store: BlobStore, slot: AssetSlot, handle: Optional[str]) -> CleanupReport:
        """Delete a superseded blob; failures are logged and reported, never raised"""
        if slot.is_sentinel(handle):
            return CleanupReport(slot.category, handle, SKIPPED)
        try:
            result = store.delete(slot.category, handle)
        except Exception as e:
            logger.warning(
                f"Cleanup of {slot.category.value}/{handle} failed: {e}",
                extra={
                    "event": "asset_cleanup_failed",
                    "category": slot.category.value,
                    "handle": handle,
                    "error": str(e),
                },
            )
            return CleanupReport(slot.category, handle, FAILED, str(e))
        return CleanupReport(slot.category, handle, result.value)

    def _commit(self, db: Session, entity: Any, staged: Sequence[Tuple[AssetSlot, str]]) -> None:
        try:
            db.add(entity)
            db.commit()
            db.refresh(entity)
        except Exception as e:
            db.rollback()
            # New blobs are left behind; nothing references them
            for slot, handle in staged:
                logger.warning(
                    f"Commit failed, orphaned blob {slot.category.value}/{handle}",
                    extra={"event": "asset_orphaned", "category": slot.category.value, "handle": handle},
                )
            logger.error(f"Error saving {type(entity).__name__}: {e}")
            raise DependencyError(f"Failed to save {type(entity).__name__.lower()}") from e

# Create singleton instance
asset_service = AssetService()
