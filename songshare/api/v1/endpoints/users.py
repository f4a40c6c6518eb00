# ============================================================================
# FILE: songshare/api/v1/endpoints/users.py
# ============================================================================
# Endpoints addressing a user by id: public profile, avatar, uploads,
# and administrator account management.
# ============================================================================
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
from songshare.db.session import get_db
from songshare.api.dependencies import get_blob_store, require_admin, require_principal
from songshare.core.security import Principal
from songshare.core.storage import BlobStore
from songshare.schemas.common import MessageResponse
from songshare.schemas.song import SongResponse
from songshare.schemas.user import AdminUserCreate, AdminUserUpdate, AvatarResponse, UserResponse
from songshare.services.song_service import song_service
from songshare.services.user_service import user_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    """List all live accounts (admin only)"""
    return user_service.list_users(db)

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: AdminUserCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    """Create an account with an explicit role (admin only)"""
    return user_service.create_user(db, user_data, role=user_data.role)

@router.get("/{user_id}")
def get_public_user(
    user_id: int,
    db: Session = Depends(get_db)
):
    """Public profile of any live user"""
    return user_service.get_public_user(db, user_id)

@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    update_data: AdminUserUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    """Edit name, password or role (admin only)"""
    return user_service.update_user(db, user_id, update_data)

@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    admin: Principal = Depends(require_admin)
):
    """Soft-delete an account (admin only)"""
    user_service.delete_user(db, store, user_id)
    return MessageResponse(message="User deleted successfully")

@router.post("/{user_id}/avatar", response_model=AvatarResponse)
def update_avatar(
    user_id: int,
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    principal: Principal = Depends(require_principal)
):
    """
    Replace the caller's avatar
    The previous avatar is removed only after the new one is saved
    """
    result = user_service.replace_avatar(db, store, principal, user_id, avatar)
    return AvatarResponse(
        message="Avatar updated successfully",
        user=UserResponse.model_validate(result.entity),
    )

@router.get("/{user_id}/songs", response_model=List[SongResponse])
def get_songs_by_uploader(
    user_id: int,
    db: Session = Depends(get_db)
):
    """Songs uploaded by a user"""
    return song_service.get_songs_by_uploader(db, user_id)
