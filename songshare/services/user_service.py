# ============================================================================
# FILE: songshare/services/user_service.py
# ============================================================================
from typing import List, Optional
from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from songshare.config import settings
from songshare.core.cache import cache, public_user_key
from songshare.core.exceptions import ConflictError, DependencyError, NotFoundError, UnauthorizedError
from songshare.core.security import Principal, get_password_hash, verify_password
from songshare.core.storage import BlobStore
from songshare.db.models.user import User, ROLE_USER
from songshare.db.repository import user_repository
from songshare.schemas.user import AdminUserUpdate, UserCreate, UserResponse
from songshare.services.asset_service import AVATAR_SLOT, ReplaceResult, asset_service
import logging

logger = logging.getLogger(__name__)

class UserService:
    """Service layer for user operations"""

    def create_user(self, db: Session, user_data: UserCreate, role: str = ROLE_USER) -> User:
        """Create a new user account; usernames are unique among live accounts"""
        if self.get_user_by_username(db, user_data.username):
            raise ConflictError("Username already exists")

        user = User(
            username=user_data.username,
            name=user_data.name,
            hashed_password=get_password_hash(user_data.password),
            role=role,
            img_url=settings.DEFAULT_AVATAR,
        )
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
        except IntegrityError:
            # Lost a race with a concurrent registration
            db.rollback()
            raise ConflictError("Username already exists")
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating user: {e}")
            raise DependencyError("Failed to create user") from e

        logger.info(f"User created: {user.username}")
        return user

    def get_user(self, db: Session, user_id: int) -> User:
        user = user_repository.get(db, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def get_user_by_username(self, db: Session, username: str) -> Optional[User]:
        """Get live user by username"""
        return user_repository.find_one(db, username=username)

    def username_exists(self, db: Session, username: str) -> bool:
        return self.get_user_by_username(db, username) is not None

    def authenticate_user(self, db: Session, username: str, password: str) -> User:
        """Return the user for valid credentials (404 unknown user, 401 wrong password)"""
        user = self.get_user_by_username(db, username)
        if not user:
            raise NotFoundError("User", username)
        if not verify_password(password, user.hashed_password):
            raise UnauthorizedError("Wrong password")
        return user

    def get_public_user(self, db: Session, user_id: int) -> dict:
        """Public profile, served from cache when possible"""
        key = public_user_key(user_id)
        cached = cache.get_cache(key)
        if cached:
            logger.info(f"Cache hit for user: {user_id}")
            return cached

        user = self.get_user(db, user_id)
        profile = UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)
        cache.set_cache(key, profile, settings.CACHE_EXPIRE_SECONDS)
        return profile

    def replace_avatar(self, db: Session, store: BlobStore, principal: Principal,
                       user_id: int, upload: Optional[UploadFile]) -> ReplaceResult:
        """Swap the avatar of the principal's own account"""
        asset_service.ensure_can_modify(principal, user_id, allow_admin=False)
        user = self.get_user(db, user_id)
        result = asset_service.replace(db, store, user, AVATAR_SLOT, upload)
        cache.delete_cache(public_user_key(user_id))
        logger.info(f"Avatar updated for user {user_id}: {user.img_url}")
        return result

    def list_users(self, db: Session) -> List[User]:
        return user_repository.query(db).order_by(User.created_at.desc()).all()

    def update_user(self, db: Session, user_id: int, update_data: AdminUserUpdate) -> User:
        """Administrator edit of name, password or role"""
        user = self.get_user(db, user_id)
        if update_data.name is not None:
            user.name = update_data.name
        if update_data.password is not None:
            user.hashed_password = get_password_hash(update_data.password)
        if update_data.role is not None:
            user.role = update_data.role

        try:
            db.commit()
            db.refresh(user)
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating user: {e}")
            raise DependencyError("Failed to update user") from e

        cache.delete_cache(public_user_key(user_id))
        logger.info(f"User updated: {user_id}")
        return user

    def delete_user(self, db: Session, store: BlobStore, user_id: int) -> None:
        """Soft-delete an account and drop its custom avatar"""
        user = self.get_user(db, user_id)
        asset_service.retire(db, store, user, user_repository, [AVATAR_SLOT])
        cache.delete_cache(public_user_key(user_id))
        logger.info(f"User deleted: {user_id}")

# Create singleton instance
user_service = UserService()
