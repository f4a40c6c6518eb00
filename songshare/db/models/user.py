# ============================================================================
# FILE: songshare/db/models/user.py
# ============================================================================
from sqlalchemy import Column, Integer, String, DateTime, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from songshare.config import settings
from songshare.db.base import Base, SoftDeleteMixin

ROLE_USER = "user"
ROLE_ADMIN = "admin"

class User(SoftDeleteMixin, Base):
    """User account; img_url holds the avatar handle"""
    __tablename__ = "users"
    __table_args__ = (
        # Usernames are unique among live accounts only
        Index(
            "uq_users_username_live",
            "username",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_USER)
    img_url = Column(String, nullable=False, default=settings.DEFAULT_AVATAR)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    songs = relationship("Song", back_populates="uploader")
    playlists = relationship("Playlist", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
