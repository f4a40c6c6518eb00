# ============================================================================
# FILE: songshare/schemas/user.py
# ============================================================================
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from songshare.schemas.common import CamelModel

class UserCreate(BaseModel):
    """Schema for user registration"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

class UserLogin(BaseModel):
    """Schema for user login"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class AdminUserCreate(UserCreate):
    """Schema for accounts created by an administrator"""
    role: str = Field("user", pattern="^(user|admin)$")

class AdminUserUpdate(BaseModel):
    """Schema for administrator edits; omitted fields are left alone"""
    name: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=1)
    role: Optional[str] = Field(None, pattern="^(user|admin)$")

class UserResponse(CamelModel):
    """Schema for user response (never includes the password hash)"""
    id: int
    username: str
    name: str
    img_url: str
    role: str
    created_at: datetime

class UsernameCheck(BaseModel):
    exists: bool

class Token(CamelModel):
    """Schema for login response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

class AvatarResponse(CamelModel):
    """Avatar replace result"""
    message: str
    user: UserResponse

class UserStats(CamelModel):
    """Derived counts for the profile page"""
    uploaded_count: int
    favorite_count: int
    playlist_count: int
    days_since_created: int
    followed_count: int = 0
