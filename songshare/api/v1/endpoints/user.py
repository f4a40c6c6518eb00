# ============================================================================
# FILE: songshare/api/v1/endpoints/user.py
# ============================================================================
# Account endpoints for the calling user: register, login, own profile,
# listening history, stats, likes and playlists.
# ============================================================================
from fastapi import APIRouter, Depends, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta
from typing import List
from songshare.db.session import get_db, get_session_factory
from songshare.api.dependencies import require_principal
from songshare.schemas.history import HistoryEntry
from songshare.schemas.playlist import PlaylistResponse
from songshare.schemas.song import SongResponse
from songshare.schemas.user import UserCreate, UserLogin, UserResponse, UsernameCheck, Token, UserStats
from songshare.services.history_service import history_service
from songshare.services.playlist_service import playlist_service
from songshare.services.song_service import song_service
from songshare.services.stats_service import stats_service
from songshare.services.user_service import user_service
from songshare.core.security import Principal, create_access_token
from songshare.config import settings
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

def _issue_token(user) -> str:
    return create_access_token(
        data={"sub": str(user.id), "username": user.username, "role": user.role},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Register a new user account
    Usernames of deleted accounts may be reused
    """
    return user_service.create_user(db, user_data)

@router.post("/login", response_model=Token)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Login with username and password
    Returns JWT access token
    """
    user = user_service.authenticate_user(db, credentials.username, credentials.password)
    logger.info(f"User logged in: {user.username}")
    return Token(access_token=_issue_token(user), user=UserResponse.model_validate(user))

@router.post("/token")
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 password flow (form fields), used by the interactive docs
    Returns the bare token in OAuth2 field names
    """
    user = user_service.authenticate_user(db, form_data.username, form_data.password)
    return {"access_token": _issue_token(user), "token_type": "bearer"}

@router.get("/check", response_model=UsernameCheck)
def check_username(
    username: str = Query(..., min_length=1),
    db: Session = Depends(get_db)
):
    """Check whether a live account already uses this username"""
    return UsernameCheck(exists=user_service.username_exists(db, username))

@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Get current user information
    Requires authentication
    """
    return user_service.get_user(db, principal.id)

@router.get("/history", response_model=List[HistoryEntry])
def get_listening_history(
    limit: int = Query(settings.HISTORY_LIMIT, ge=1, le=settings.HISTORY_MAX_LIMIT),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Get user's listening history, most recent first
    Requires authentication
    """
    return list(history_service.get_history(db, principal.id, limit))

@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    session_factory=Depends(get_session_factory),
    principal: Principal = Depends(require_principal)
):
    """
    Counts for the profile page
    Requires authentication
    """
    return await stats_service.get_stats(session_factory, principal.id)

@router.get("/likes", response_model=List[SongResponse])
def get_liked_songs(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """Songs the current user has liked"""
    return song_service.get_liked_songs(db, principal.id)

@router.get("/playlists", response_model=List[PlaylistResponse])
def get_my_playlists(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Get all playlists for the current user
    Requires authentication
    """
    playlists = playlist_service.get_user_playlists(db, principal.id)
    return [playlist_service.to_response(db, p) for p in playlists]
