# ============================================================================
# FILE: songshare/api/v1/router.py
# ============================================================================
from fastapi import APIRouter
from songshare.api.v1.endpoints import user, users, song, playlist

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(user.router, prefix="/user", tags=["user"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(song.router, prefix="/songs", tags=["songs"])
api_router.include_router(playlist.router, prefix="/playlists", tags=["playlists"])
