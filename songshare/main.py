# ============================================================================
# FILE: songshare/main.py
# ============================================================================
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from songshare.api.v1.router import api_router
from songshare.api.exception_handlers import register_exception_handlers
from songshare.core.logging import setup_logging
from songshare.core.storage import AssetCategory, blob_store
from songshare.config import settings
import logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title="SongShare API",
    description="Music sharing with uploads, playlists, favorites and listening history",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API v1 router
app.include_router(api_router, prefix="/api/v1")

# Serve uploaded assets straight from their category directories
if settings.SERVE_STATIC:
    blob_store.ensure_namespaces()
    for category in AssetCategory:
        directory = blob_store.directories[category]
        app.mount(f"/{directory}", StaticFiles(directory=str(blob_store.namespace(category))), name=category.value)

@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info("Starting SongShare API")
    from songshare.db.base import Base, load_models
    from songshare.db.session import engine
    load_models()
    Base.metadata.create_all(bind=engine)
    blob_store.ensure_namespaces()

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down SongShare API")

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
