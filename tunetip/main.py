# ============================================================================
# FILE: tunetip/main.py
# ============================================================================
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tunetip.api.v1.router import api_router
from tunetip.core.exceptions import TunetipError
from tunetip.core.logging import setup_logging
from tunetip.config import settings
from tunetip.db.base import Base, import_models
from tunetip.db.session import SessionLocal, engine
from tunetip.services.smart_playlist_scheduler import SmartPlaylistScheduler
from tunetip.services.smart_playlist_service import smart_playlist_service
import logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Collaborative playlists, smart playlists and leaderboards for a music tipping platform",
    version="1.0.0",
    debug=settings.DEBUG,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API v1 router
app.include_router(api_router, prefix="/api/v1")

scheduler = SmartPlaylistScheduler(session_factory=SessionLocal, service=smart_playlist_service)

@app.exception_handler(TunetipError)
async def tunetip_error_handler(request: Request, exc: TunetipError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

@app.on_event("startup")
async def startup_event():
    """Create tables and start the smart playlist refresh loop"""
    logger.info(f"Starting {settings.APP_NAME} API ({settings.ENVIRONMENT})")
    import_models()
    Base.metadata.create_all(bind=engine)
    scheduler.start()

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    scheduler.stop()
    logger.info(f"Shutting down {settings.APP_NAME} API")

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
