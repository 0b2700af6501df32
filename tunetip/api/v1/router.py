# ============================================================================
# FILE: tunetip/api/v1/router.py
# ============================================================================
from fastapi import APIRouter
from tunetip.api.v1.endpoints import playlist, smart_playlist

api_router = APIRouter()

# Smart routes first so /playlists/smart/* never matches /playlists/{playlist_id}
api_router.include_router(smart_playlist.router, prefix="/playlists", tags=["smart-playlists"])
api_router.include_router(playlist.router, prefix="/playlists", tags=["playlists"])
