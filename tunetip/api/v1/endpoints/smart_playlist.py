# ============================================================================
# FILE: tunetip/api/v1/endpoints/smart_playlist.py
# ============================================================================
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from tunetip.db.session import get_db
from tunetip.api.dependencies import require_current_user, require_operator
from tunetip.schemas.playlist import PlaylistResponse
from tunetip.schemas.smart_playlist import (
    SmartPlaylistCreate,
    SmartPlaylistPreview,
    SmartPlaylistPreviewResponse,
    SmartPlaylistRefreshResponse,
    criteria_to_json,
)
from tunetip.schemas.track import TrackResponse
from tunetip.services.smart_playlist_service import smart_playlist_service
from tunetip.db.models.user import User
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/smart/preview", response_model=SmartPlaylistPreviewResponse)
async def preview_smart_playlist(
    preview_data: SmartPlaylistPreview,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Preview the tracks a criteria would select (nothing is saved)
    Requires authentication
    """
    criteria, tracks = smart_playlist_service.preview_tracks(db, current_user.id, preview_data.criteria)
    return SmartPlaylistPreviewResponse(
        criteria=criteria_to_json(criteria),
        tracks=[TrackResponse.model_validate(track) for track in tracks],
    )

@router.post("/smart", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def create_smart_playlist(
    smart_data: SmartPlaylistCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Create a smart playlist populated from its criteria
    Requires authentication
    """
    return smart_playlist_service.create_smart_playlist(db, current_user.id, smart_data)

@router.post("/smart/refresh", response_model=SmartPlaylistRefreshResponse)
async def refresh_smart_playlists(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_operator)
):
    """
    Run a one-off refresh of every auto-updating smart playlist
    Requires an operator account
    """
    logger.info(f"Manual smart playlist refresh requested by user {current_user.id}")
    refreshed = smart_playlist_service.refresh_all(db)
    return SmartPlaylistRefreshResponse(refreshed=refreshed)
