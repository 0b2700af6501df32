# ============================================================================
# FILE: tunetip/api/v1/endpoints/playlist.py
# ============================================================================
from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.orm import Session
from typing import Annotated, List, Optional, Union
from tunetip.db.session import get_db
from tunetip.api.dependencies import get_current_user, require_current_user
from tunetip.schemas.playlist import (
    PaginatedPlaylists,
    PlaylistCreate,
    PlaylistDuplicate,
    PlaylistReorder,
    PlaylistResponse,
    PlaylistShareResponse,
    PlaylistTrackAdd,
    PlaylistUpdate,
)
from tunetip.schemas.collaborator import CollaboratorInvite, CollaboratorResponse, CollaboratorRoleUpdate
from tunetip.schemas.change_request import ChangeRequestResponse
from tunetip.services.playlist_service import playlist_service
from tunetip.services.collaborator_service import collaborator_service
from tunetip.db.models.change_request import ChangeStatus, PlaylistChangeRequest
from tunetip.db.models.user import User
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

MutationResponse = Annotated[Union[PlaylistResponse, ChangeRequestResponse], Field(discriminator="kind")]

def _tagged(result) -> MutationResponse:
    """Applied mutations come back as kind=playlist, deferred ones as kind=change_request"""
    if isinstance(result, PlaylistChangeRequest):
        return ChangeRequestResponse.model_validate(result)
    return PlaylistResponse.model_validate(result)

# ----------------------------------------------------------------------------
# Playlists
# ----------------------------------------------------------------------------

@router.post("", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def create_playlist(
    playlist_data: PlaylistCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Create a new playlist
    Requires authentication
    """
    return playlist_service.create_playlist(db, current_user.id, playlist_data)

@router.get("", response_model=PaginatedPlaylists)
async def get_my_playlists(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_public: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Playlists the current user owns or collaborates on
    Requires authentication
    """
    return playlist_service.list_accessible(db, current_user.id, page, limit, is_public)

@router.get("/public", response_model=PaginatedPlaylists)
async def get_public_playlists(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return playlist_service.list_public(db, page, limit)

@router.get("/user/{user_id}", response_model=PaginatedPlaylists)
async def get_user_playlists(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_public: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user)
):
    """
    Playlists of a given user
    Anonymous callers and other users only see public playlists
    """
    viewer_id = current_user.id if current_user else None
    return playlist_service.list_by_user(db, user_id, viewer_id, page, limit, is_public)

@router.get("/{playlist_id}", response_model=PlaylistResponse)
async def get_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user)
):
    """
    Get a playlist with its tracks in order
    Public playlists are visible to anyone
    """
    viewer_id = current_user.id if current_user else None
    return playlist_service.get_playlist(db, playlist_id, viewer_id)

@router.patch("/{playlist_id}", response_model=PlaylistResponse)
async def update_playlist(
    playlist_id: int,
    update_data: PlaylistUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Update playlist details
    Requires authentication and ownership
    """
    return playlist_service.update_playlist(db, playlist_id, current_user.id, update_data)

@router.delete("/{playlist_id}")
async def delete_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Delete a playlist
    Requires authentication and ownership
    """
    playlist_service.delete_playlist(db, playlist_id, current_user.id)
    return {"message": "Playlist deleted successfully"}

# ----------------------------------------------------------------------------
# Tracks
# ----------------------------------------------------------------------------

@router.post("/{playlist_id}/tracks", response_model=MutationResponse)
async def add_track_to_playlist(
    playlist_id: int,
    track_data: PlaylistTrackAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Add a track to a playlist
    Returns a change request instead when the playlist requires approval
    """
    result = playlist_service.add_track(
        db, playlist_id, current_user.id, track_data.track_id, track_data.position
    )
    return _tagged(result)

@router.delete("/{playlist_id}/tracks/{track_id}", response_model=MutationResponse)
async def remove_track_from_playlist(
    playlist_id: int,
    track_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Remove a track from a playlist
    Returns a change request instead when the playlist requires approval
    """
    return _tagged(playlist_service.remove_track(db, playlist_id, track_id, current_user.id))

@router.patch("/{playlist_id}/tracks/reorder", response_model=MutationResponse)
async def reorder_playlist_tracks(
    playlist_id: int,
    reorder_data: PlaylistReorder,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    return _tagged(playlist_service.reorder_tracks(db, playlist_id, current_user.id, reorder_data.tracks))

@router.post("/{playlist_id}/duplicate", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_playlist(
    playlist_id: int,
    duplicate_data: Optional[PlaylistDuplicate] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Copy a playlist (details and track order) into a new playlist you own
    """
    return playlist_service.duplicate_playlist(db, playlist_id, current_user.id, duplicate_data)

@router.post("/{playlist_id}/share", response_model=PlaylistShareResponse)
async def share_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Make a playlist public
    Requires authentication and ownership
    """
    return playlist_service.share_playlist(db, playlist_id, current_user.id)

# ----------------------------------------------------------------------------
# Collaborators
# ----------------------------------------------------------------------------

@router.get("/{playlist_id}/collaborators", response_model=List[CollaboratorResponse])
async def get_collaborators(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    List collaborators
    The owner also sees pending invites
    """
    playlist = playlist_service.get_playlist(db, playlist_id, current_user.id)
    return collaborator_service.list_collaborators(db, playlist, current_user.id)

@router.post("/{playlist_id}/collaborators", response_model=CollaboratorResponse, status_code=status.HTTP_201_CREATED)
async def invite_collaborator(
    playlist_id: int,
    invite_data: CollaboratorInvite,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Invite a user by username or email
    Requires authentication and ownership
    """
    playlist = playlist_service.get_playlist_for_edit(db, playlist_id)
    return collaborator_service.invite(db, playlist, current_user.id, invite_data.identifier, invite_data.role)

@router.post("/{playlist_id}/collaborators/{collaborator_id}/accept", response_model=CollaboratorResponse)
async def accept_invite(
    playlist_id: int,
    collaborator_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    playlist = playlist_service.get_playlist_for_edit(db, playlist_id)
    return collaborator_service.accept(db, playlist, collaborator_id, current_user.id)

@router.post("/{playlist_id}/collaborators/{collaborator_id}/reject")
async def reject_invite(
    playlist_id: int,
    collaborator_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    playlist = playlist_service.get_playlist_for_edit(db, playlist_id)
    collaborator_service.reject(db, playlist, collaborator_id, current_user.id)
    return {"message": "Invite rejected"}

@router.patch("/{playlist_id}/collaborators/{collaborator_id}", response_model=CollaboratorResponse)
async def update_collaborator_role(
    playlist_id: int,
    collaborator_id: int,
    role_data: CollaboratorRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Change a collaborator's role
    Requires authentication and ownership
    """
    playlist = playlist_service.get_playlist_for_edit(db, playlist_id)
    return collaborator_service.update_role(db, playlist, collaborator_id, current_user.id, role_data.role)

@router.delete("/{playlist_id}/collaborators/{collaborator_id}")
async def remove_collaborator(
    playlist_id: int,
    collaborator_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Remove a collaborator
    Requires authentication and ownership
    """
    playlist = playlist_service.get_playlist_for_edit(db, playlist_id)
    collaborator_service.remove(db, playlist, collaborator_id, current_user.id)
    return {"message": "Collaborator removed"}

# ----------------------------------------------------------------------------
# Change requests
# ----------------------------------------------------------------------------

@router.get("/{playlist_id}/change-requests", response_model=List[ChangeRequestResponse])
async def get_change_requests(
    playlist_id: int,
    status_filter: Optional[ChangeStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    List change requests, newest first
    Requires authentication and ownership
    """
    return playlist_service.list_change_requests(db, playlist_id, current_user.id, status_filter)

@router.post("/{playlist_id}/change-requests/{request_id}/approve", response_model=PlaylistResponse)
async def approve_change_request(
    playlist_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Apply a pending change request
    Requires authentication and ownership
    """
    return playlist_service.approve_change_request(db, playlist_id, request_id, current_user.id)

@router.post("/{playlist_id}/change-requests/{request_id}/reject", response_model=ChangeRequestResponse)
async def reject_change_request(
    playlist_id: int,
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    return playlist_service.reject_change_request(db, playlist_id, request_id, current_user.id)
