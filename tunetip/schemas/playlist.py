
# ============================================================================
# FILE: tunetip/schemas/playlist.py
# ============================================================================
from pydantic import BaseModel, Field
from typing import Any, Dict, Literal, Optional, List
from datetime import datetime
from tunetip.schemas.track import TrackResponse

class PlaylistCreate(BaseModel):
    """Schema for creating a playlist"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_public: bool = False
    approval_required: bool = False
    cover_image: Optional[str] = Field(None, max_length=500)

class PlaylistUpdate(BaseModel):
    """Schema for updating a playlist"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_public: Optional[bool] = None
    approval_required: Optional[bool] = None
    cover_image: Optional[str] = Field(None, max_length=500)

class PlaylistTrackAdd(BaseModel):
    """Schema for adding a track, optionally at a given position"""
    track_id: int
    position: Optional[int] = Field(None, ge=0)

class TrackPosition(BaseModel):
    track_id: int
    position: int = Field(..., ge=0)

class PlaylistReorder(BaseModel):
    """Schema for reordering tracks; may cover all or only some tracks"""
    tracks: List[TrackPosition] = Field(..., min_length=1)

class PlaylistDuplicate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    is_public: Optional[bool] = None

class PlaylistTrackResponse(BaseModel):
    """Schema for playlist track response"""
    track_id: int
    position: int
    added_at: Optional[datetime] = None
    track: Optional[TrackResponse] = None

    class Config:
        from_attributes = True

class SmartPlaylistInfo(BaseModel):
    id: int
    criteria: Dict[str, Any]
    auto_update: bool
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True

class PlaylistSummary(BaseModel):
    """Schema for playlist listings (no tracks)"""
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    is_public: bool
    approval_required: bool
    cover_image: Optional[str] = None
    track_count: int
    total_duration: int
    created_at: datetime
    updated_at: datetime
    smart_playlist: Optional[SmartPlaylistInfo] = None

    class Config:
        from_attributes = True

class PlaylistResponse(PlaylistSummary):
    """Schema for a full playlist; `kind` tags applied mutations"""
    kind: Literal["playlist"] = "playlist"
    tracks: List[PlaylistTrackResponse] = []

class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

class PaginatedPlaylists(BaseModel):
    data: List[PlaylistSummary]
    meta: PageMeta

class PlaylistShareResponse(BaseModel):
    playlist_id: int
    share_url: str
    is_public: bool
    message: str
