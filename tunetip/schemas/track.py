# ============================================================================
# FILE: tunetip/schemas/track.py
# ============================================================================
from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime

class TrackResponse(BaseModel):
    """Schema for track metadata embedded in playlist responses"""
    id: int
    title: str
    duration: Optional[int] = None  # Duration in seconds
    genre: Optional[str] = None
    artist_id: int
    total_tips: float = 0
    plays: int = 0
    is_public: bool = True
    release_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
