# ============================================================================
# FILE: tunetip/services/track_service.py
# ============================================================================
from sqlalchemy.orm import Session
from tunetip.core.exceptions import NotFoundError
from tunetip.db.models.track import Track

class TrackService:
    """Track metadata lookups"""

    def find_track(self, db: Session, track_id: int) -> Track:
        track = db.query(Track).filter(Track.id == track_id).first()
        if not track:
            raise NotFoundError(f"Track with ID {track_id} not found")
        return track

# Create singleton instance
track_service = TrackService()
