# ============================================================================
# FILE: tunetip/services/follow_service.py
# ============================================================================
from typing import Set
from sqlalchemy.orm import Session
from tunetip.db.models.follow import Follow, FollowingType

class FollowService:
    """Follow graph lookups"""

    def list_followed_artist_ids(self, db: Session, user_id: int) -> Set[int]:
        rows = db.query(Follow.following_id).filter(
            Follow.follower_id == user_id,
            Follow.following_type == FollowingType.ARTIST
        ).all()
        return {row.following_id for row in rows}

# Create singleton instance
follow_service = FollowService()
