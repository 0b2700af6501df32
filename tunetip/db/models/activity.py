
# ============================================================================
# FILE: tunetip/db/models/activity.py
# ============================================================================
import enum
from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer
from datetime import datetime
from tunetip.db.base import Base

class ActivityType(str, enum.Enum):
    PLAYLIST_TRACK_ADDED = "playlist_track_added"
    PLAYLIST_TRACK_REMOVED = "playlist_track_removed"
    PLAYLIST_COLLABORATOR_INVITED = "playlist_collaborator_invited"
    PLAYLIST_COLLABORATOR_ACCEPTED = "playlist_collaborator_accepted"
    PLAYLIST_COLLABORATOR_REJECTED = "playlist_collaborator_rejected"
    PLAYLIST_COLLABORATOR_ROLE_UPDATED = "playlist_collaborator_role_updated"
    PLAYLIST_COLLABORATOR_REMOVED = "playlist_collaborator_removed"
    PLAYLIST_CHANGE_REQUESTED = "playlist_change_requested"
    PLAYLIST_CHANGE_APPROVED = "playlist_change_approved"
    PLAYLIST_CHANGE_REJECTED = "playlist_change_rejected"
    SMART_PLAYLIST_REFRESHED = "smart_playlist_refreshed"

class EntityType(str, enum.Enum):
    PLAYLIST = "playlist"
    SMART_PLAYLIST = "smart_playlist"

class Activity(Base):
    """Append-only activity log entry"""
    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_user_created", "user_id", "created_at"),
        Index("ix_activities_entity", "entity_type", "entity_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    activity_type = Column(
        Enum(ActivityType, native_enum=False, length=64, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    entity_type = Column(
        Enum(EntityType, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    entity_id = Column(Integer, nullable=False)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=True)
    is_seen = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
