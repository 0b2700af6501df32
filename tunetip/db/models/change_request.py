
# ============================================================================
# FILE: tunetip/db/models/change_request.py
# ============================================================================
import enum
from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship
from datetime import datetime
from tunetip.db.base import Base

class ChangeAction(str, enum.Enum):
    ADD_TRACK = "add_track"
    REMOVE_TRACK = "remove_track"
    REORDER_TRACKS = "reorder_tracks"

class ChangeStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class PlaylistChangeRequest(Base):
    """A proposed playlist mutation waiting for the owner's review"""
    __tablename__ = "playlist_change_requests"
    __table_args__ = (
        Index("ix_change_requests_playlist_status", "playlist_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    playlist_id = Column(Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    requested_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(
        Enum(ChangeAction, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    payload = Column(JSON, nullable=False)
    status = Column(
        Enum(ChangeStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ChangeStatus.PENDING,
    )
    reviewed_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    playlist = relationship("Playlist", back_populates="change_requests")
    requested_by = relationship("User", foreign_keys=[requested_by_id])
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_id])

    @property
    def is_terminal(self) -> bool:
        return self.status != ChangeStatus.PENDING
