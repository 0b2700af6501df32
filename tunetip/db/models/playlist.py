
# ============================================================================
# FILE: tunetip/db/models/playlist.py
# ============================================================================
from sqlalchemy import Boolean, Column, Integer, String, DateTime, ForeignKey, Index, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from tunetip.db.base import Base

class Playlist(Base):
    """User playlist with denormalized track_count / total_duration"""
    __tablename__ = "playlists"
    __table_args__ = (
        Index("ix_playlists_user_public", "user_id", "is_public"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    approval_required = Column(Boolean, nullable=False, default=False)
    cover_image = Column(String(500), nullable=True)
    track_count = Column(Integer, nullable=False, default=0)
    total_duration = Column(Integer, nullable=False, default=0)  # seconds
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="playlists")
    tracks = relationship(
        "PlaylistTrack",
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PlaylistTrack.position",
    )
    collaborators = relationship(
        "PlaylistCollaborator",
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    change_requests = relationship(
        "PlaylistChangeRequest",
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    smart_playlist = relationship(
        "SmartPlaylist",
        back_populates="playlist",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_smart(self) -> bool:
        return self.smart_playlist is not None

class PlaylistTrack(Base):
    """Ordered playlist membership; positions are 0-based and dense"""
    __tablename__ = "playlist_tracks"
    __table_args__ = (
        UniqueConstraint("playlist_id", "track_id", name="uq_playlist_track"),
        Index("ix_playlist_tracks_position", "playlist_id", "position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    playlist_id = Column(Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    track_id = Column(Integer, ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    playlist = relationship("Playlist", back_populates="tracks")
    track = relationship("Track", lazy="joined")
