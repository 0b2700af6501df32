
# ============================================================================
# FILE: tunetip/db/models/collaborator.py
# ============================================================================
import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, UniqueConstraint, text
from sqlalchemy.orm import relationship
from datetime import datetime
from tunetip.db.base import Base

class CollaboratorRole(str, enum.Enum):
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

class CollaboratorStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"

class PlaylistCollaborator(Base):
    """Role of a user on a playlist, with invite status"""
    __tablename__ = "playlist_collaborators"
    __table_args__ = (
        UniqueConstraint("playlist_id", "user_id", name="uq_playlist_collaborator"),
        # one owner row per playlist
        Index(
            "uq_playlist_collaborators_owner",
            "playlist_id",
            unique=True,
            sqlite_where=text("role = 'owner'"),
            postgresql_where=text("role = 'owner'"),
        ),
        Index("ix_playlist_collaborators_status", "playlist_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    playlist_id = Column(Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(
        Enum(CollaboratorRole, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    status = Column(
        Enum(CollaboratorStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CollaboratorStatus.PENDING,
    )
    invited_at = Column(DateTime, default=datetime.utcnow)
    accepted_at = Column(DateTime, nullable=True)

    # Relationships
    playlist = relationship("Playlist", back_populates="collaborators")
    user = relationship("User")
