
# ============================================================================
# FILE: tunetip/db/models/smart_playlist.py
# ============================================================================
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tunetip.db.base import Base

class SmartPlaylist(Base):
    """Criteria attached to a playlist whose membership is derived, never edited"""
    __tablename__ = "smart_playlists"

    id = Column(Integer, primary_key=True, index=True)
    playlist_id = Column(
        Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    criteria = Column(JSON, nullable=False)
    auto_update = Column(Boolean, nullable=False, default=True)
    last_updated = Column(DateTime, nullable=True)

    # Relationships
    playlist = relationship("Playlist", back_populates="smart_playlist")
