
# ============================================================================
# FILE: tunetip/db/models/artist.py
# ============================================================================
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from tunetip.db.base import Base

class Artist(Base):
    """Artist profile that owns tracks and can be followed"""
    __tablename__ = "artists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    artist_name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    tracks = relationship("Track", back_populates="artist")
