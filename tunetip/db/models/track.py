
# ============================================================================
# FILE: tunetip/db/models/track.py
# ============================================================================
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from datetime import datetime
from tunetip.db.base import Base

class Track(Base):
    """Track metadata; read-only from the playlist engines' point of view"""
    __tablename__ = "tracks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    duration = Column(Integer, nullable=True)  # seconds
    genre = Column(String(100), nullable=True, index=True)
    artist_id = Column(Integer, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    total_tips = Column(Numeric(18, 7), nullable=False, default=0)  # XLM
    plays = Column(Integer, nullable=False, default=0)
    is_public = Column(Boolean, nullable=False, default=True)
    release_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    artist = relationship("Artist", back_populates="tracks")
