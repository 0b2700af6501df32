
# ============================================================================
# FILE: tunetip/db/models/user.py
# ============================================================================
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from tunetip.db.base import Base

class User(Base):
    """User model; identity and authentication are managed elsewhere"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    playlists = relationship("Playlist", back_populates="user", cascade="all, delete-orphan")
