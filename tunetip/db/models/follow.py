
# ============================================================================
# FILE: tunetip/db/models/follow.py
# ============================================================================
import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from datetime import datetime
from tunetip.db.base import Base

class FollowingType(str, enum.Enum):
    USER = "user"
    ARTIST = "artist"

class Follow(Base):
    """A user following another user or an artist"""
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", "following_type", name="uq_follow"),
    )

    id = Column(Integer, primary_key=True, index=True)
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(Integer, nullable=False)
    following_type = Column(
        Enum(FollowingType, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow)
