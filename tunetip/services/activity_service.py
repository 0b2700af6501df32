# ============================================================================
# FILE: tunetip/services/activity_service.py
# ============================================================================
from typing import Any, Dict
from sqlalchemy.orm import Session
from tunetip.db.models.activity import Activity, ActivityType, EntityType
from tunetip.schemas.activity import ActivityEvent
import logging

logger = logging.getLogger(__name__)

class ActivityService:
    """Best-effort activity sink used after a mutation has committed"""

    def record(self, db: Session, event: ActivityEvent) -> None:
        """
        Append an activity row through a separate session on the caller's engine.

        Never raises: a playlist mutation has already succeeded by the time
        this is called, so failures are logged and dropped.
        """
        try:
            with Session(bind=db.get_bind()) as activity_db:
                activity_db.add(Activity(
                    user_id=event.user_id,
                    activity_type=event.activity_type,
                    entity_type=event.entity_type,
                    entity_id=event.entity_id,
                    details=event.metadata,
                ))
                activity_db.commit()
        except Exception as e:
            logger.warning(f"Failed to create activity {event.activity_type.value}: {e}")

    def emit(
        self,
        db: Session,
        user_id: int,
        activity_type: ActivityType,
        entity_id: int,
        metadata: Dict[str, Any],
        entity_type: EntityType = EntityType.PLAYLIST,
    ) -> None:
        """Shorthand for record() with keyword fields"""
        self.record(db, ActivityEvent(
            user_id=user_id,
            activity_type=activity_type,
            entity_type=entity_type,
            entity_id=entity_id,
            metadata=metadata,
        ))

# Create singleton instance
activity_service = ActivityService()
