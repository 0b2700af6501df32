# ============================================================================
# FILE: tunetip/schemas/activity.py
# ============================================================================
from pydantic import BaseModel
from typing import Any, Dict
from tunetip.db.models.activity import ActivityType, EntityType

class ActivityEvent(BaseModel):
    """Event handed to the activity sink after a successful mutation"""
    user_id: int
    activity_type: ActivityType
    entity_type: EntityType
    entity_id: int
    metadata: Dict[str, Any] = {}
