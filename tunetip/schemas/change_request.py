# ============================================================================
# FILE: tunetip/schemas/change_request.py
# ============================================================================
from pydantic import BaseModel
from typing import Any, Dict, Literal, Optional
from datetime import datetime
from tunetip.db.models.change_request import ChangeAction, ChangeStatus

class ChangeRequestResponse(BaseModel):
    """A pending (or reviewed) mutation; `kind` tags deferred mutations"""
    kind: Literal["change_request"] = "change_request"
    id: int
    playlist_id: int
    requested_by_id: int
    action: ChangeAction
    payload: Dict[str, Any]
    status: ChangeStatus
    reviewed_by_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
