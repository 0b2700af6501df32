# ============================================================================
# FILE: tunetip/schemas/collaborator.py
# ============================================================================
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from tunetip.db.models.collaborator import CollaboratorRole, CollaboratorStatus

class CollaboratorInvite(BaseModel):
    """Invite by username or email"""
    identifier: str = Field(..., min_length=1)
    role: CollaboratorRole = CollaboratorRole.VIEWER

class CollaboratorRoleUpdate(BaseModel):
    role: CollaboratorRole

class CollaboratorResponse(BaseModel):
    id: int
    playlist_id: int
    user_id: int
    role: CollaboratorRole
    status: CollaboratorStatus
    invited_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
