# ============================================================================
# FILE: tunetip/services/change_request_service.py
# ============================================================================
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from tunetip.core.exceptions import BadRequestError, NotFoundError
from tunetip.db.models.activity import ActivityType
from tunetip.db.models.change_request import ChangeAction, ChangeStatus, PlaylistChangeRequest
from tunetip.services.activity_service import ActivityService, activity_service
import logging

logger = logging.getLogger(__name__)

class ChangeRequestService:
    """Ledger of proposed mutations awaiting owner review"""

    def __init__(self, activities: ActivityService):
        self.activities = activities

    def create(
        self,
        db: Session,
        playlist_id: int,
        requested_by_id: int,
        action: ChangeAction,
        payload: Dict[str, Any],
    ) -> PlaylistChangeRequest:
        """Persist a pending request; the playlist itself is left untouched"""
        try:
            change_request = PlaylistChangeRequest(
                playlist_id=playlist_id,
                requested_by_id=requested_by_id,
                action=action,
                payload=payload,
                status=ChangeStatus.PENDING,
                created_at=datetime.utcnow(),
            )
            db.add(change_request)
            db.commit()
            db.refresh(change_request)
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating change request for playlist {playlist_id}: {e}")
            raise

        logger.info(f"Change request {change_request.id} ({action.value}) queued for playlist {playlist_id}")
        self.activities.emit(
            db,
            user_id=requested_by_id,
            activity_type=ActivityType.PLAYLIST_CHANGE_REQUESTED,
            entity_id=playlist_id,
            metadata={"change_request_id": change_request.id, "action": action.value, "payload": payload},
        )
        return change_request

    def list_requests(self, db: Session, playlist_id: int, status: Optional[ChangeStatus] = None) -> List[PlaylistChangeRequest]:
        """Newest first, optionally filtered by status"""
        query = db.query(PlaylistChangeRequest).filter(PlaylistChangeRequest.playlist_id == playlist_id)
        if status is not None:
            query = query.filter(PlaylistChangeRequest.status == status)
        return query.order_by(PlaylistChangeRequest.created_at.desc(), PlaylistChangeRequest.id.desc()).all()

    def get_pending(self, db: Session, playlist_id: int, change_request_id: int) -> PlaylistChangeRequest:
        change_request = db.query(PlaylistChangeRequest).filter(
            PlaylistChangeRequest.id == change_request_id,
            PlaylistChangeRequest.playlist_id == playlist_id,
            PlaylistChangeRequest.status == ChangeStatus.PENDING
        ).first()
        if not change_request:
            raise NotFoundError("Change request not found")
        return change_request

    def mark_reviewed(self, change_request: PlaylistChangeRequest, status: ChangeStatus, reviewer_id: int) -> None:
        """Move a pending request to a terminal state; does not commit"""
        if change_request.is_terminal:
            raise BadRequestError("Change request has already been reviewed")
        if status == ChangeStatus.PENDING:
            raise BadRequestError("Reviewed status must be approved or rejected")
        change_request.status = status
        change_request.reviewed_by_id = reviewer_id
        change_request.reviewed_at = datetime.utcnow()

# Create singleton instance
change_request_service = ChangeRequestService(activities=activity_service)
