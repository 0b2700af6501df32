# ============================================================================
# FILE: tunetip/services/collaborator_service.py
# ============================================================================
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from tunetip.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from tunetip.db.models.activity import ActivityType
from tunetip.db.models.collaborator import (
    CollaboratorRole,
    CollaboratorStatus,
    PlaylistCollaborator,
)
from tunetip.db.models.playlist import Playlist
from tunetip.services.activity_service import ActivityService, activity_service
from tunetip.services.user_service import UserService, user_service
import logging

logger = logging.getLogger(__name__)

class CollaboratorService:
    """
    Collaborator registry: who may do what on a playlist.

    Every playlist has exactly one accepted owner row. Other rows move
    pending -> accepted on acceptance; a re-invite of an existing,
    not yet accepted row is a pending -> pending transition that resets
    its timestamps.
    """

    def __init__(self, users: UserService, activities: ActivityService):
        self.users = users
        self.activities = activities

    # ------------------------------------------------------------------
    # Role resolution
    # ------------------------------------------------------------------

    def role_of(self, db: Session, playlist: Playlist, user_id: Optional[int]) -> Optional[CollaboratorRole]:
        """Owner by direct ownership, else the role of an accepted row; pending grants nothing"""
        if not user_id:
            return None
        if playlist.user_id == user_id:
            return CollaboratorRole.OWNER

        collaborator = self._find_accepted(db, playlist.id, user_id)
        return collaborator.role if collaborator else None

    def can_view(self, db: Session, playlist: Playlist, user_id: Optional[int]) -> bool:
        if playlist.is_public:
            return True
        if not user_id:
            return False
        if playlist.user_id == user_id:
            return True
        return self._find_accepted(db, playlist.id, user_id) is not None

    def ensure_owner(self, db: Session, playlist_id: int, user_id: int) -> PlaylistCollaborator:
        """Add the accepted owner row if missing; flushes within the caller's transaction"""
        existing = db.query(PlaylistCollaborator).filter(
            PlaylistCollaborator.playlist_id == playlist_id,
            PlaylistCollaborator.user_id == user_id,
            PlaylistCollaborator.role == CollaboratorRole.OWNER,
            PlaylistCollaborator.status == CollaboratorStatus.ACCEPTED
        ).first()
        if existing:
            return existing

        now = datetime.utcnow()
        collaborator = PlaylistCollaborator(
            playlist_id=playlist_id,
            user_id=user_id,
            role=CollaboratorRole.OWNER,
            status=CollaboratorStatus.ACCEPTED,
            invited_at=now,
            accepted_at=now,
        )
        db.add(collaborator)
        db.flush()
        return collaborator

    # ------------------------------------------------------------------
    # Invite lifecycle
    # ------------------------------------------------------------------

    def list_collaborators(self, db: Session, playlist: Playlist, user_id: Optional[int]) -> List[PlaylistCollaborator]:
        """Owners see every row, everyone else only accepted ones"""
        query = db.query(PlaylistCollaborator).filter(PlaylistCollaborator.playlist_id == playlist.id)
        if playlist.user_id != user_id:
            query = query.filter(PlaylistCollaborator.status == CollaboratorStatus.ACCEPTED)
        return query.order_by(PlaylistCollaborator.invited_at.asc(), PlaylistCollaborator.id.asc()).all()

    def invite(
        self,
        db: Session,
        playlist: Playlist,
        acting_user_id: int,
        identifier: str,
        role: Optional[CollaboratorRole] = None,
    ) -> PlaylistCollaborator:
        if playlist.user_id != acting_user_id:
            raise ForbiddenError("Only owners can invite collaborators")

        role = role or CollaboratorRole.VIEWER
        if role == CollaboratorRole.OWNER:
            raise BadRequestError("Cannot assign owner role via invite")

        invited_user = self.users.resolve_identifier(db, identifier)
        if invited_user.id == playlist.user_id:
            raise BadRequestError("Owner is already a collaborator")

        collaborator = db.query(PlaylistCollaborator).filter(
            PlaylistCollaborator.playlist_id == playlist.id,
            PlaylistCollaborator.user_id == invited_user.id
        ).first()

        if collaborator and collaborator.status == CollaboratorStatus.ACCEPTED:
            raise BadRequestError("User is already a collaborator")

        try:
            if collaborator is None:
                collaborator = PlaylistCollaborator(
                    playlist_id=playlist.id,
                    user_id=invited_user.id,
                    role=role,
                    status=CollaboratorStatus.PENDING,
                    invited_at=datetime.utcnow(),
                )
                db.add(collaborator)
            else:
                self._reinvite(collaborator, role)
            db.commit()
            db.refresh(collaborator)
        except Exception as e:
            db.rollback()
            logger.error(f"Error inviting collaborator to playlist {playlist.id}: {e}")
            raise

        logger.info(f"User {invited_user.id} invited to playlist {playlist.id} as {role.value}")
        self.activities.emit(
            db,
            user_id=acting_user_id,
            activity_type=ActivityType.PLAYLIST_COLLABORATOR_INVITED,
            entity_id=playlist.id,
            metadata={"invited_user_id": invited_user.id, "role": role.value},
        )
        return collaborator

    def _reinvite(self, collaborator: PlaylistCollaborator, role: CollaboratorRole) -> None:
        """pending -> pending: replace the role and restart the invite clock"""
        collaborator.role = role
        collaborator.status = CollaboratorStatus.PENDING
        collaborator.accepted_at = None
        collaborator.invited_at = datetime.utcnow()

    def accept(self, db: Session, playlist: Playlist, collaborator_id: int, acting_user_id: int) -> PlaylistCollaborator:
        collaborator = self._get_collaborator(db, playlist.id, collaborator_id, "Collaborator invite not found")
        if collaborator.user_id != acting_user_id:
            raise ForbiddenError("You cannot accept this invite")

        if collaborator.status != CollaboratorStatus.ACCEPTED:
            try:
                collaborator.status = CollaboratorStatus.ACCEPTED
                collaborator.accepted_at = datetime.utcnow()
                db.commit()
                db.refresh(collaborator)
            except Exception as e:
                db.rollback()
                logger.error(f"Error accepting invite {collaborator_id}: {e}")
                raise
            logger.info(f"Invite {collaborator_id} accepted for playlist {playlist.id}")

        self.activities.emit(
            db,
            user_id=acting_user_id,
            activity_type=ActivityType.PLAYLIST_COLLABORATOR_ACCEPTED,
            entity_id=playlist.id,
            metadata={"collaborator_id": collaborator.id, "role": collaborator.role.value},
        )
        return collaborator

    def reject(self, db: Session, playlist: Playlist, collaborator_id: int, acting_user_id: int) -> None:
        collaborator = self._get_collaborator(db, playlist.id, collaborator_id, "Collaborator invite not found")
        if collaborator.user_id != acting_user_id:
            raise ForbiddenError("You cannot reject this invite")
        if collaborator.role == CollaboratorRole.OWNER:
            raise BadRequestError("Cannot remove the owner")

        role = collaborator.role
        self._delete(db, collaborator)
        self.activities.emit(
            db,
            user_id=acting_user_id,
            activity_type=ActivityType.PLAYLIST_COLLABORATOR_REJECTED,
            entity_id=playlist.id,
            metadata={"collaborator_id": collaborator_id, "role": role.value},
        )

    # ------------------------------------------------------------------
    # Owner management
    # ------------------------------------------------------------------

    def update_role(
        self,
        db: Session,
        playlist: Playlist,
        collaborator_id: int,
        acting_user_id: int,
        role: CollaboratorRole,
    ) -> PlaylistCollaborator:
        if playlist.user_id != acting_user_id:
            raise ForbiddenError("Only owners can update collaborator roles")
        if role == CollaboratorRole.OWNER:
            raise BadRequestError("Cannot assign owner role")

        collaborator = self._get_collaborator(db, playlist.id, collaborator_id)
        if collaborator.role == CollaboratorRole.OWNER:
            raise BadRequestError("Cannot update owner role")

        try:
            collaborator.role = role
            db.commit()
            db.refresh(collaborator)
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating collaborator {collaborator_id}: {e}")
            raise

        logger.info(f"Collaborator {collaborator_id} on playlist {playlist.id} is now {role.value}")
        self.activities.emit(
            db,
            user_id=acting_user_id,
            activity_type=ActivityType.PLAYLIST_COLLABORATOR_ROLE_UPDATED,
            entity_id=playlist.id,
            metadata={"collaborator_id": collaborator.id, "role": role.value},
        )
        return collaborator

    def remove(self, db: Session, playlist: Playlist, collaborator_id: int, acting_user_id: int) -> None:
        if playlist.user_id != acting_user_id:
            raise ForbiddenError("Only owners can remove collaborators")

        collaborator = self._get_collaborator(db, playlist.id, collaborator_id)
        if collaborator.role == CollaboratorRole.OWNER:
            raise BadRequestError("Cannot remove the owner")

        role = collaborator.role
        self._delete(db, collaborator)
        self.activities.emit(
            db,
            user_id=acting_user_id,
            activity_type=ActivityType.PLAYLIST_COLLABORATOR_REMOVED,
            entity_id=playlist.id,
            metadata={"collaborator_id": collaborator_id, "role": role.value},
        )

    # ------------------------------------------------------------------

    def _find_accepted(self, db: Session, playlist_id: int, user_id: int) -> Optional[PlaylistCollaborator]:
        return db.query(PlaylistCollaborator).filter(
            PlaylistCollaborator.playlist_id == playlist_id,
            PlaylistCollaborator.user_id == user_id,
            PlaylistCollaborator.status == CollaboratorStatus.ACCEPTED
        ).first()

    def _get_collaborator(
        self,
        db: Session,
        playlist_id: int,
        collaborator_id: int,
        not_found_message: str = "Collaborator not found",
    ) -> PlaylistCollaborator:
        collaborator = db.query(PlaylistCollaborator).filter(
            PlaylistCollaborator.id == collaborator_id,
            PlaylistCollaborator.playlist_id == playlist_id
        ).first()
        if not collaborator:
            raise NotFoundError(not_found_message)
        return collaborator

    def _delete(self, db: Session, collaborator: PlaylistCollaborator) -> None:
        collaborator_id, playlist_id = collaborator.id, collaborator.playlist_id
        try:
            db.delete(collaborator)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error removing collaborator {collaborator_id}: {e}")
            raise
        logger.info(f"Collaborator {collaborator_id} removed from playlist {playlist_id}")

# Create singleton instance
collaborator_service = CollaboratorService(users=user_service, activities=activity_service)
