# ============================================================================
# FILE: tunetip/services/playlist_service.py
# ============================================================================
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session
from tunetip.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from tunetip.db.models.activity import ActivityType
from tunetip.db.models.change_request import ChangeAction, ChangeStatus, PlaylistChangeRequest
from tunetip.db.models.collaborator import CollaboratorRole, CollaboratorStatus, PlaylistCollaborator
from tunetip.db.models.playlist import Playlist, PlaylistTrack
from tunetip.db.models.track import Track
from tunetip.db.session import transaction
from tunetip.schemas.playlist import PlaylistCreate, PlaylistDuplicate, PlaylistUpdate, TrackPosition
from tunetip.services.activity_service import ActivityService, activity_service
from tunetip.services.change_request_service import ChangeRequestService, change_request_service
from tunetip.services.collaborator_service import CollaboratorService, collaborator_service
from tunetip.services.track_service import TrackService, track_service
import logging

logger = logging.getLogger(__name__)

MutationResult = Union[Playlist, PlaylistChangeRequest]

def recompute_aggregates(db: Session, playlist: Playlist) -> None:
    """Set track_count / total_duration from the membership rows (pending changes are flushed first)"""
    count, total = db.query(
        func.count(PlaylistTrack.id),
        func.coalesce(func.sum(Track.duration), 0)
    ).join(Track, Track.id == PlaylistTrack.track_id).filter(
        PlaylistTrack.playlist_id == playlist.id
    ).one()
    playlist.track_count = int(count)
    playlist.total_duration = max(0, int(total))

def _track_positions(tracks: Iterable[Union[TrackPosition, Dict[str, Any]]]) -> List[Tuple[int, int]]:
    """Accept request models or stored change-request payload entries"""
    pairs = []
    for item in tracks:
        if isinstance(item, dict):
            pairs.append((int(item["track_id"]), int(item["position"])))
        else:
            pairs.append((item.track_id, item.position))
    return pairs

class PlaylistService:
    """
    Service layer for playlist operations.

    Mutations (add/remove/reorder) run through one state machine:
    role check, then either a change request (approval workflow, non-owner)
    or a direct apply inside a single transaction. Activity logging happens
    after commit and never fails the mutation.
    """

    def __init__(
        self,
        collaborators: CollaboratorService,
        change_requests: ChangeRequestService,
        tracks: TrackService,
        activities: ActivityService,
    ):
        self.collaborators = collaborators
        self.change_requests = change_requests
        self.tracks = tracks
        self.activities = activities

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_playlist(self, db: Session, user_id: int, playlist_data: PlaylistCreate) -> Playlist:
        """Create a playlist together with its accepted owner collaborator row"""
        with transaction(db, "creating playlist"):
            playlist = Playlist(
                user_id=user_id,
                name=playlist_data.name,
                description=playlist_data.description,
                is_public=playlist_data.is_public,
                approval_required=playlist_data.approval_required,
                cover_image=playlist_data.cover_image,
                track_count=0,
                total_duration=0,
            )
            db.add(playlist)
            db.flush()
            self.collaborators.ensure_owner(db, playlist.id, user_id)

        db.refresh(playlist)
        logger.info(f"Playlist created: {playlist.id} for user {user_id}")
        return playlist

    def get_playlist_for_edit(self, db: Session, playlist_id: int) -> Playlist:
        """Load a playlist without access checks (callers check roles themselves)"""
        playlist = db.query(Playlist).filter(Playlist.id == playlist_id).first()
        if not playlist:
            raise NotFoundError(f"Playlist with ID {playlist_id} not found")
        return playlist

    def get_playlist(self, db: Session, playlist_id: int, user_id: Optional[int] = None) -> Playlist:
        """Get a playlist with its ordered tracks, enforcing view access"""
        playlist = self.get_playlist_for_edit(db, playlist_id)
        if not self.collaborators.can_view(db, playlist, user_id):
            raise ForbiddenError("You do not have access to this playlist")
        return playlist

    def list_accessible(
        self,
        db: Session,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        is_public: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Playlists the user owns or collaborates on (accepted invites only)"""
        collaborations = db.query(PlaylistCollaborator.playlist_id).filter(
            PlaylistCollaborator.user_id == user_id,
            PlaylistCollaborator.status == CollaboratorStatus.ACCEPTED
        )
        query = db.query(Playlist).filter(
            or_(Playlist.user_id == user_id, Playlist.id.in_(collaborations))
        )
        if is_public is not None:
            query = query.filter(Playlist.is_public == is_public)
        return self._paginate(query, page, limit)

    def list_public(self, db: Session, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        query = db.query(Playlist).filter(Playlist.is_public.is_(True))
        return self._paginate(query, page, limit)

    def list_by_user(
        self,
        db: Session,
        target_user_id: int,
        viewer_id: Optional[int] = None,
        page: int = 1,
        limit: int = 10,
        is_public: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Another user's playlists; non-owners only ever see public ones"""
        query = db.query(Playlist).filter(Playlist.user_id == target_user_id)
        if viewer_id != target_user_id:
            query = query.filter(Playlist.is_public.is_(True))
        elif is_public is not None:
            query = query.filter(Playlist.is_public == is_public)
        return self._paginate(query, page, limit)

    def update_playlist(self, db: Session, playlist_id: int, user_id: int, update_data: PlaylistUpdate) -> Playlist:
        """Update playlist details (owner only)"""
        playlist = self.get_playlist(db, playlist_id, user_id)
        if playlist.user_id != user_id:
            raise ForbiddenError("You can only update your own playlists")

        with transaction(db, f"updating playlist {playlist_id}"):
            for field, value in update_data.model_dump(exclude_unset=True).items():
                if value is None and field in ("name", "is_public", "approval_required"):
                    continue
                setattr(playlist, field, value)

        db.refresh(playlist)
        logger.info(f"Playlist updated: {playlist_id}")
        return playlist

    def delete_playlist(self, db: Session, playlist_id: int, user_id: int) -> None:
        """Delete a playlist with its tracks, collaborators, change requests and smart criteria"""
        playlist = self.get_playlist(db, playlist_id, user_id)
        if playlist.user_id != user_id:
            raise ForbiddenError("You can only delete your own playlists")

        with transaction(db, f"deleting playlist {playlist_id}"):
            db.delete(playlist)
        logger.info(f"Playlist deleted: {playlist_id}")

    def share_playlist(self, db: Session, playlist_id: int, user_id: int) -> Dict[str, Any]:
        """Make a playlist public and return its share link"""
        playlist = self.get_playlist(db, playlist_id, user_id)
        if playlist.user_id != user_id:
            raise ForbiddenError("You can only share your own playlists")

        if not playlist.is_public:
            with transaction(db, f"sharing playlist {playlist_id}"):
                playlist.is_public = True
            logger.info(f"Playlist {playlist_id} made public")

        return {
            "playlist_id": playlist_id,
            "share_url": f"/playlists/{playlist_id}",
            "is_public": True,
            "message": "Playlist is now public and shareable",
        }

    # ------------------------------------------------------------------
    # Mutation engine
    # ------------------------------------------------------------------

    def add_track(
        self,
        db: Session,
        playlist_id: int,
        user_id: int,
        track_id: int,
        position: Optional[int] = None,
    ) -> MutationResult:
        """Add a track directly, or queue a change request when approval is required"""
        playlist = self.get_playlist_for_edit(db, playlist_id)
        role = self._authorize_edit(db, playlist, user_id)

        if playlist.approval_required and role != CollaboratorRole.OWNER:
            self._ensure_track_addable(db, playlist_id, track_id)
            return self.change_requests.create(
                db, playlist_id, user_id, ChangeAction.ADD_TRACK,
                {"track_id": track_id, "position": position},
            )

        with transaction(db, f"adding track {track_id} to playlist {playlist_id}"):
            track, position = self._apply_add_track(db, playlist, track_id, position)
        self._track_added(db, playlist_id, user_id, track, position)
        return self.get_playlist(db, playlist_id, user_id)

    def remove_track(self, db: Session, playlist_id: int, track_id: int, user_id: int) -> MutationResult:
        """Remove a track directly, or queue a change request when approval is required"""
        playlist = self.get_playlist_for_edit(db, playlist_id)
        role = self._authorize_edit(db, playlist, user_id)

        if playlist.approval_required and role != CollaboratorRole.OWNER:
            self._ensure_track_in_playlist(db, playlist_id, track_id)
            return self.change_requests.create(
                db, playlist_id, user_id, ChangeAction.REMOVE_TRACK, {"track_id": track_id},
            )

        with transaction(db, f"removing track {track_id} from playlist {playlist_id}"):
            title = self._apply_remove_track(db, playlist, track_id)
        self._track_removed(db, playlist_id, user_id, track_id, title)
        return self.get_playlist(db, playlist_id, user_id)

    def reorder_tracks(
        self,
        db: Session,
        playlist_id: int,
        user_id: int,
        tracks: List[TrackPosition],
    ) -> MutationResult:
        """
        Set the positions of the given tracks.

        Membership is checked before the approval decision so an invalid
        reorder never produces a change request. Positions are written as
        submitted; other rows are not renumbered.
        """
        playlist = self.get_playlist_for_edit(db, playlist_id)
        role = self._authorize_edit(db, playlist, user_id)
        pairs = _track_positions(tracks)
        self._ensure_tracks_belong(db, playlist_id, pairs)

        if playlist.approval_required and role != CollaboratorRole.OWNER:
            return self.change_requests.create(
                db, playlist_id, user_id, ChangeAction.REORDER_TRACKS,
                {"tracks": [{"track_id": t, "position": p} for t, p in pairs]},
            )

        with transaction(db, f"reordering playlist {playlist_id}"):
            self._apply_reorder(db, playlist_id, pairs)
        logger.info(f"Tracks reordered in playlist {playlist_id}")
        return self.get_playlist(db, playlist_id, user_id)

    def duplicate_playlist(
        self,
        db: Session,
        playlist_id: int,
        user_id: int,
        duplicate_data: Optional[PlaylistDuplicate] = None,
    ) -> Playlist:
        """Copy a playlist's details and track order into a new playlist owned by user_id"""
        original = self.get_playlist(db, playlist_id, user_id)
        if original.user_id != user_id and not original.is_public:
            raise ForbiddenError("You do not have access to this playlist")

        duplicate_data = duplicate_data or PlaylistDuplicate()
        track_ids = [pt.track_id for pt in sorted(original.tracks, key=lambda pt: pt.position)]

        with transaction(db, f"duplicating playlist {playlist_id}"):
            copy = Playlist(
                user_id=user_id,
                name=duplicate_data.name or f"{original.name} (Copy)",
                description=original.description,
                is_public=original.is_public if duplicate_data.is_public is None else duplicate_data.is_public,
                approval_required=False,
                cover_image=original.cover_image,
                track_count=0,
                total_duration=0,
            )
            db.add(copy)
            db.flush()
            self.collaborators.ensure_owner(db, copy.id, user_id)

            now = datetime.utcnow()
            db.add_all([
                PlaylistTrack(playlist_id=copy.id, track_id=track_id, position=index, added_at=now)
                for index, track_id in enumerate(track_ids)
            ])
            db.flush()
            recompute_aggregates(db, copy)
            copy_id = copy.id

        logger.info(f"Playlist {playlist_id} duplicated as {copy_id}")
        return self.get_playlist(db, copy_id, user_id)

    # ------------------------------------------------------------------
    # Change request review
    # ------------------------------------------------------------------

    def list_change_requests(
        self,
        db: Session,
        playlist_id: int,
        user_id: int,
        status: Optional[ChangeStatus] = None,
    ) -> List[PlaylistChangeRequest]:
        playlist = self.get_playlist_for_edit(db, playlist_id)
        if playlist.user_id != user_id:
            raise ForbiddenError("Only owners can view change requests")
        return self.change_requests.list_requests(db, playlist_id, status)

    def approve_change_request(self, db: Session, playlist_id: int, change_request_id: int, user_id: int) -> Playlist:
        """Replay a pending request through the direct-apply path and mark it approved"""
        playlist = self._get_playlist_for_review(db, playlist_id, user_id, "approve")
        change_request = self.change_requests.get_pending(db, playlist_id, change_request_id)
        requester_id = change_request.requested_by_id
        action = change_request.action
        payload = dict(change_request.payload or {})

        with transaction(db, f"approving change request {change_request_id}"):
            if action == ChangeAction.ADD_TRACK:
                track, position = self._apply_add_track(db, playlist, int(payload["track_id"]), payload.get("position"))
            elif action == ChangeAction.REMOVE_TRACK:
                title = self._apply_remove_track(db, playlist, int(payload["track_id"]))
            else:
                pairs = _track_positions(payload.get("tracks", []))
                self._ensure_tracks_belong(db, playlist_id, pairs)
                self._apply_reorder(db, playlist_id, pairs)
            self.change_requests.mark_reviewed(change_request, ChangeStatus.APPROVED, user_id)

        logger.info(f"Change request {change_request_id} approved on playlist {playlist_id}")
        if action == ChangeAction.ADD_TRACK:
            self._track_added(db, playlist_id, requester_id, track, position)
        elif action == ChangeAction.REMOVE_TRACK:
            self._track_removed(db, playlist_id, requester_id, int(payload["track_id"]), title)
        self.activities.emit(
            db,
            user_id=user_id,
            activity_type=ActivityType.PLAYLIST_CHANGE_APPROVED,
            entity_id=playlist_id,
            metadata={"change_request_id": change_request_id, "action": action.value},
        )
        return self.get_playlist(db, playlist_id, user_id)

    def reject_change_request(
        self,
        db: Session,
        playlist_id: int,
        change_request_id: int,
        user_id: int,
    ) -> PlaylistChangeRequest:
        """Mark a pending request rejected; the playlist is not touched"""
        self._get_playlist_for_review(db, playlist_id, user_id, "reject")
        change_request = self.change_requests.get_pending(db, playlist_id, change_request_id)

        with transaction(db, f"rejecting change request {change_request_id}"):
            self.change_requests.mark_reviewed(change_request, ChangeStatus.REJECTED, user_id)

        db.refresh(change_request)
        logger.info(f"Change request {change_request_id} rejected on playlist {playlist_id}")
        self.activities.emit(
            db,
            user_id=user_id,
            activity_type=ActivityType.PLAYLIST_CHANGE_REJECTED,
            entity_id=playlist_id,
            metadata={"change_request_id": change_request_id, "action": change_request.action.value},
        )
        return change_request

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _authorize_edit(self, db: Session, playlist: Playlist, user_id: Optional[int]) -> CollaboratorRole:
        role = self.collaborators.role_of(db, playlist, user_id)
        if role is None:
            raise ForbiddenError("You do not have access to modify this playlist")
        if role == CollaboratorRole.VIEWER:
            raise ForbiddenError("You do not have permission to edit this playlist")
        if playlist.is_smart:
            raise ForbiddenError("Smart playlists cannot be manually edited")
        return role

    def _get_playlist_for_review(self, db: Session, playlist_id: int, user_id: int, verb: str) -> Playlist:
        playlist = self.get_playlist_for_edit(db, playlist_id)
        if playlist.user_id != user_id:
            raise ForbiddenError(f"Only owners can {verb} changes")
        if not playlist.approval_required:
            raise BadRequestError("Approval workflow is not enabled")
        return playlist

    def _ensure_track_addable(self, db: Session, playlist_id: int, track_id: int) -> Track:
        track = self.tracks.find_track(db, track_id)
        existing = db.query(PlaylistTrack.id).filter(
            PlaylistTrack.playlist_id == playlist_id,
            PlaylistTrack.track_id == track_id
        ).first()
        if existing:
            raise BadRequestError("Track is already in this playlist")
        return track

    def _ensure_track_in_playlist(self, db: Session, playlist_id: int, track_id: int) -> PlaylistTrack:
        playlist_track = db.query(PlaylistTrack).filter(
            PlaylistTrack.playlist_id == playlist_id,
            PlaylistTrack.track_id == track_id
        ).first()
        if not playlist_track:
            raise NotFoundError("Track not found in this playlist")
        return playlist_track

    def _ensure_tracks_belong(self, db: Session, playlist_id: int, pairs: List[Tuple[int, int]]) -> None:
        track_ids = [track_id for track_id, _ in pairs]
        if len(set(track_ids)) != len(track_ids):
            raise BadRequestError("Each track may appear only once in a reorder request")

        found = {
            row.track_id for row in db.query(PlaylistTrack.track_id).filter(
                PlaylistTrack.playlist_id == playlist_id,
                PlaylistTrack.track_id.in_(track_ids)
            ).all()
        }
        if found != set(track_ids):
            raise BadRequestError("Some tracks are not in this playlist")

    # ------------------------------------------------------------------
    # Apply primitives: no commit, the caller owns the transaction
    # ------------------------------------------------------------------

    def _apply_add_track(
        self,
        db: Session,
        playlist: Playlist,
        track_id: int,
        position: Optional[int] = None,
    ) -> Tuple[Track, int]:
        track = self._ensure_track_addable(db, playlist.id, track_id)

        if position is not None:
            # past-the-end positions become an append so positions stay dense
            count = db.query(func.count(PlaylistTrack.id)).filter(
                PlaylistTrack.playlist_id == playlist.id
            ).scalar()
            position = min(int(position), count)
            db.query(PlaylistTrack).filter(
                PlaylistTrack.playlist_id == playlist.id,
                PlaylistTrack.position >= position
            ).update({PlaylistTrack.position: PlaylistTrack.position + 1}, synchronize_session=False)
        else:
            max_position = db.query(func.max(PlaylistTrack.position)).filter(
                PlaylistTrack.playlist_id == playlist.id
            ).scalar()
            position = max_position + 1 if max_position is not None else 0

        db.add(PlaylistTrack(
            playlist_id=playlist.id,
            track_id=track_id,
            position=position,
            added_at=datetime.utcnow(),
        ))
        db.flush()
        recompute_aggregates(db, playlist)
        return track, position

    def _apply_remove_track(self, db: Session, playlist: Playlist, track_id: int) -> Optional[str]:
        playlist_track = self._ensure_track_in_playlist(db, playlist.id, track_id)
        removed_position = playlist_track.position
        title = playlist_track.track.title if playlist_track.track else None

        db.delete(playlist_track)
        db.flush()
        db.query(PlaylistTrack).filter(
            PlaylistTrack.playlist_id == playlist.id,
            PlaylistTrack.position > removed_position
        ).update({PlaylistTrack.position: PlaylistTrack.position - 1}, synchronize_session=False)
        recompute_aggregates(db, playlist)
        return title

    def _apply_reorder(self, db: Session, playlist_id: int, pairs: List[Tuple[int, int]]) -> None:
        for track_id, position in pairs:
            db.query(PlaylistTrack).filter(
                PlaylistTrack.playlist_id == playlist_id,
                PlaylistTrack.track_id == track_id
            ).update({PlaylistTrack.position: position}, synchronize_session=False)

    # ------------------------------------------------------------------

    def _track_added(self, db: Session, playlist_id: int, actor_id: int, track: Track, position: int) -> None:
        logger.info(f"Track {track.id} added to playlist {playlist_id} at position {position}")
        self.activities.emit(
            db,
            user_id=actor_id,
            activity_type=ActivityType.PLAYLIST_TRACK_ADDED,
            entity_id=playlist_id,
            metadata={"track_id": track.id, "track_title": track.title, "position": position},
        )

    def _track_removed(self, db: Session, playlist_id: int, actor_id: int, track_id: int, title: Optional[str]) -> None:
        logger.info(f"Track {track_id} removed from playlist {playlist_id}")
        self.activities.emit(
            db,
            user_id=actor_id,
            activity_type=ActivityType.PLAYLIST_TRACK_REMOVED,
            entity_id=playlist_id,
            metadata={"track_id": track_id, "track_title": title},
        )

    def _paginate(self, query: Query, page: int, limit: int) -> Dict[str, Any]:
        page = max(1, page)
        limit = max(1, limit)
        total = query.count()
        data = query.order_by(Playlist.created_at.desc(), Playlist.id.desc()).offset((page - 1) * limit).limit(limit).all()
        total_pages = (total + limit - 1) // limit
        return {
            "data": data,
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": total_pages,
                "has_next_page": page < total_pages,
                "has_previous_page": page > 1,
            },
        }

# Create singleton instance
playlist_service = PlaylistService(
    collaborators=collaborator_service,
    change_requests=change_request_service,
    tracks=track_service,
    activities=activity_service,
)
