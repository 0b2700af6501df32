# ============================================================================
# FILE: tunetip/services/smart_playlist_service.py
# ============================================================================
from datetime import datetime
from typing import Any, List, Optional, Tuple
from sqlalchemy.orm import Session
from tunetip.db.models.activity import ActivityType, EntityType
from tunetip.db.models.playlist import Playlist, PlaylistTrack
from tunetip.db.models.smart_playlist import SmartPlaylist
from tunetip.db.models.track import Track
from tunetip.db.session import transaction
from tunetip.schemas.smart_playlist import (
    ArtistCriteria,
    CriteriaBase,
    DateRangeCriteria,
    FollowedArtistsCriteria,
    GenreCriteria,
    MostTippedCriteria,
    RecentlyPlayedCriteria,
    SmartPlaylistCreate,
    criteria_to_json,
    normalize_criteria,
)
from tunetip.services.activity_service import ActivityService, activity_service
from tunetip.services.collaborator_service import CollaboratorService, collaborator_service
from tunetip.services.follow_service import FollowService, follow_service
from tunetip.services.playlist_service import PlaylistService, playlist_service, recompute_aggregates
import logging

logger = logging.getLogger(__name__)

class SmartPlaylistService:
    """
    Smart playlists: criteria resolved into an ordered, size-bounded track list.

    Membership is only ever replaced wholesale (on creation and refresh);
    manual edits are refused by the playlist service.
    """

    def __init__(
        self,
        playlists: PlaylistService,
        collaborators: CollaboratorService,
        follows: FollowService,
        activities: ActivityService,
    ):
        self.playlists = playlists
        self.collaborators = collaborators
        self.follows = follows
        self.activities = activities

    def resolve(self, db: Session, criteria: CriteriaBase, user_id: Optional[int]) -> List[Track]:
        """Run a normalized criteria against the public track catalogue"""
        followed_artist_ids = None
        if isinstance(criteria, FollowedArtistsCriteria):
            followed_artist_ids = self.follows.list_followed_artist_ids(db, user_id) if user_id else set()
            if not followed_artist_ids:
                return []

        query = db.query(Track).filter(Track.is_public.is_(True))

        if isinstance(criteria, GenreCriteria):
            query = query.filter(Track.genre.in_(criteria.genres))
        elif isinstance(criteria, ArtistCriteria):
            query = query.filter(Track.artist_id.in_(criteria.artist_ids))
        elif isinstance(criteria, DateRangeCriteria):
            if criteria.date_from is not None:
                query = query.filter(Track.release_date >= criteria.date_from)
            if criteria.date_to is not None:
                query = query.filter(Track.release_date <= criteria.date_to)
        elif followed_artist_ids is not None:
            query = query.filter(Track.artist_id.in_(followed_artist_ids))

        if isinstance(criteria, MostTippedCriteria):
            order_column = Track.total_tips
        elif isinstance(criteria, RecentlyPlayedCriteria):
            order_column = Track.updated_at
        else:
            order_column = Track.created_at

        return query.order_by(order_column.desc(), Track.id.desc()).limit(criteria.limit).all()

    def preview_tracks(self, db: Session, user_id: Optional[int], raw_criteria: Any) -> Tuple[CriteriaBase, List[Track]]:
        """Resolve without persisting anything"""
        criteria = normalize_criteria(raw_criteria)
        return criteria, self.resolve(db, criteria, user_id)

    def create_smart_playlist(self, db: Session, user_id: int, smart_data: SmartPlaylistCreate) -> Playlist:
        """Create the playlist, owner row, criteria row and initial membership together"""
        criteria = normalize_criteria(smart_data.criteria)
        tracks = self.resolve(db, criteria, user_id)

        with transaction(db, "creating smart playlist"):
            playlist = Playlist(
                user_id=user_id,
                name=smart_data.name,
                description=smart_data.description,
                is_public=smart_data.is_public,
                approval_required=False,
                cover_image=smart_data.cover_image,
                track_count=0,
                total_duration=0,
            )
            db.add(playlist)
            db.flush()
            self.collaborators.ensure_owner(db, playlist.id, user_id)

            db.add(SmartPlaylist(
                playlist_id=playlist.id,
                criteria=criteria_to_json(criteria),
                auto_update=smart_data.auto_update,
                last_updated=datetime.utcnow() if tracks else None,
            ))
            self._write_membership(db, playlist, tracks)
            playlist_id = playlist.id

        logger.info(f"Smart playlist created: {playlist_id} ({criteria.type}, {len(tracks)} tracks) for user {user_id}")
        return self.playlists.get_playlist(db, playlist_id, user_id)

    def refresh_smart_playlist(self, db: Session, smart_playlist: SmartPlaylist) -> bool:
        """
        Re-resolve the criteria for the playlist owner and replace membership.

        Returns False without writing anything when the resolved track ids
        already match the stored order.
        """
        smart_playlist_id = smart_playlist.id
        playlist = db.query(Playlist).filter(Playlist.id == smart_playlist.playlist_id).first()
        if not playlist:
            logger.warning(f"Playlist not found for smart playlist {smart_playlist_id}")
            return False

        playlist_id, owner_id = playlist.id, playlist.user_id
        criteria = normalize_criteria(smart_playlist.criteria)
        tracks = self.resolve(db, criteria, owner_id)

        existing_ids = [
            row.track_id for row in db.query(PlaylistTrack.track_id).filter(
                PlaylistTrack.playlist_id == playlist_id
            ).order_by(PlaylistTrack.position.asc()).all()
        ]
        if existing_ids == [track.id for track in tracks]:
            return False

        with transaction(db, f"refreshing smart playlist {smart_playlist_id}"):
            db.query(PlaylistTrack).filter(
                PlaylistTrack.playlist_id == playlist_id
            ).delete(synchronize_session=False)
            self._write_membership(db, playlist, tracks)
            smart_playlist.last_updated = datetime.utcnow()

        logger.info(f"Smart playlist {smart_playlist_id} refreshed with {len(tracks)} tracks")
        self.activities.emit(
            db,
            user_id=owner_id,
            activity_type=ActivityType.SMART_PLAYLIST_REFRESHED,
            entity_id=smart_playlist_id,
            entity_type=EntityType.SMART_PLAYLIST,
            metadata={"playlist_id": playlist_id, "track_count": len(tracks)},
        )
        return True

    def refresh_all(self, db: Session) -> int:
        """Refresh every auto-updating smart playlist; one failure never stops the rest"""
        smart_playlist_ids = [
            row.id for row in db.query(SmartPlaylist.id).filter(
                SmartPlaylist.auto_update.is_(True)
            ).order_by(SmartPlaylist.id.asc()).all()
        ]

        refreshed = 0
        for smart_playlist_id in smart_playlist_ids:
            try:
                smart_playlist = db.query(SmartPlaylist).filter(SmartPlaylist.id == smart_playlist_id).first()
                if smart_playlist and self.refresh_smart_playlist(db, smart_playlist):
                    refreshed += 1
            except Exception as e:
                db.rollback()
                logger.warning(f"Failed to refresh smart playlist {smart_playlist_id}: {e}")

        logger.info(f"Smart playlist refresh finished: {refreshed}/{len(smart_playlist_ids)} changed")
        return refreshed

    def _write_membership(self, db: Session, playlist: Playlist, tracks: List[Track]) -> None:
        now = datetime.utcnow()
        db.add_all([
            PlaylistTrack(playlist_id=playlist.id, track_id=track.id, position=index, added_at=now)
            for index, track in enumerate(tracks)
        ])
        db.flush()
        recompute_aggregates(db, playlist)

# Create singleton instance
smart_playlist_service = SmartPlaylistService(
    playlists=playlist_service,
    collaborators=collaborator_service,
    follows=follow_service,
    activities=activity_service,
)
