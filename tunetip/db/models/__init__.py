from tunetip.db.models.user import User
from tunetip.db.models.artist import Artist
from tunetip.db.models.track import Track
from tunetip.db.models.follow import Follow, FollowingType
from tunetip.db.models.activity import Activity, ActivityType, EntityType
from tunetip.db.models.playlist import Playlist, PlaylistTrack
from tunetip.db.models.collaborator import CollaboratorRole, CollaboratorStatus, PlaylistCollaborator
from tunetip.db.models.change_request import ChangeAction, ChangeStatus, PlaylistChangeRequest
from tunetip.db.models.smart_playlist import SmartPlaylist

__all__ = [
    "Activity",
    "ActivityType",
    "Artist",
    "ChangeAction",
    "ChangeStatus",
    "CollaboratorRole",
    "CollaboratorStatus",
    "EntityType",
    "Follow",
    "FollowingType",
    "Playlist",
    "PlaylistChangeRequest",
    "PlaylistCollaborator",
    "PlaylistTrack",
    "SmartPlaylist",
    "Track",
    "User",
]
