"""Factory Boy factories for database models used in tests."""

from datetime import date, datetime, timedelta

import factory
from factory.alchemy import SQLAlchemyModelFactory

from tunetip.db.models import (
    Artist,
    CollaboratorRole,
    CollaboratorStatus,
    Follow,
    FollowingType,
    Playlist,
    PlaylistCollaborator,
    PlaylistTrack,
    SmartPlaylist,
    Track,
    User,
)


class _BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session = None
        sqlalchemy_session_persistence = "commit"


class UserFactory(_BaseFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")


class ArtistFactory(_BaseFactory):
    class Meta:
        model = Artist

    artist_name = factory.Sequence(lambda n: f"Artist {n}")


class TrackFactory(_BaseFactory):
    class Meta:
        model = Track

    title = factory.Sequence(lambda n: f"Track {n}")
    duration = 180
    genre = "rock"
    artist = factory.SubFactory(ArtistFactory)
    total_tips = 0
    plays = 0
    is_public = True
    release_date = factory.LazyFunction(lambda: date(2024, 1, 1))
    created_at = factory.Sequence(lambda n: datetime(2024, 1, 1) + timedelta(minutes=n))
    updated_at = factory.LazyAttribute(lambda obj: obj.created_at)


class FollowFactory(_BaseFactory):
    class Meta:
        model = Follow

    following_type = FollowingType.ARTIST


class PlaylistFactory(_BaseFactory):
    """A bare playlist row; use make_playlist() to get the owner collaborator too"""

    class Meta:
        model = Playlist

    name = factory.Sequence(lambda n: f"Playlist {n}")
    user = factory.SubFactory(UserFactory)
    is_public = False
    approval_required = False
    track_count = 0
    total_duration = 0


class CollaboratorFactory(_BaseFactory):
    class Meta:
        model = PlaylistCollaborator

    role = CollaboratorRole.EDITOR
    status = CollaboratorStatus.ACCEPTED
    invited_at = factory.LazyFunction(datetime.utcnow)
    accepted_at = factory.LazyFunction(datetime.utcnow)


class PlaylistTrackFactory(_BaseFactory):
    class Meta:
        model = PlaylistTrack

    added_at = factory.LazyFunction(datetime.utcnow)


class SmartPlaylistFactory(_BaseFactory):
    class Meta:
        model = SmartPlaylist

    auto_update = True


_FACTORIES = [
    UserFactory,
    ArtistFactory,
    TrackFactory,
    FollowFactory,
    PlaylistFactory,
    CollaboratorFactory,
    PlaylistTrackFactory,
    SmartPlaylistFactory,
]


def set_session(session):
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = session


def reset_session():
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = None


def make_playlist(owner=None, **kwargs):
    """Playlist plus its accepted owner collaborator row"""
    owner = owner or UserFactory()
    playlist = PlaylistFactory(user=owner, **kwargs)
    CollaboratorFactory(
        playlist_id=playlist.id,
        user_id=owner.id,
        role=CollaboratorRole.OWNER,
        status=CollaboratorStatus.ACCEPTED,
    )
    return playlist


def add_member(user, playlist, role=CollaboratorRole.EDITOR, status=CollaboratorStatus.ACCEPTED):
    return CollaboratorFactory(
        playlist_id=playlist.id,
        user_id=user.id,
        role=role,
        status=status,
        accepted_at=datetime.utcnow() if status == CollaboratorStatus.ACCEPTED else None,
    )


__all__ = [
    "ArtistFactory",
    "CollaboratorFactory",
    "FollowFactory",
    "PlaylistFactory",
    "PlaylistTrackFactory",
    "SmartPlaylistFactory",
    "TrackFactory",
    "UserFactory",
    "add_member",
    "make_playlist",
    "set_session",
    "reset_session",
]
