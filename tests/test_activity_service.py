import logging

import pytest

from tunetip.db.models import Activity, ActivityType, EntityType, Playlist
from tunetip.schemas.activity import ActivityEvent
from tunetip.services import activity_service as activity_module
from tunetip.services.activity_service import activity_service
from tunetip.services.playlist_service import playlist_service


@pytest.mark.unit
def test_record_writes_activity(db_session, factories):
    user = factories.UserFactory()

    activity_service.record(db_session, ActivityEvent(
        user_id=user.id,
        activity_type=ActivityType.SMART_PLAYLIST_REFRESHED,
        entity_type=EntityType.SMART_PLAYLIST,
        entity_id=3,
        metadata={"playlist_id": 9, "track_count": 4},
    ))

    activity = db_session.query(Activity).one()
    assert activity.user_id == user.id
    assert activity.entity_type == EntityType.SMART_PLAYLIST
    assert activity.details == {"playlist_id": 9, "track_count": 4}
    assert activity.is_seen is False


@pytest.mark.unit
def test_failed_activity_does_not_fail_the_mutation(db_session, factories, monkeypatch, caplog):
    playlist = factories.make_playlist()
    track = factories.TrackFactory()

    def _broken(**kwargs):
        raise RuntimeError("activity store offline")

    monkeypatch.setattr(activity_module, "Activity", _broken)

    with caplog.at_level(logging.WARNING, logger="tunetip.services.activity_service"):
        result = playlist_service.add_track(db_session, playlist.id, playlist.user_id, track.id)

    assert result.track_count == 1
    db_session.expire_all()
    assert db_session.get(Playlist, playlist.id).track_count == 1
    assert db_session.query(Activity).count() == 0
    assert "activity store offline" in caplog.text
