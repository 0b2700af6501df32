import pytest

from tunetip.config import settings
from tunetip.db.models import CollaboratorRole, CollaboratorStatus, PlaylistCollaborator


@pytest.mark.api
def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


@pytest.mark.api
def test_create_requires_authentication(client):
    response = client.post("/api/v1/playlists", json={"name": "Nope"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated"}
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.api
def test_create_and_fetch_playlist(client, factories, auth_headers):
    owner = factories.UserFactory()
    headers = auth_headers(owner)

    created = client.post("/api/v1/playlists", json={"name": "Mixtape", "is_public": True}, headers=headers)
    assert created.status_code == 201
    body = created.json()
    assert body["kind"] == "playlist"
    assert body["user_id"] == owner.id
    assert body["tracks"] == []

    fetched = client.get(f"/api/v1/playlists/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Mixtape"


@pytest.mark.api
def test_domain_errors_map_to_status_codes(client, factories, auth_headers):
    playlist = factories.make_playlist(is_public=False)
    stranger = factories.UserFactory()

    missing = client.get("/api/v1/playlists/4040")
    hidden = client.get(f"/api/v1/playlists/{playlist.id}", headers=auth_headers(stranger))

    assert missing.status_code == 404
    assert missing.json() == {"detail": "Playlist with ID 4040 not found"}
    assert hidden.status_code == 403


@pytest.mark.api
def test_track_mutations_return_playlist(client, factories, auth_headers):
    playlist = factories.make_playlist()
    headers = auth_headers(playlist.user)
    first, second, third = (factories.TrackFactory(duration=60) for _ in range(3))

    for track in (first, second):
        assert client.post(f"/api/v1/playlists/{playlist.id}/tracks", json={"track_id": track.id}, headers=headers).status_code == 200
    inserted = client.post(
        f"/api/v1/playlists/{playlist.id}/tracks", json={"track_id": third.id, "position": 0}, headers=headers
    ).json()

    assert inserted["kind"] == "playlist"
    assert [t["track_id"] for t in inserted["tracks"]] == [third.id, first.id, second.id]
    assert inserted["track_count"] == 3
    assert inserted["total_duration"] == 180

    reordered = client.patch(
        f"/api/v1/playlists/{playlist.id}/tracks/reorder",
        json={"tracks": [{"track_id": second.id, "position": 0}, {"track_id": third.id, "position": 2}]},
        headers=headers,
    ).json()
    assert [t["track_id"] for t in reordered["tracks"]] == [second.id, first.id, third.id]

    removed = client.delete(f"/api/v1/playlists/{playlist.id}/tracks/{first.id}", headers=headers).json()
    assert [(t["track_id"], t["position"]) for t in removed["tracks"]] == [(second.id, 0), (third.id, 1)]

    duplicate = client.post(f"/api/v1/playlists/{playlist.id}/tracks", json={"track_id": second.id}, headers=headers)
    assert duplicate.status_code == 400


@pytest.mark.api
def test_approval_flow_over_http(client, factories, auth_headers, db_session):
    playlist = factories.make_playlist(approval_required=True)
    owner_headers = auth_headers(playlist.user)
    editor = factories.UserFactory(username="editor", email="editor@example.com")
    track = factories.TrackFactory()

    invite = client.post(
        f"/api/v1/playlists/{playlist.id}/collaborators",
        json={"identifier": "editor@example.com", "role": "editor"},
        headers=owner_headers,
    )
    assert invite.status_code == 201
    assert invite.json()["status"] == "pending"

    accepted = client.post(
        f"/api/v1/playlists/{playlist.id}/collaborators/{invite.json()['id']}/accept",
        headers=auth_headers(editor),
    )
    assert accepted.json()["status"] == "accepted"

    proposed = client.post(
        f"/api/v1/playlists/{playlist.id}/tracks", json={"track_id": track.id}, headers=auth_headers(editor)
    ).json()
    assert proposed["kind"] == "change_request"
    assert proposed["status"] == "pending"
    assert proposed["action"] == "add_track"

    pending = client.get(
        f"/api/v1/playlists/{playlist.id}/change-requests", params={"status": "pending"}, headers=owner_headers
    ).json()
    assert [r["id"] for r in pending] == [proposed["id"]]

    approved = client.post(
        f"/api/v1/playlists/{playlist.id}/change-requests/{proposed['id']}/approve", headers=owner_headers
    )
    assert approved.status_code == 200
    assert [t["track_id"] for t in approved.json()["tracks"]] == [track.id]

    again = client.post(
        f"/api/v1/playlists/{playlist.id}/change-requests/{proposed['id']}/reject", headers=owner_headers
    )
    assert again.status_code == 404


@pytest.mark.api
def test_collaborator_management_over_http(client, factories, auth_headers, db_session):
    playlist = factories.make_playlist()
    owner_headers = auth_headers(playlist.user)
    guest = factories.UserFactory(username="guest")

    invite = client.post(
        f"/api/v1/playlists/{playlist.id}/collaborators", json={"identifier": "guest"}, headers=owner_headers
    ).json()
    assert invite["role"] == "viewer"

    owner_view = client.get(f"/api/v1/playlists/{playlist.id}/collaborators", headers=owner_headers).json()
    assert {c["user_id"] for c in owner_view} == {playlist.user_id, guest.id}

    promoted = client.patch(
        f"/api/v1/playlists/{playlist.id}/collaborators/{invite['id']}", json={"role": "editor"}, headers=owner_headers
    )
    assert promoted.json()["role"] == "editor"

    owner_as_role = client.patch(
        f"/api/v1/playlists/{playlist.id}/collaborators/{invite['id']}", json={"role": "owner"}, headers=owner_headers
    )
    assert owner_as_role.status_code == 400

    removed = client.delete(f"/api/v1/playlists/{playlist.id}/collaborators/{invite['id']}", headers=owner_headers)
    assert removed.status_code == 200

    db_session.expire_all()
    rows = db_session.query(PlaylistCollaborator).filter(PlaylistCollaborator.playlist_id == playlist.id).all()
    assert [(r.role, r.status) for r in rows] == [(CollaboratorRole.OWNER, CollaboratorStatus.ACCEPTED)]


@pytest.mark.api
def test_listing_endpoints(client, factories, auth_headers):
    owner = factories.UserFactory()
    public = factories.make_playlist(owner=owner, is_public=True)
    private = factories.make_playlist(owner=owner, is_public=False)

    mine = client.get("/api/v1/playlists", headers=auth_headers(owner)).json()
    everyone = client.get("/api/v1/playlists/public").json()
    theirs = client.get(f"/api/v1/playlists/user/{owner.id}").json()

    assert {p["id"] for p in mine["data"]} == {public.id, private.id}
    assert mine["meta"]["total"] == 2
    assert [p["id"] for p in everyone["data"]] == [public.id]
    assert [p["id"] for p in theirs["data"]] == [public.id]


@pytest.mark.api
def test_update_share_duplicate_delete(client, factories, auth_headers):
    playlist = factories.make_playlist(is_public=False)
    headers = auth_headers(playlist.user)

    updated = client.patch(f"/api/v1/playlists/{playlist.id}", json={"description": "Late night"}, headers=headers)
    assert updated.json()["description"] == "Late night"

    shared = client.post(f"/api/v1/playlists/{playlist.id}/share", headers=headers).json()
    assert shared["is_public"] is True

    copy = client.post(f"/api/v1/playlists/{playlist.id}/duplicate", json={"name": "Copy"}, headers=headers)
    assert copy.status_code == 201
    assert copy.json()["name"] == "Copy"

    deleted = client.delete(f"/api/v1/playlists/{playlist.id}", headers=headers)
    assert deleted.json() == {"message": "Playlist deleted successfully"}
    assert client.get(f"/api/v1/playlists/{playlist.id}").status_code == 404


@pytest.mark.api
def test_smart_playlist_endpoints(client, factories, auth_headers, monkeypatch):
    user = factories.UserFactory()
    headers = auth_headers(user)
    tracks = [factories.TrackFactory(genre="techno") for _ in range(3)]
    criteria = {"type": "genre", "genre": "techno", "limit": 2}

    preview = client.post("/api/v1/playlists/smart/preview", json={"criteria": criteria}, headers=headers).json()
    created = client.post(
        "/api/v1/playlists/smart", json={"name": "Warehouse", "criteria": criteria}, headers=headers
    )

    assert preview["criteria"] == {"type": "genre", "limit": 2, "genres": ["techno"]}
    assert [t["id"] for t in preview["tracks"]] == [tracks[2].id, tracks[1].id]
    assert created.status_code == 201
    assert [t["track_id"] for t in created.json()["tracks"]] == [t["id"] for t in preview["tracks"]]
    assert created.json()["smart_playlist"]["auto_update"] is True

    locked = client.post(
        f"/api/v1/playlists/{created.json()['id']}/tracks", json={"track_id": tracks[0].id}, headers=headers
    )
    assert locked.status_code == 403

    monkeypatch.setattr(settings, "OPERATOR_USERNAMES", [user.username])
    refreshed = client.post("/api/v1/playlists/smart/refresh", headers=headers)
    assert refreshed.json() == {"refreshed": 0}


@pytest.mark.api
def test_refresh_all_requires_operator(client, factories, auth_headers, monkeypatch):
    operator = factories.UserFactory(username="ops")
    member = factories.UserFactory()
    monkeypatch.setattr(settings, "OPERATOR_USERNAMES", ["ops"])

    anonymous = client.post("/api/v1/playlists/smart/refresh")
    denied = client.post("/api/v1/playlists/smart/refresh", headers=auth_headers(member))
    allowed = client.post("/api/v1/playlists/smart/refresh", headers=auth_headers(operator))

    assert anonymous.status_code == 401
    assert denied.status_code == 403
    assert denied.json() == {"detail": "Operator access required"}
    assert allowed.json() == {"refreshed": 0}


@pytest.mark.api
def test_bad_criteria_is_400(client, factories, auth_headers):
    user = factories.UserFactory()

    response = client.post(
        "/api/v1/playlists/smart/preview", json={"criteria": {"type": "mood"}}, headers=auth_headers(user)
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Unsupported criteria type: mood"}
