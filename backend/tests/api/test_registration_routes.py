"""Registration routes — verifies registering, status, unregistering, pitch decks and open invites."""

from hackshield.api.routes import registration as registration_routes
from hackshield.models.participant import Participant
from hackshield.models.user import User
from tests.api.helpers import auth_headers


async def test_register_with_form(client, hackathon, make_user, fetch):
    user = await make_user(skills=["Go"])
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/register",
        json={"need_smart_matching": True, "has_team": False, "availability": "weekends"},
        headers=auth_headers(user),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["total_participants"] == 1
    participant = data["participant"]
    assert participant["skills"] == ["Go"]
    assert participant["matching_status"] == "pending"
    assert participant["has_team"] is False

    refreshed = await fetch(User, user.id)
    assert refreshed.hackathons_participated == 1


async def test_register_without_body_uses_defaults(client, hackathon, make_user):
    user = await make_user()
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/register", headers=auth_headers(user),
    )
    assert response.status_code == 201
    assert response.json()["participant"]["matching_status"] == "not-needed"


async def test_register_twice_conflicts(client, hackathon, make_user, register):
    user = await make_user()
    await register(hackathon, user)
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/register", headers=auth_headers(user),
    )
    assert response.status_code == 409


async def test_concurrent_duplicate_registration_conflicts(client, hackathon, make_user, register, fetch, monkeypatch):
    """A second insert that slips past the lookup hits the unique constraint."""
    user = await make_user()
    await register(hackathon, user)

    async def not_found(*args):
        return None

    monkeypatch.setattr(registration_routes, "find_participant", not_found)
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/register", headers=auth_headers(user),
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"
    assert (await fetch(User, user.id)).hackathons_participated == 0


async def test_register_closed_hackathon(client, org, make_hackathon, make_user):
    draft = await make_hackathon(org, status="draft")
    user = await make_user()
    response = await client.post(
        f"/api/v1/hackathons/{draft.id}/register", headers=auth_headers(user),
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Registration is not open for this hackathon"


async def test_register_full_hackathon(client, org, make_hackathon, make_user, register):
    small = await make_hackathon(org, max_participants=1)
    await register(small, await make_user())
    response = await client.post(
        f"/api/v1/hackathons/{small.id}/register", headers=auth_headers(await make_user()),
    )
    assert response.status_code == 400


async def test_organization_cannot_register(client, hackathon, org):
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/register", headers=auth_headers(org),
    )
    assert response.status_code == 403


async def test_registration_status(client, hackathon, make_user, register):
    user = await make_user()
    anonymous = (await client.get(f"/api/v1/hackathons/{hackathon.id}/register")).json()
    assert anonymous["is_registered"] is False
    assert anonymous["can_register"] is True

    await register(hackathon, user)
    mine = (await client.get(
        f"/api/v1/hackathons/{hackathon.id}/register", headers=auth_headers(user),
    )).json()
    assert mine["is_registered"] is True
    assert mine["can_register"] is False
    assert mine["total_participants"] == 1
    assert mine["registration_deadline_passed"] is False


async def test_unregister(client, hackathon, make_user, register, fetch):
    user = await make_user()
    participant = await register(hackathon, user)
    response = await client.delete(
        f"/api/v1/hackathons/{hackathon.id}/register", headers=auth_headers(user),
    )
    assert response.status_code == 200
    assert await fetch(Participant, participant.id) is None


async def test_unregister_when_not_registered(client, hackathon, make_user):
    response = await client.delete(
        f"/api/v1/hackathons/{hackathon.id}/register", headers=auth_headers(await make_user()),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "NOT_REGISTERED"


async def test_unregister_refused_once_active(client, live_hackathon, make_user, register):
    user = await make_user()
    await register(live_hackathon, user)
    response = await client.delete(
        f"/api/v1/hackathons/{live_hackathon.id}/register", headers=auth_headers(user),
    )
    assert response.status_code == 400


async def test_upload_ppt(client, hackathon, make_user, register):
    user = await make_user()
    participant = await register(hackathon, user)
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/ppt",
        files={"file": ("pitch.pptx", b"PK\x03\x04deck", "application/octet-stream")},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    assert response.json()["ppt_url"].endswith(f"/uploads/ppt/{hackathon.id}/{participant.id}.pptx")


async def test_upload_ppt_rejects_other_formats(client, hackathon, make_user, register):
    user = await make_user()
    await register(hackathon, user)
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/ppt",
        files={"file": ("pitch.pdf", b"%PDF", "application/pdf")},
        headers=auth_headers(user),
    )
    assert response.status_code == 400


async def test_selection_update_notifies_participant(client, org, hackathon, make_user, register):
    user = await make_user()
    participant = await register(hackathon, user)
    response = await client.patch(
        f"/api/v1/hackathons/{hackathon.id}/participants/{participant.id}/selection",
        json={"status": "approved", "feedback": "Great deck"},
        headers=auth_headers(org),
    )
    assert response.status_code == 200
    assert response.json()["participant"]["selection_round1_status"] == "approved"

    inbox = (await client.get("/api/v1/notifications", headers=auth_headers(user))).json()
    assert inbox["unread_count"] == 1
    assert inbox["notifications"][0]["priority"] == "high"


async def test_list_participants(client, hackathon, make_user, register):
    viewer = await make_user()
    await register(hackathon, await make_user(name="Lin"))
    response = await client.get(
        f"/api/v1/hackathons/{hackathon.id}/participants", headers=auth_headers(viewer),
    )
    assert [p["name"] for p in response.json()["participants"]] == ["Lin"]


async def test_open_invites_visible_to_others(client, hackathon, make_user):
    seeker = await make_user(name="Seeker")
    other = await make_user(name="Other")
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/open-invites",
        json={"skills": ["Rust"], "experience": "advanced"},
        headers=auth_headers(seeker),
    )
    assert response.status_code == 200
    assert response.json()["user"]["looking_for_team"] is True

    own_view = (await client.get(
        f"/api/v1/hackathons/{hackathon.id}/open-invites", headers=auth_headers(seeker),
    )).json()
    assert own_view["invites"] == []

    others_view = (await client.get(
        f"/api/v1/hackathons/{hackathon.id}/open-invites", headers=auth_headers(other),
    )).json()
    assert [u["skills"] for u in others_view["invites"]] == [["Rust"]]

    looking = (await client.get(
        f"/api/v1/hackathons/{hackathon.id}/participants",
        params={"looking_for_team": "true"}, headers=auth_headers(other),
    )).json()
    assert [u["name"] for u in looking["participants"]] == ["Seeker"]

    await client.delete(f"/api/v1/hackathons/{hackathon.id}/open-invites", headers=auth_headers(seeker))
    after = (await client.get(
        f"/api/v1/hackathons/{hackathon.id}/open-invites", headers=auth_headers(other),
    )).json()
    assert after["invites"] == []
