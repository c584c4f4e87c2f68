"""IDE access routes — verifies credential generation, IDE login rules, credential mail and schedules."""

import re
from datetime import timedelta

from hackshield.core.time_utils import utc_now
from hackshield.models.participant import Participant
from tests.api.helpers import auth_headers

ACCESS_ID = "AB12CD34"
ACCESS_PASSWORD = "0123456789abcdef"


async def test_participant_generates_once(client, hackathon, make_user, register):
    user = await make_user()
    await register(hackathon, user)
    url = f"/api/v1/hackathons/{hackathon.id}/generate-access"

    first = (await client.post(url, headers=auth_headers(user))).json()
    assert first["already_generated"] is False
    assert re.fullmatch(r"[0-9A-F]{8}", first["access_id"])
    assert re.fullmatch(r"[0-9a-f]{16}", first["password"])

    second = (await client.post(url, headers=auth_headers(user))).json()
    assert second["already_generated"] is True
    assert second["access_id"] == first["access_id"]

    status = (await client.get(url, headers=auth_headers(user))).json()
    assert status["has_access"] is True


async def test_generate_requires_registration(client, hackathon, make_user):
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/generate-access", headers=auth_headers(await make_user()),
    )
    assert response.json()["error"]["code"] == "NOT_REGISTERED"


async def test_organization_generates_for_participant(client, org, hackathon, make_user, register):
    user = await make_user()
    await register(hackathon, user)
    url = f"/api/v1/hackathons/{hackathon.id}/generate-access"

    missing = await client.post(url, json={}, headers=auth_headers(org))
    assert missing.status_code == 400

    response = await client.post(url, json={"participant_user_id": str(user.id)}, headers=auth_headers(org))
    assert response.json()["already_generated"] is False

    listing = (await client.get(url, headers=auth_headers(org))).json()
    assert listing["total"] == 1
    assert listing["participants"][0]["email"] == user.email


async def test_participant_without_access(client, hackathon, make_user, register):
    user = await make_user()
    await register(hackathon, user)
    response = await client.get(
        f"/api/v1/hackathons/{hackathon.id}/generate-access", headers=auth_headers(user),
    )
    assert response.json() == {"has_access": False}


async def test_verify_access_opens_session(client, live_hackathon, ide_participant, fetch):
    response = await client.post(
        f"/api/v1/hackathons/{live_hackathon.id}/verify-access",
        json={"access_id": ACCESS_ID, "password": ACCESS_PASSWORD},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "participant"
    assert data["access_id"] == ACCESS_ID
    assert data["hackathon"]["id"] == str(live_hackathon.id)

    row = await fetch(Participant, ide_participant.id)
    assert row.ide_session_active is True
    assert row.ide_session_started is not None


async def test_verify_access_wrong_password(client, live_hackathon, ide_participant):
    response = await client.post(
        f"/api/v1/hackathons/{live_hackathon.id}/verify-access",
        json={"access_id": ACCESS_ID, "password": "not-the-password"},
    )
    assert response.status_code == 401


async def test_verify_access_requires_credentials(client, live_hackathon):
    response = await client.post(
        f"/api/v1/hackathons/{live_hackathon.id}/verify-access", json={"access_id": ACCESS_ID},
    )
    assert response.status_code == 400


async def test_disqualified_participant_refused(client, live_hackathon, make_user, register):
    await register(
        live_hackathon, await make_user(),
        ide_access_id=ACCESS_ID, ide_access_password=ACCESS_PASSWORD, ide_disqualified=True,
    )
    response = await client.post(
        f"/api/v1/hackathons/{live_hackathon.id}/ide-auth",
        json={"access_id": ACCESS_ID, "password": ACCESS_PASSWORD},
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "DISQUALIFIED"


async def test_window_not_started(client, hackathon, make_user, register):
    await register(hackathon, await make_user(), ide_access_id=ACCESS_ID, ide_access_password=ACCESS_PASSWORD)
    credentials = {"access_id": ACCESS_ID, "password": ACCESS_PASSWORD}

    verify = await client.post(f"/api/v1/hackathons/{hackathon.id}/verify-access", json=credentials)
    assert verify.status_code == 403
    assert verify.json()["error"]["code"] == "HACKATHON_NOT_STARTED"

    auth = await client.post(f"/api/v1/hackathons/{hackathon.id}/ide-auth", json=credentials)
    assert auth.status_code == 400
    assert auth.json()["error"]["code"] == "HACKATHON_NOT_STARTED"


async def test_window_ended(client, org, make_hackathon, make_user, register):
    now = utc_now()
    finished = await make_hackathon(
        org, status="completed", start_date=now - timedelta(days=2), end_date=now - timedelta(days=1),
    )
    await register(finished, await make_user(), ide_access_id=ACCESS_ID, ide_access_password=ACCESS_PASSWORD)
    response = await client.post(
        f"/api/v1/hackathons/{finished.id}/ide-auth",
        json={"access_id": ACCESS_ID, "password": ACCESS_PASSWORD},
    )
    assert response.json()["error"]["code"] == "HACKATHON_ENDED"


async def test_team_login_with_passkey(client, live_hackathon, make_user, make_team):
    await make_team(
        live_hackathon, await make_user(), name="Alpha",
        ide_username="team_alpha_abc123", ide_passkey="Passkey-Secret-1", main_branch="main",
    )
    response = await client.post(
        f"/api/v1/hackathons/{live_hackathon.id}/ide-auth",
        json={"username": "team_alpha_abc123", "passkey": "Passkey-Secret-1"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "team"
    assert data["team_name"] == "Alpha"
    assert data["main_branch"] == "main"


async def test_send_credentials(client, org, live_hackathon, ide_participant, mailer):
    response = await client.post(
        f"/api/v1/hackathons/{live_hackathon.id}/send-credentials",
        json={
            "participant_id": str(ide_participant.id),
            "team_member_emails": ["mate@example.com", ide_participant.email],
        },
        headers=auth_headers(org),
    )
    assert response.status_code == 200
    assert response.json()["recipients"] == [ide_participant.email, "mate@example.com"]
    assert ACCESS_ID in mailer.sent[0]["body"]


async def test_send_credentials_before_generation(client, org, hackathon, make_user, register):
    participant = await register(hackathon, await make_user())
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/send-credentials",
        json={"participant_id": str(participant.id)},
        headers=auth_headers(org),
    )
    assert response.json()["error"]["code"] == "CREDENTIALS_NOT_GENERATED"


async def test_ide_schedule_lifecycle(client, org, hackathon, make_user, register):
    user = await make_user()
    participant = await register(hackathon, user)
    url = f"/api/v1/hackathons/{hackathon.id}/ide-schedule"

    pending = (await client.get(url, headers=auth_headers(user))).json()
    assert pending["is_approved"] is False
    assert pending["message"] == "IDE access is pending organization approval"

    update = await client.put(
        f"/api/v1/hackathons/{hackathon.id}/participants/{participant.id}/ide-schedule",
        json={"organization_approved": True, "allowed_days": ["monday"], "start_time": "10:00"},
        headers=auth_headers(org),
    )
    assert update.status_code == 200
    assert update.json()["schedule"]["start_time"] == "10:00"

    approved = (await client.get(url, headers=auth_headers(user))).json()
    assert approved["is_approved"] is True


async def test_ide_schedule_rejects_bad_time(client, org, hackathon, make_user, register):
    participant = await register(hackathon, await make_user())
    response = await client.put(
        f"/api/v1/hackathons/{hackathon.id}/participants/{participant.id}/ide-schedule",
        json={"organization_approved": True, "start_time": "25:00"},
        headers=auth_headers(org),
    )
    assert response.status_code == 400


async def test_ide_schedule_for_unregistered_user(client, hackathon, make_user):
    response = await client.get(
        f"/api/v1/hackathons/{hackathon.id}/ide-schedule", headers=auth_headers(await make_user()),
    )
    assert response.json()["message"] == "You are not registered for this hackathon"
