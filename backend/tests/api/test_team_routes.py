"""Team routes — verifies creation, joining, leaving, leader-only edits and credential issue."""

import re

from sqlalchemy import select

from hackshield.config import get_settings
from hackshield.models.participant import Participant
from hackshield.models.team import Team
from hackshield.models.user import User
from hackshield.models.workspace import Branch
from tests.api.helpers import auth_headers


async def test_create_team_awards_xp_and_links_participant(client, hackathon, make_user, register, fetch):
    user = await make_user(skills=["Python"])
    participant = await register(hackathon, user)
    response = await client.post(
        "/api/v1/teams", json={"name": "  Byte Busters ", "hackathon_id": str(hackathon.id)},
        headers=auth_headers(user),
    )
    assert response.status_code == 201
    team = response.json()["team"]
    assert team["name"] == "Byte Busters"
    assert len(team["invite_code"]) == 8
    assert team["members"] == [
        {"user_id": str(user.id), "role": "leader", "skills": ["Python"], "joined_at": team["members"][0]["joined_at"]},
    ]

    assert (await fetch(User, user.id)).xp == 15
    assert str((await fetch(Participant, participant.id)).team_id) == team["id"]


async def test_second_team_in_same_hackathon_conflicts(client, hackathon, make_user, make_team):
    user = await make_user()
    await make_team(hackathon, user)
    response = await client.post(
        "/api/v1/teams", json={"name": "Again", "hackathon_id": str(hackathon.id)},
        headers=auth_headers(user),
    )
    assert response.status_code == 409


async def test_join_by_lowercase_code(client, hackathon, make_user, make_team):
    leader, joiner = await make_user(), await make_user(skills=["SQL"])
    team = await make_team(hackathon, leader, invite_code="ABCD1234")
    response = await client.post(
        "/api/v1/teams/join", json={"invite_code": " abcd1234 "}, headers=auth_headers(joiner),
    )
    assert response.status_code == 200
    members = response.json()["team"]["members"]
    assert [m["role"] for m in members] == ["leader", "member"]

    again = await client.post(
        "/api/v1/teams/join", json={"invite_code": team.invite_code}, headers=auth_headers(joiner),
    )
    assert again.status_code == 409


async def test_join_unknown_code(client, make_user):
    response = await client.post(
        "/api/v1/teams/join", json={"invite_code": "NOPE0000"}, headers=auth_headers(await make_user()),
    )
    assert response.status_code == 404


async def test_join_locked_team(client, hackathon, make_user, make_team):
    team = await make_team(hackathon, await make_user(), is_locked=True)
    response = await client.post(
        "/api/v1/teams/join", json={"invite_code": team.invite_code},
        headers=auth_headers(await make_user()),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TEAM_LOCKED"


async def test_join_full_team(client, hackathon, make_user, make_team, monkeypatch):
    monkeypatch.setattr(get_settings(), "max_team_members", 2)
    team = await make_team(hackathon, await make_user(), members=(await make_user(),))
    response = await client.post(
        "/api/v1/teams/join", json={"invite_code": team.invite_code},
        headers=auth_headers(await make_user()),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TEAM_FULL"


async def test_leader_cannot_leave(client, hackathon, make_user, make_team):
    leader = await make_user()
    team = await make_team(hackathon, leader)
    response = await client.post(f"/api/v1/teams/{team.id}/leave", headers=auth_headers(leader))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LEADER_CANNOT_LEAVE"


async def test_member_leaves(client, hackathon, make_user, make_team):
    leader, member = await make_user(), await make_user()
    team = await make_team(hackathon, leader, members=(member,))
    response = await client.post(f"/api/v1/teams/{team.id}/leave", headers=auth_headers(member))
    assert response.status_code == 200

    outsider = await client.post(f"/api/v1/teams/{team.id}/leave", headers=auth_headers(member))
    assert outsider.json()["error"]["code"] == "NOT_A_MEMBER"


async def test_only_leader_renames_and_deletes(client, hackathon, make_user, make_team, fetch):
    leader, member = await make_user(), await make_user()
    team = await make_team(hackathon, leader, members=(member,))

    forbidden = await client.put(
        f"/api/v1/teams/{team.id}", json={"name": "Hijacked"}, headers=auth_headers(member),
    )
    assert forbidden.status_code == 403

    renamed = await client.put(
        f"/api/v1/teams/{team.id}", json={"name": "Null Pointers"}, headers=auth_headers(leader),
    )
    assert renamed.json()["team"]["name"] == "Null Pointers"

    assert (await client.delete(f"/api/v1/teams/{team.id}", headers=auth_headers(member))).status_code == 403
    assert (await client.delete(f"/api/v1/teams/{team.id}", headers=auth_headers(leader))).status_code == 200
    assert await fetch(Team, team.id) is None


async def test_invite_notifies_existing_user(client, hackathon, make_user, make_team):
    leader = await make_user(name="Lead")
    invitee = await make_user(email="friend@example.com")
    team = await make_team(hackathon, leader)
    response = await client.post(
        f"/api/v1/teams/{team.id}/invite", json={"email": "Friend@Example.com"},
        headers=auth_headers(leader),
    )
    assert response.json()["invite_code"] == team.invite_code

    inbox = (await client.get("/api/v1/notifications", headers=auth_headers(invitee))).json()
    assert inbox["notifications"][0]["data"]["invite_code"] == team.invite_code
    assert inbox["notifications"][0]["category"] == "team_invitations"


async def test_update_project_keeps_existing_fields(client, hackathon, make_user, make_team):
    leader = await make_user()
    team = await make_team(hackathon, leader, project={"title": "Old", "repo_url": "https://git.example/x"})
    response = await client.put(
        f"/api/v1/teams/{team.id}/project", json={"title": "New", "technologies": ["FastAPI"]},
        headers=auth_headers(leader),
    )
    assert response.json()["team"]["project"] == {
        "title": "New", "repo_url": "https://git.example/x", "technologies": ["FastAPI"],
    }


async def test_invite_code_visible_only_to_members(client, hackathon, make_user, make_team):
    leader, member, outsider = await make_user(), await make_user(), await make_user()
    team = await make_team(hackathon, leader, members=(member,), invite_code="SECRET12")

    for viewer, expected in ((leader, "SECRET12"), (member, "SECRET12"), (outsider, None)):
        listed = (await client.get(
            "/api/v1/teams", params={"hackathon": str(hackathon.id)}, headers=auth_headers(viewer),
        )).json()["teams"]
        assert [t["invite_code"] for t in listed] == [expected]

        single = (await client.get(f"/api/v1/teams/{team.id}", headers=auth_headers(viewer))).json()
        assert single["team"]["invite_code"] == expected


async def test_mine_and_hackathon_team(client, hackathon, make_user, make_team):
    leader = await make_user()
    team = await make_team(hackathon, leader)
    mine = (await client.get("/api/v1/teams/mine", headers=auth_headers(leader))).json()
    assert [t["id"] for t in mine["teams"]] == [str(team.id)]

    scoped = (await client.get(
        f"/api/v1/hackathons/{hackathon.id}/team", headers=auth_headers(leader),
    )).json()
    assert scoped["team"]["id"] == str(team.id)

    nobody = (await client.get(
        f"/api/v1/hackathons/{hackathon.id}/team", headers=auth_headers(await make_user()),
    )).json()
    assert nobody["team"] is None


async def test_organizer_team_overview(client, org, hackathon, make_user, make_team):
    leader = await make_user(name="Lead", email="lead@example.com")
    await make_team(hackathon, leader, members=(await make_user(),))
    response = await client.get(f"/api/v1/hackathons/{hackathon.id}/teams", headers=auth_headers(org))
    data = response.json()
    assert data["total"] == 1
    assert data["teams"][0]["leader"] == {"name": "Lead", "email": "lead@example.com"}
    assert data["teams"][0]["member_count"] == 2


async def test_select_team_issues_credentials_once(
    client, org, hackathon, make_user, make_team, mailer, test_session_factory,
):
    leader = await make_user(email="lead@example.com")
    member = await make_user(email="member@example.com")
    team = await make_team(hackathon, leader, members=(member,), name="Byte Busters!")

    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/select-team", json={"team_id": str(team.id)},
        headers=auth_headers(org),
    )
    assert response.status_code == 200
    data = response.json()
    suffix = str(hackathon.id).replace("-", "")[-6:]
    assert data["credentials"] == {"username": f"team_bytebusters_{suffix}", "main_branch": "main"}
    assert sorted(data["recipients"]) == ["lead@example.com", "member@example.com"]
    assert data["team"]["status"] == "active"
    assert len(mailer.sent) == 1
    assert "IDE passkey:" in mailer.sent[0]["body"]

    async with test_session_factory() as db:
        branches = (await db.execute(select(Branch).where(Branch.access_id == data["credentials"]["username"]))).scalars().all()
    assert [b.branch_name for b in branches] == ["main"]

    again = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/select-team", json={"team_id": str(team.id)},
        headers=auth_headers(org),
    )
    assert again.json()["error"]["code"] == "CREDENTIALS_EXIST"


async def test_leader_requests_credentials(client, hackathon, make_user, make_team, mailer):
    leader, member = await make_user(), await make_user()
    await make_team(hackathon, leader, members=(member,), name="Alpha")

    assert (await client.post(
        f"/api/v1/hackathons/{hackathon.id}/ide-credentials", headers=auth_headers(member),
    )).status_code == 403

    first = (await client.post(
        f"/api/v1/hackathons/{hackathon.id}/ide-credentials", headers=auth_headers(leader),
    )).json()
    assert first["already_sent"] is False
    assert first["username"] == f"alpha_{str(hackathon.id).replace('-', '')[:6]}"
    assert len(first["passkey"]) == 16
    assert mailer.sent[0]["to"] == [leader.email]

    second = (await client.post(
        f"/api/v1/hackathons/{hackathon.id}/ide-credentials", headers=auth_headers(leader),
    )).json()
    assert second["already_sent"] is True
    assert "passkey" not in second


async def test_select_team_disambiguates_clashing_usernames(client, org, hackathon, make_user, make_team):
    first = await make_team(hackathon, await make_user(), name="Byte Busters")
    second = await make_team(hackathon, await make_user(), name="byte-busters")
    base = f"team_bytebusters_{str(hackathon.id).replace('-', '')[-6:]}"

    usernames = []
    for team in (first, second):
        response = await client.post(
            f"/api/v1/hackathons/{hackathon.id}/select-team", json={"team_id": str(team.id)},
            headers=auth_headers(org),
        )
        assert response.status_code == 200
        usernames.append(response.json()["credentials"]["username"])

    assert usernames[0] == base
    assert re.fullmatch(rf"{base}_[0-9a-f]{{4}}", usernames[1])


async def test_leader_credentials_disambiguate_clashing_usernames(client, hackathon, make_user, make_team):
    leaders = [await make_user(), await make_user()]
    await make_team(hackathon, leaders[0], name="Alpha")
    await make_team(hackathon, leaders[1], name="ALPHA")

    usernames = [
        (await client.post(
            f"/api/v1/hackathons/{hackathon.id}/ide-credentials", headers=auth_headers(leader),
        )).json()["username"]
        for leader in leaders
    ]
    assert usernames[0] != usernames[1]
    assert usernames[1].startswith(usernames[0] + "_")
