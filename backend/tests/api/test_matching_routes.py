"""Matching routes — verifies smart-match ranking, invite/accept and compatibility search."""

from hackshield.models.participant import Participant
from tests.api.helpers import auth_headers


async def _matcher(make_user, register, hackathon, name, skills, **fields):
    user = await make_user(name=name, skills=skills)
    participant = await register(
        hackathon, user, skills=skills, need_smart_matching=True, matching_status="pending",
        **fields,
    )
    return user, participant


async def test_smart_matching_ranks_complementary_first(client, hackathon, make_user, register):
    me, _ = await _matcher(make_user, register, hackathon, "Me", ["Python"])
    await _matcher(make_user, register, hackathon, "Same", ["python "])
    await _matcher(make_user, register, hackathon, "Other", ["React"])
    # not opted in: never a candidate
    await register(hackathon, await make_user(name="Quiet"), skills=["Go"])

    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/smart-matching", headers=auth_headers(me),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total_potential"] == 2
    assert [(m["name"], m["match_score"]) for m in data["matches"]] == [("Other", 70), ("Same", 30)]


async def test_smart_matching_requires_opt_in(client, hackathon, make_user, register):
    user = await make_user()
    await register(hackathon, user)
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/smart-matching", headers=auth_headers(user),
    )
    assert response.json()["error"]["code"] == "MATCHING_DISABLED"


async def test_smart_matching_requires_registration(client, hackathon, make_user):
    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/smart-matching", headers=auth_headers(await make_user()),
    )
    assert response.json()["error"]["code"] == "NOT_REGISTERED"


async def test_invite_notifies_target(client, hackathon, make_user, register):
    me, _ = await _matcher(make_user, register, hackathon, "Me", ["Python"])
    them, theirs = await _matcher(make_user, register, hackathon, "Them", ["React"])
    response = await client.patch(
        f"/api/v1/hackathons/{hackathon.id}/smart-matching",
        json={"action": "invite", "target_participant_id": str(theirs.id)},
        headers=auth_headers(me),
    )
    assert response.json()["matched_with"] == [str(theirs.id)]

    inbox = (await client.get("/api/v1/notifications", headers=auth_headers(them))).json()
    assert inbox["notifications"][0]["title"] == "New teammate match"


async def test_accept_puts_both_in_one_team(client, hackathon, make_user, register, fetch):
    me, mine = await _matcher(make_user, register, hackathon, "Me", ["Python"])
    them, theirs = await _matcher(make_user, register, hackathon, "Them", ["React"])
    response = await client.patch(
        f"/api/v1/hackathons/{hackathon.id}/smart-matching",
        json={"action": "accept", "target_participant_id": str(theirs.id)},
        headers=auth_headers(me),
    )
    assert response.status_code == 200
    team = response.json()["team"]
    assert team["name"] == "Me & Them"
    assert team["leader_id"] == str(me.id)
    assert {m["user_id"] for m in team["members"]} == {str(me.id), str(them.id)}

    for participant, other in ((mine, theirs), (theirs, mine)):
        row = await fetch(Participant, participant.id)
        assert str(row.team_id) == team["id"]
        assert row.matching_status == "matched"
        assert row.matched_with == [str(other.id)]


async def test_accept_joins_existing_team(client, hackathon, make_user, register, make_team):
    me, _ = await _matcher(make_user, register, hackathon, "Me", ["Python"])
    them, theirs = await _matcher(make_user, register, hackathon, "Them", ["React"])
    team = await make_team(hackathon, me, name="Existing")
    response = await client.patch(
        f"/api/v1/hackathons/{hackathon.id}/smart-matching",
        json={"action": "accept", "target_participant_id": str(theirs.id)},
        headers=auth_headers(me),
    )
    data = response.json()["team"]
    assert data["id"] == str(team.id)
    assert len(data["members"]) == 2


async def test_unknown_target_is_404(client, hackathon, make_user, register):
    me, _ = await _matcher(make_user, register, hackathon, "Me", ["Python"])
    response = await client.patch(
        f"/api/v1/hackathons/{hackathon.id}/smart-matching",
        json={"action": "accept", "target_participant_id": "00000000-0000-0000-0000-000000000001"},
        headers=auth_headers(me),
    )
    assert response.status_code == 404


async def test_team_matching_orders_by_compatibility(client, hackathon, make_user, register, make_team):
    me = await make_user(skills=["React"])
    await register(
        hackathon, await make_user(name="Backend"),
        skills=["Python"], experience="beginner", availability="weekends",
    )
    await register(
        hackathon, await make_user(name="Twin"),
        skills=["React"], experience="expert", availability="weekdays",
    )
    teamed = await make_user(name="Teamed")
    team = await make_team(hackathon, teamed)
    await register(hackathon, teamed, skills=["Go"], team_id=team.id)

    response = await client.post(
        f"/api/v1/hackathons/{hackathon.id}/team-matching",
        json={"experience": "beginner", "availability": "weekends", "limit": 5},
        headers=auth_headers(me),
    )
    data = response.json()
    assert data["total"] == 2
    first, second = data["matches"]
    assert (first["name"], second["name"]) == ("Backend", "Twin")
    assert first["compatibility_score"] > second["compatibility_score"]
    assert first["complementary_skills"] == ["Python"]
    assert second["shared_interests"] == ["React"]
