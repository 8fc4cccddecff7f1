"""Tests for the agent team catalog and its admin endpoints."""
from app.models.agent import Agent
from app.models.subscription import SubscriptionStatus
from app.services.subscription_ledger import team_subscriptions


TEAM_PAYLOAD = {
    "name": "Support Squad",
    "description": "Customer support pipeline",
    "category": "Support",
    "price": 9900,
    "target": "SaaS teams",
    "impact": "Halves first response time",
    "workflow": [
        {"step": 2, "description": "Draft reply", "agent": "Responder"},
        {"step": 1, "description": "Classify ticket", "agent": "Triage"},
    ],
}


async def test_list_and_get_team(client, test_team):
    listing = await client.get("/api/agent-teams")
    assert [t["uuid"] for t in listing.json()] == [test_team.uuid]

    response = await client.get(f"/api/agent-teams/{test_team.uuid}")
    assert response.status_code == 200
    workflow = response.json()["workflow"]
    assert [s["step"] for s in workflow] == [1, 2]
    assert workflow[0]["agent"] == "Intake"

    missing = await client.get("/api/agent-teams/missing")
    assert missing.status_code == 404


async def test_featured_teams(client, test_team):
    response = await client.get("/api/agent-teams/featured")

    assert [t["uuid"] for t in response.json()] == [test_team.uuid]


async def test_team_agents(client, test_db, test_team, test_agent):
    test_agent.team_id = test_team.uuid
    test_agent.team_role = "Intake"
    await test_db.commit()

    response = await client.get(f"/api/agent-teams/{test_team.uuid}/agents")

    assert response.status_code == 200
    assert [a["team_role"] for a in response.json()] == ["Intake"]


async def test_admin_create_team_sorts_workflow(client, admin_user, admin_headers):
    response = await client.post("/api/admin/agent-teams", json=TEAM_PAYLOAD, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["price"] == 9900
    assert [s["agent"] for s in data["workflow"]] == ["Triage", "Responder"]


async def test_create_team_requires_admin(client, test_user, user_headers):
    response = await client.post("/api/admin/agent-teams", json=TEAM_PAYLOAD, headers=user_headers)

    assert response.status_code == 403


async def test_admin_update_team(client, admin_user, test_team, admin_headers):
    response = await client.put(
        f"/api/admin/agent-teams/{test_team.uuid}",
        json={"is_popular": True, "workflow": [{"step": 1, "description": "All in one", "agent": "Solo"}]},
        headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_popular"] is True
    assert data["name"] == test_team.name
    assert data["workflow"] == [{"step": 1, "description": "All in one", "agent": "Solo"}]


async def test_admin_delete_team_detaches_agents(client, test_db, admin_user, test_team, test_agent, admin_headers):
    test_agent.team_id = test_team.uuid
    test_agent.team_role = "Intake"
    await test_db.commit()

    response = await client.delete(f"/api/admin/agent-teams/{test_team.uuid}", headers=admin_headers)
    assert response.status_code == 204

    agent = (await client.get(f"/api/agents/{test_agent.uuid}")).json()
    assert agent["team_id"] is None
    assert agent["team_role"] is None


async def test_delete_team_with_subscriptions_refused(client, test_db, admin_user, test_user, test_team, admin_headers):
    await team_subscriptions.create(test_db, test_user.uuid, test_team.uuid, SubscriptionStatus.ACTIVE)
    await test_db.commit()

    response = await client.delete(f"/api/admin/agent-teams/{test_team.uuid}", headers=admin_headers)

    assert response.status_code == 400
    assert (await client.get(f"/api/agent-teams/{test_team.uuid}")).status_code == 200


async def test_agent_can_join_team(client, admin_user, test_team, admin_headers):
    response = await client.post(
        "/api/admin/agents",
        json={
            "name": "Clause Reviewer",
            "description": "Flags risky clauses",
            "price": 4900,
            "category": "Legal",
            "team_id": test_team.uuid,
            "team_role": "Reviewer",
        },
        headers=admin_headers
    )

    assert response.status_code == 201
    members = await client.get(f"/api/agent-teams/{test_team.uuid}/agents")
    assert [a["name"] for a in members.json()] == ["Clause Reviewer"]


async def test_unrelated_agents_not_listed_as_members(client, test_db, test_team):
    test_db.add(Agent(name="Loner", description="Not in a team", price=100, category="Misc"))
    await test_db.commit()

    response = await client.get(f"/api/agent-teams/{test_team.uuid}/agents")

    assert response.json() == []
