"""Tests for subscription endpoints."""
import asyncio

from sqlalchemy import select

from app.models.subscription import Subscription, TeamSubscription


async def _start(client, headers, agent_id):
    return await client.post(f"/api/agents/{agent_id}/create-payment-intent", headers=headers)


async def test_create_payment_intent(client, test_user, test_agent, user_headers):
    response = await _start(client, user_headers, test_agent.uuid)

    assert response.status_code == 201
    data = response.json()
    assert data["client_secret"] == "sec_1"
    assert data["amount"] == 2999
    assert data["currency"] == "usd"
    assert data["subscription_id"]


async def test_create_payment_intent_requires_auth(client, test_agent):
    response = await client.post(f"/api/agents/{test_agent.uuid}/create-payment-intent")

    assert response.status_code == 401


async def test_create_payment_intent_unknown_agent(client, test_user, user_headers):
    response = await _start(client, user_headers, "missing-agent")

    assert response.status_code == 404
    assert response.json() == {"message": "Agent not found"}


async def test_gateway_error_is_generic_500(client, gateway, session_factory, test_user, test_agent, user_headers):
    gateway.fail_on.add("create_payment_intent")

    response = await _start(client, user_headers, test_agent.uuid)

    assert response.status_code == 500
    assert response.json() == {"message": "Payment processor request failed"}
    async with session_factory() as session:
        assert (await session.execute(select(Subscription))).scalars().all() == []


async def test_checkout_flow(client, gateway, test_user, test_agent, user_headers):
    start = await _start(client, user_headers, test_agent.uuid)
    subscription_id = start.json()["subscription_id"]

    # Payment not confirmed yet
    response = await client.post(
        f"/api/subscriptions/{subscription_id}/complete",
        json={"payment_intent_id": "pi_1"},
        headers=user_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Payment not completed. Status: requires_payment_method"

    gateway.set_status("pi_1", "succeeded")
    response = await client.post(
        f"/api/subscriptions/{subscription_id}/complete",
        json={"payment_intent_id": "pi_1"},
        headers=user_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["uuid"] == subscription_id
    assert data["status"] == "active"
    assert data["agent_id"] == test_agent.uuid
    assert data["stripe_payment_intent_id"] == "pi_1"

    me = await client.get("/api/auth/me", headers=user_headers)
    assert me.json()["stripe_customer_id"] == "cus_1"

    agents = await client.get("/api/user/agents", headers=user_headers)
    assert [a["uuid"] for a in agents.json()] == [test_agent.uuid]

    again = await _start(client, user_headers, test_agent.uuid)
    assert again.status_code == 400
    assert again.json() == {"message": "Already subscribed to this agent"}


async def test_complete_missing_payment_intent_id(client, test_user, test_agent, user_headers):
    start = await _start(client, user_headers, test_agent.uuid)

    response = await client.post(
        f"/api/subscriptions/{start.json()['subscription_id']}/complete",
        json={},
        headers=user_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data"


async def test_complete_unknown_subscription(client, test_user, user_headers):
    response = await client.post(
        "/api/subscriptions/missing/complete",
        json={"payment_intent_id": "pi_1"},
        headers=user_headers
    )

    assert response.status_code == 404
    assert response.json() == {"message": "Subscription not found"}


async def test_cancel_flow(client, gateway, test_user, test_agent, user_headers):
    start = await _start(client, user_headers, test_agent.uuid)
    subscription_id = start.json()["subscription_id"]
    gateway.set_status("pi_1", "succeeded")
    await client.post(
        f"/api/subscriptions/{subscription_id}/complete",
        json={"payment_intent_id": "pi_1"},
        headers=user_headers
    )

    response = await client.post(f"/api/subscriptions/{subscription_id}/cancel", headers=user_headers)
    assert response.status_code == 200
    canceled = response.json()
    assert canceled["status"] == "canceled"
    assert canceled["end_date"] is not None

    second = await client.post(f"/api/subscriptions/{subscription_id}/cancel", headers=user_headers)
    assert second.status_code == 400

    listing = await client.get("/api/user/subscriptions", headers=user_headers)
    assert listing.json()[0]["end_date"] == canceled["end_date"]

    agents = await client.get("/api/user/agents", headers=user_headers)
    assert agents.json() == []


async def test_cancel_by_other_user_forbidden(client, test_user, other_user, test_agent, user_headers, other_headers):
    start = await _start(client, user_headers, test_agent.uuid)

    response = await client.post(
        f"/api/subscriptions/{start.json()['subscription_id']}/cancel", headers=other_headers
    )

    assert response.status_code == 403


async def test_cancel_unknown_subscription(client, test_user, user_headers):
    response = await client.post("/api/subscriptions/missing/cancel", headers=user_headers)

    assert response.status_code == 404


async def test_concurrent_start_yields_single_pending_row(
    client, gateway, session_factory, test_user, test_agent, user_headers
):
    """Two tabs starting checkout at once share one pending subscription."""
    first, second = await asyncio.gather(
        _start(client, user_headers, test_agent.uuid),
        _start(client, user_headers, test_agent.uuid),
    )

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["subscription_id"] == second.json()["subscription_id"]
    assert first.json()["client_secret"] == second.json()["client_secret"]
    assert gateway.count("create_payment_intent") == 1

    async with session_factory() as session:
        rows = (await session.execute(select(Subscription))).scalars().all()
    assert [r.status for r in rows] == ["pending"]


async def test_user_subscriptions_only_own(client, test_user, other_user, test_agent, user_headers, other_headers):
    await _start(client, user_headers, test_agent.uuid)

    mine = await client.get("/api/user/subscriptions", headers=user_headers)
    theirs = await client.get("/api/user/subscriptions", headers=other_headers)

    assert len(mine.json()) == 1
    assert mine.json()[0]["status"] == "pending"
    assert theirs.json() == []


async def test_user_subscriptions_requires_auth(client):
    response = await client.get("/api/user/subscriptions")

    assert response.status_code == 401


async def test_team_checkout_flow(client, gateway, session_factory, test_user, test_team, user_headers):
    start = await client.post(f"/api/agent-teams/{test_team.uuid}/create-payment-intent", headers=user_headers)
    assert start.status_code == 201
    assert start.json()["amount"] == 19900
    subscription_id = start.json()["subscription_id"]

    gateway.set_status("pi_1", "succeeded")
    response = await client.post(
        f"/api/team-subscriptions/{subscription_id}/complete",
        json={"payment_intent_id": "pi_1"},
        headers=user_headers
    )
    assert response.status_code == 200
    assert response.json()["team_id"] == test_team.uuid

    teams = await client.get("/api/user/agent-teams", headers=user_headers)
    assert [t["uuid"] for t in teams.json()] == [test_team.uuid]
    assert [s["step"] for s in teams.json()[0]["workflow"]] == [1, 2]

    subs = await client.get("/api/user/team-subscriptions", headers=user_headers)
    assert [s["status"] for s in subs.json()] == ["active"]

    cancel = await client.post(f"/api/team-subscriptions/{subscription_id}/cancel", headers=user_headers)
    assert cancel.json()["status"] == "canceled"

    async with session_factory() as session:
        stored = (await session.execute(select(TeamSubscription))).scalar_one()
    assert stored.status == "canceled"


async def test_team_subscription_not_visible_on_agent_routes(client, test_user, test_team, user_headers):
    start = await client.post(f"/api/agent-teams/{test_team.uuid}/create-payment-intent", headers=user_headers)

    response = await client.post(
        f"/api/subscriptions/{start.json()['subscription_id']}/cancel", headers=user_headers
    )

    assert response.status_code == 404


async def test_unknown_team(client, test_user, user_headers):
    response = await client.post("/api/agent-teams/missing/create-payment-intent", headers=user_headers)

    assert response.status_code == 404
    assert response.json() == {"message": "Agent team not found"}
