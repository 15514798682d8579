"""Route-level tests for the FastAPI layer."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from imperium.api.app import create_app
from imperium.api.runtime import ApiState
from imperium.config import Settings


def _make_app(**overrides):
    def factory() -> ApiState:
        settings = Settings(bot_count=2, default_seed=7, total_rounds=2, **overrides)
        return ApiState(settings=settings)

    app = create_app(state_factory=factory)
    transport = ASGITransport(app=app)
    return app, transport


async def _create_game(client: AsyncClient) -> int:
    response = await client.post("/games", json={"name": "Aurelia", "race": "human"})
    assert response.status_code == 201
    payload = response.json()
    assert payload["round"] == 1
    assert payload["phase"] == "player"
    return payload["id"]


@pytest.mark.asyncio
async def test_health_and_rules():
    app, transport = _make_app()

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        health = await client.get("/health")
        assert health.status_code == 200
        assert health.json()["status"] == "ok"
        assert health.json()["games"] == 0

        rules = await client.get("/rules")
        assert rules.status_code == 200
        assert rules.json()["rounds"]["total_rounds"] == 2
        assert rules.json()["combat"]["win_threshold"] == 1.05


@pytest.mark.asyncio
async def test_game_lifecycle_via_api():
    app, transport = _make_app()

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        game_id = await _create_game(client)

        game = await client.get(f"/games/{game_id}")
        assert game.status_code == 200
        assert [bot["id"] for bot in game.json()["bots"]] == [2, 3]

        explored = await client.post(
            f"/games/{game_id}/actions", json={"action": "explore", "turns": 2}
        )
        assert explored.status_code == 200
        body = explored.json()
        assert body["success"] is True
        assert body["turns_spent"] == 2
        assert body["empire"]["turns_remaining"] == 48

        built = await client.post(
            f"/games/{game_id}/actions",
            json={"action": "build", "build": {"farm": 5}},
        )
        assert built.status_code == 200
        assert built.json()["buildings_constructed"] == {"farm": 5}

        shop = await client.post(f"/games/{game_id}/rounds/advance", json={})
        assert shop.status_code == 200
        assert shop.json()["phase"] == "shop"
        assert shop.json()["draft_options"]

        picked = await client.post(f"/games/{game_id}/draft/select", json={"index": 0})
        assert picked.status_code == 200
        assert picked.json()["success"] is True


@pytest.mark.asyncio
async def test_errors_map_to_status_codes():
    app, transport = _make_app()

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        missing = await client.get("/games/999")
        assert missing.status_code == 404
        assert missing.json()["detail"] == "game not found"

        game_id = await _create_game(client)

        bad_tax = await client.post(
            f"/games/{game_id}/actions", json={"action": "set_tax", "tax_rate": 150}
        )
        assert bad_tax.status_code == 400
        assert bad_tax.json()["detail"]["kind"] == "validation"

        early = await client.post(f"/games/{game_id}/attacks", json={"target_id": 2})
        assert early.status_code == 409
        assert early.json()["detail"] == {
            "kind": "rule_gate",
            "reason": "Attacks are not allowed in the first round",
        }

        broke = await client.post(
            f"/games/{game_id}/bank", json={"operation": "withdraw", "amount": 10}
        )
        assert broke.status_code == 400
        assert broke.json()["detail"]["reason"] == "Insufficient savings"

        stranger = await client.post(
            f"/games/{game_id}/spells", json={"spell": "spy", "target_id": 42}
        )
        assert stranger.status_code == 400

        no_draft = await client.post(f"/games/{game_id}/draft/select", json={"index": 0})
        assert no_draft.status_code == 409

        unknown_advisor = await client.delete(f"/games/{game_id}/advisors/warmaster")
        assert unknown_advisor.status_code == 400


@pytest.mark.asyncio
async def test_read_endpoints():
    app, transport = _make_app()

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        game_id = await _create_game(client)

        market = await client.get(f"/games/{game_id}/market")
        assert market.status_code == 200
        assert market.json()["prices"]["buy"]["food"] == 30
        assert market.json()["stock"] is None

        bank = await client.get(f"/games/{game_id}/bank")
        assert bank.status_code == 200
        assert bank.json()["savings_rate"] == pytest.approx(0.04)

        spells = await client.get(f"/games/{game_id}/spells")
        assert spells.status_code == 200
        shield = next(item for item in spells.json() if item["spell"] == "shield")
        assert shield["can_cast"] is False
        assert shield["reason"] == "Not enough runes: shield costs 1,495"

        preview = await client.get(
            f"/games/{game_id}/attacks/preview", params={"target_id": 2}
        )
        assert preview.status_code == 200
        assert preview.json()["can_attack"] is False

        abandoned = await client.post(f"/games/{game_id}/abandon")
        assert abandoned.status_code == 200
        assert abandoned.json()["defeat"] == "abandoned"

        refused = await client.post(f"/games/{game_id}/actions", json={"action": "cash"})
        assert refused.status_code == 409
        assert refused.json()["detail"]["kind"] == "defeated"
