from __future__ import annotations

import json
import logging

import pytest
from fastapi.testclient import TestClient

from promptverse.app import main
from promptverse.app.config import Settings
from promptverse.app.context import AppContext
from promptverse.app.deps import get_context
from promptverse.app.domain.errors import NotAuthenticatedError
from promptverse.app.infra.storage.memory_store import MemoryKeyValueStore
from promptverse.app.routers import admin as admin_router
from promptverse.services.errors import EnhancementError
from promptverse.services.identity import Credentials


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ctx(clock: FakeClock) -> AppContext:
    return AppContext(Settings(AUTH_STRATEGY="local"), store=MemoryKeyValueStore(), clock=clock)


@pytest.fixture
def client(ctx: AppContext):
    main.app.dependency_overrides[get_context] = lambda: ctx
    # no context manager: startup tickers stay off
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def _login(client: TestClient) -> str:
    res = client.post("/admin/login", json={"username": "admin", "password": "admin123"})
    assert res.status_code == 200
    return res.json()["sessionToken"]


def _enter_pin(client: TestClient, token: str, pin: str) -> dict:
    body = {}
    for digit in pin:
        res = client.post("/admin/pin/digits", json={"digit": digit}, headers={"X-Admin-Session": token})
        body = res.json()
    return body


@pytest.fixture
def admin(client: TestClient) -> dict:
    token = _login(client)
    assert _enter_pin(client, token, "0000")["verified"] is True
    return {"X-Admin-Session": token}


class TestPublicRoutes:
    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"ok": True}

    def test_gallery_default(self, client: TestClient) -> None:
        body = client.get("/gallery").json()
        assert body["category"] == "all"
        assert [item["id"] for item in body["items"]] == ["1", "2", "3"]

    def test_gallery_search_and_category(self, client: TestClient) -> None:
        body = client.get("/gallery", params={"category": "painting", "q": "forest"}).json()
        assert [item["id"] for item in body["items"]] == ["2"]
        assert client.get("/gallery", params={"category": "thumbnail"}).json()["count"] == 0

    def test_categories(self, client: TestClient) -> None:
        ids = [c["id"] for c in client.get("/categories").json()["categories"]]
        assert ids[0] == "all"

    def test_wishlist_toggle(self, client: TestClient) -> None:
        res = client.post("/wishlist/1")
        assert res.json()["saved"] is True
        assert res.json()["notices"] == [{"message": "Added to Collection", "level": "success"}]

        res = client.post("/wishlist/1")
        assert res.json()["saved"] is False
        assert res.json()["notices"] == []
        assert client.get("/wishlist").json()["wishlist"] == []

    def test_visits(self, client: TestClient) -> None:
        assert client.post("/visits").json() == {"visits": 1}

    def test_message(self, client: TestClient, ctx: AppContext) -> None:
        res = client.post("/messages", json={"name": "Ana", "message": "Love it"})
        assert res.status_code == 201
        assert ctx.catalog.root.messages[0].name == "Ana"

    def test_message_requires_text(self, client: TestClient) -> None:
        res = client.post("/messages", json={"name": "Ana", "message": " "})
        assert res.status_code == 400

    def test_media_resolve(self, client: TestClient) -> None:
        body = client.get("/media/resolve", params={"ref": "/a/b.png"}).json()
        assert body["url"] == "https://res.cloudinary.com/promptverse/image/upload/a/b.png"


class TestAdminGates:
    def test_bad_credentials(self, client: TestClient) -> None:
        res = client.post("/admin/login", json={"username": "admin", "password": "nope"})
        assert res.status_code == 401
        assert res.json()["detail"] == "Invalid credentials"

    def test_missing_session(self, client: TestClient) -> None:
        assert client.get("/admin/items").status_code == 401
        assert client.get("/admin/pin").status_code == 401

    def test_pin_required(self, client: TestClient) -> None:
        token = _login(client)
        res = client.get("/admin/items", headers={"X-Admin-Session": token})
        assert res.status_code == 403

    def test_login_publishes_welcome(self, client: TestClient) -> None:
        res = client.post("/admin/login", json={"username": "admin", "password": "admin123"})
        assert res.json()["notices"][0]["message"] == "Welcome Admin"
        assert res.json()["pin"]["state"] == "idle"

    def test_wrong_pin_locks(self, client: TestClient, clock: FakeClock) -> None:
        token = _login(client)
        headers = {"X-Admin-Session": token}
        status = _enter_pin(client, token, "1234")
        assert status["state"] == "locked"
        assert status["secondsRemaining"] == 5

        res = client.post("/admin/pin/digits", json={"digit": "0"}, headers=headers)
        assert res.status_code == 423
        assert res.json()["detail"]["secondsRemaining"] == 5

        clock.advance(5)
        assert client.get("/admin/pin", headers=headers).json()["state"] == "idle"
        assert _enter_pin(client, token, "0000")["verified"] is True

    def test_invalid_digit(self, client: TestClient) -> None:
        token = _login(client)
        res = client.post("/admin/pin/digits", json={"digit": "x"}, headers={"X-Admin-Session": token})
        assert res.status_code == 400

    def test_delete_digit(self, client: TestClient) -> None:
        token = _login(client)
        headers = {"X-Admin-Session": token}
        _enter_pin(client, token, "12")
        assert client.delete("/admin/pin/digits", headers=headers).json()["digitsEntered"] == 1

    def test_logout(self, client: TestClient, admin: dict, ctx: AppContext) -> None:
        res = client.post("/admin/logout", headers=admin)
        assert res.json()["notices"][-1] == {"message": "Logged out successfully", "level": "info"}
        assert ctx.session_count == 0
        assert client.get("/admin/items", headers=admin).status_code == 401

    def test_pin_verification_logged_once(self, client: TestClient, clock: FakeClock, caplog) -> None:
        caplog.set_level(logging.INFO, logger="promptverse.app.context")
        token = _login(client)
        _enter_pin(client, token, "1234")
        assert not [r for r in caplog.records if "session.pin_verified" in r.getMessage()]

        caplog.clear()
        clock.advance(5)
        token = _login(client)
        _enter_pin(client, token, "0000")
        assert len([r for r in caplog.records if "session.pin_verified" in r.getMessage()]) == 1


class TestSessionLifetime:
    def test_idle_session_expires(self, client: TestClient, admin: dict, ctx: AppContext, clock: FakeClock) -> None:
        clock.advance(8 * 60 * 60)
        assert client.get("/admin/pin", headers=admin).status_code == 401
        assert ctx.session_count == 0

    def test_activity_extends_session(self, client: TestClient, admin: dict, clock: FakeClock) -> None:
        clock.advance(7 * 60 * 60)
        assert client.get("/admin/items", headers=admin).status_code == 200
        clock.advance(7 * 60 * 60)
        assert client.get("/admin/items", headers=admin).status_code == 200

    def test_capacity_drops_oldest(self, client: TestClient, ctx: AppContext) -> None:
        tokens = [_login(client) for _ in range(21)]
        assert ctx.session_count == 20
        assert client.get("/admin/pin", headers={"X-Admin-Session": tokens[0]}).status_code == 401
        assert client.get("/admin/pin", headers={"X-Admin-Session": tokens[-1]}).status_code == 200

    def test_refresh_evicts_idle_sessions(self, client: TestClient, ctx: AppContext, clock: FakeClock) -> None:
        _login(client)
        clock.advance(60 * 60)
        _login(client)
        clock.advance(7 * 60 * 60)
        ctx.refresh_lockouts()
        assert ctx.session_count == 1

    def test_short_ttl_from_settings(self, clock: FakeClock) -> None:
        settings = Settings(AUTH_STRATEGY="local", SESSION_TTL_SECONDS=30, MAX_ADMIN_SESSIONS=1)
        ctx = AppContext(settings, store=MemoryKeyValueStore(), clock=clock)
        first = ctx.login(Credentials(username="admin", password="admin123"))
        second = ctx.login(Credentials(username="admin", password="admin123"))
        assert ctx.session_count == 1
        with pytest.raises(NotAuthenticatedError):
            ctx.session(first.token)

        clock.advance(30)
        with pytest.raises(NotAuthenticatedError):
            ctx.session(second.token)


class TestAdminCatalog:
    def test_add_item(self, client: TestClient, admin: dict) -> None:
        res = client.post(
            "/admin/items",
            json={
                "title": "Desert",
                "description": "dunes",
                "image": "desert.png",
                "categoryId": "photorealistic",
                "tags": "sand, dusk",
            },
            headers=admin,
        )
        assert res.status_code == 201
        body = res.json()
        assert body["item"]["tags"] == ["sand", "dusk"]
        assert body["categoryName"] == "Photorealistic"
        assert body["notices"][0]["message"] == "Prompt saved to Library!"
        assert client.get("/admin/items", headers=admin).json()["items"][0]["title"] == "Desert"

    def test_add_item_missing_title(self, client: TestClient, admin: dict) -> None:
        res = client.post(
            "/admin/items",
            json={"description": "d", "image": "i.png", "categoryId": "anime"},
            headers=admin,
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Please enter a Title."

    def test_delete_item(self, client: TestClient, admin: dict) -> None:
        assert client.delete("/admin/items/1", headers=admin).status_code == 200
        assert [i["id"] for i in client.get("/gallery").json()["items"]] == ["2", "3"]

    def test_categories(self, client: TestClient, admin: dict) -> None:
        res = client.post("/admin/categories", json={"name": "Pixel Art"}, headers=admin)
        assert res.json()["category"]["id"] == "pixel-art"
        assert client.post("/admin/categories", json={"name": "pixel art"}, headers=admin).status_code == 400

        res = client.delete(
            "/admin/categories/pixel-art", params={"activeCategory": "pixel-art"}, headers=admin
        )
        assert res.json()["activeCategory"] == "all"
        assert client.delete("/admin/categories/all", headers=admin).status_code == 400

    def test_social_links(self, client: TestClient, admin: dict) -> None:
        res = client.post(
            "/admin/social-links", json={"platform": "discord", "url": "https://discord.gg/x"}, headers=admin
        )
        link_id = res.json()["link"]["id"]
        assert [link["id"] for link in client.get("/social-links").json()["links"]] == [link_id]
        client.delete(f"/admin/social-links/{link_id}", headers=admin)
        assert client.get("/social-links").json()["links"] == []

    def test_inbox(self, client: TestClient, admin: dict) -> None:
        client.post("/messages", json={"name": "Ana", "message": "one"})
        client.post("/messages", json={"name": "Bo", "message": "two"})
        inbox = client.get("/admin/messages", headers=admin).json()
        assert [m["message"] for m in inbox["messages"]] == ["two", "one"]

        client.delete(f"/admin/messages/{inbox['messages'][0]['id']}", headers=admin)
        assert client.get("/admin/messages", headers=admin).json()["count"] == 1
        client.delete("/admin/messages", headers=admin)
        assert client.get("/admin/messages", headers=admin).json()["count"] == 0

    def test_update_pin(self, client: TestClient, admin: dict) -> None:
        assert client.put("/admin/pin", json={"pin": "12a4"}, headers=admin).status_code == 400
        assert client.put("/admin/pin", json={"pin": "4821\n"}, headers=admin).status_code == 400
        res = client.put("/admin/pin", json={"pin": "4821"}, headers=admin)
        assert res.json()["notices"][0]["message"] == "Security PIN updated!"

        token = _login(client)
        assert _enter_pin(client, token, "4821")["verified"] is True

    def test_update_credentials(self, client: TestClient, admin: dict) -> None:
        client.put("/admin/credentials", json={"username": "root", "password": "s3cret"}, headers=admin)
        assert client.post("/admin/login", json={"username": "admin", "password": "admin123"}).status_code == 401
        assert client.post("/admin/login", json={"username": "root", "password": "s3cret"}).status_code == 200

    def test_export_import(self, client: TestClient, admin: dict, ctx: AppContext) -> None:
        res = client.get("/admin/export", headers=admin)
        assert res.status_code == 200
        assert "promptverse-backup-" in res.headers["content-disposition"]
        document = res.json()
        document["prompts"] = document["prompts"][:1]

        res = client.post("/admin/import", content=json.dumps(document), headers=admin)
        assert res.json()["notices"][0]["message"] == "Data imported successfully!"
        assert [p.id for p in ctx.catalog.root.prompts] == ["1"]

    def test_import_rejects_invalid_file(self, client: TestClient, admin: dict, ctx: AppContext) -> None:
        res = client.post("/admin/import", content="not json", headers=admin)
        assert res.status_code == 400
        assert len(ctx.catalog.root.prompts) == 3

    def test_analytics(self, client: TestClient, clock: FakeClock) -> None:
        client.post("/visits")
        clock.advance(25 * 60 * 60)
        client.post("/visits")
        token = _login(client)
        _enter_pin(client, token, "0000")
        body = client.get("/admin/analytics", headers={"X-Admin-Session": token}).json()
        assert body["totalVisits"] == 2
        assert body["visitsLast24h"] == 1

    def test_enhance(self, client: TestClient, admin: dict, monkeypatch) -> None:
        monkeypatch.setattr(admin_router, "enhance_prompt", lambda idea: f"{idea}, cinematic lighting")
        res = client.post("/admin/enhance", json={"idea": "a cat"}, headers=admin)
        assert res.json() == {"description": "a cat, cinematic lighting"}

    def test_enhance_failure(self, client: TestClient, admin: dict, monkeypatch) -> None:
        def failing(idea):
            raise EnhancementError("quota")

        monkeypatch.setattr(admin_router, "enhance_prompt", failing)
        res = client.post("/admin/enhance", json={"idea": "a cat"}, headers=admin)
        assert res.status_code == 502
