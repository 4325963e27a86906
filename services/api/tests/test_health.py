"""Tests for health, stats and admin endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from social_stats.main import app
from social_stats.schemas import StatsResult
from social_stats.services.platforms import Platform


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def fake_stats(monkeypatch: pytest.MonkeyPatch) -> list[Platform]:
    """Patch the stats service used by the router; records requested platforms."""
    from social_stats.routes import stats as stats_routes

    calls: list[Platform] = []

    async def fake_get_platform_stats(platform: Platform) -> StatsResult:
        calls.append(platform)
        if platform is Platform.YOUTUBE:
            return StatsResult(subscribers=1200, views=45000)
        if platform is Platform.TIKTOK:
            return StatsResult(subscribers=300, likes=9000)
        return StatsResult(subscribers=42)

    monkeypatch.setattr(stats_routes, "get_platform_stats", fake_get_platform_stats)
    return calls


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_stats_endpoint_returns_counters(client: AsyncClient, fake_stats: list[Platform]):
    response = await client.get("/", params={"platform": "telegram"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    # Absent counters are omitted, not null.
    assert response.json() == {"subscribers": 42}
    assert fake_stats == [Platform.TELEGRAM]


@pytest.mark.asyncio
async def test_stats_endpoint_platform_is_case_insensitive(client: AsyncClient, fake_stats: list[Platform]):
    response = await client.get("/v1/stats", params={"platform": "YouTube"})
    assert response.status_code == 200
    assert response.json() == {"subscribers": 1200, "views": 45000}


@pytest.mark.asyncio
async def test_stats_endpoint_accepts_post(client: AsyncClient, fake_stats: list[Platform]):
    response = await client.post("/?platform=tiktok")
    assert response.status_code == 200
    assert response.json() == {"subscribers": 300, "likes": 9000}


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"platform": "myspace"}, {}])
async def test_stats_endpoint_rejects_unknown_platform(
    client: AsyncClient, fake_stats: list[Platform], params: dict[str, str]
):
    response = await client.get("/", params=params)
    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "INVALID_PLATFORM"
    assert error["message"] == "Invalid platform"
    assert "x" in error["detail"]["available"]
    assert fake_stats == []


@pytest.mark.asyncio
async def test_stats_endpoint_options_returns_empty_ok(client: AsyncClient, fake_stats: list[Platform]):
    response = await client.options("/", params={"platform": "x"})
    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert "X-Requested-With" in response.headers["access-control-allow-headers"]
    assert fake_stats == []


@pytest.mark.asyncio
async def test_cors_headers_for_browser_requests(client: AsyncClient, fake_stats: list[Platform]):
    response = await client.get(
        "/",
        params={"platform": "facebook"},
        headers={"Origin": "https://example.com"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"

    preflight = await client.options(
        "/",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert preflight.status_code == 200
    assert "POST" in preflight.headers["access-control-allow-methods"]


@pytest.mark.asyncio
async def test_admin_token_status(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from social_stats.routes import admin as admin_routes

    async def fake_list_token_status() -> list[dict]:
        return [
            {"provider": "instagram", "stored": True, "updatedAt": 1700000000000},
            {"provider": "facebook", "stored": False, "updatedAt": None},
        ]

    monkeypatch.setattr(admin_routes, "list_token_status", fake_list_token_status)

    response = await client.get("/v1/admin/tokens")
    assert response.status_code == 200
    tokens = response.json()["tokens"]
    assert tokens[0] == {"provider": "instagram", "stored": True, "updatedAt": 1700000000000}
    assert tokens[1]["stored"] is False
    assert all("value" not in t for t in tokens)


@pytest.mark.asyncio
async def test_admin_token_refresh(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from social_stats.routes import admin as admin_routes

    async def fake_run_token_refresh() -> dict[str, str]:
        return {"instagram": "refreshed", "facebook": "skipped"}

    monkeypatch.setattr(admin_routes, "run_token_refresh", fake_run_token_refresh)

    response = await client.post("/v1/admin/tokens/refresh")
    assert response.status_code == 200
    assert response.json() == {"results": {"instagram": "refreshed", "facebook": "skipped"}}
