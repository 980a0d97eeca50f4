import pytest
from httpx import AsyncClient, ASGITransport

import main
from main import app
from postercraft.exporters import FileExporter


@pytest.mark.asyncio
async def test_health_endpoint():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_options_endpoint():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/poster/options")

    assert response.status_code == 200
    data = response.json()
    assert len(data["frames"]) == 18
    assert "diamond" in data["quote_boxes"]
    assert "telegram" in data["icons"]["social"]


@pytest.mark.asyncio
async def test_render_endpoint():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/poster/render", json={
            "title": "Hello",
            "body": "Welcome everyone",
            "frame": "corners",
            "social_row": {"entries": [{"icon": "telegram", "label": "@poster"}]},
        })

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content[:8] == b"\x89PNG\r\n\x1a\n"
    layers = response.headers["x-poster-layers"].split(",")
    assert layers[0] == "background"
    assert "title" in layers
    assert layers[-1] == "frame"


@pytest.mark.asyncio
async def test_render_endpoint_validation():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/poster/render", json={
            "gradient": {"mode": "unified", "stops": [{"color": "blue"}]}
        })

    assert response.status_code == 422  # Validation error


@pytest.mark.asyncio
async def test_render_endpoint_rejects_bad_paint_color():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/poster/render", json={"frame": "solid", "frame_color": "notacolor"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_share_telegram_not_configured(monkeypatch):
    monkeypatch.setattr(main.telegram_exporter, "bot_token", None)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/poster/share", json={"target": "telegram"})

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_share_to_file(monkeypatch, tmp_path):
    monkeypatch.setattr(main, "file_exporter", FileExporter(tmp_path))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/poster/share", json={
            "target": "file",
            "filename": "hello.png",
            "spec": {"title": "Hello", "captions_enabled": False},
        })

    assert response.status_code == 200
    data = response.json()
    assert data["exporter"] == "file"
    assert data["filename"] == "hello.png"
    assert "title" in data["layers"]
    assert (tmp_path / "hello.png").exists()
