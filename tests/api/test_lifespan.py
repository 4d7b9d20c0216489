"""Tests for application startup and shutdown."""

import structlog
from httpx import ASGITransport, AsyncClient

from toolcrib.api.main import create_app
from toolcrib.config import Settings


async def test_lifespan_uses_app_settings(settings: Settings):
    """Startup migrates the database the app was configured with."""
    app = create_app(settings=settings)
    assert not settings.storage.db_path.exists()

    try:
        async with app.router.lifespan_context(app):
            assert settings.storage.db_path.exists()
            assert app.state.container.settings is settings

            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/api/health")
            assert resp.json()["database"] == "ok"

        assert app.state.container is None
    finally:
        structlog.reset_defaults()
