"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from toolcrib.api.main import create_app
from toolcrib.application.services import ServiceContainer, build_container
from toolcrib.config.settings import Settings, StorageSettings, reset_settings
from toolcrib.core.entities.catalog import Equipment, ToolType
from toolcrib.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a per-test database."""
    return Settings(
        environment="development",
        storage=StorageSettings(
            data_dir=tmp_path,
            db_name="toolcrib_test.db",
            pool_size=3,
            busy_timeout=5000,
        ),
    )


@pytest.fixture
async def migrated_db(settings: Settings) -> Path:
    """Database file with every migration applied."""
    await initialize_database(settings.storage.db_path, create_backup_before=False)
    return settings.storage.db_path


@pytest.fixture
async def container(
    settings: Settings, migrated_db: Path
) -> AsyncGenerator[ServiceContainer, None]:
    """Real service graph over the temp database."""
    services = build_container(settings)
    yield services
    await services.close()


@pytest.fixture
async def seeded(container: ServiceContainer) -> dict:
    """Two tool types and machine 7."""
    em10 = await container.catalog.add_tool_type(
        ToolType(code="EM-10", name="10mm flat endmill", unit_cost=1000.0)
    )
    em6 = await container.catalog.add_tool_type(
        ToolType(code="EM-6", name="6mm ball endmill", unit_cost=500.0)
    )
    machine = await container.catalog.add_equipment(
        Equipment(equipment_number=7, location="Line 1")
    )
    return {"em10": em10, "em6": em6, "machine": machine}


@pytest.fixture
async def api_client(
    container: ServiceContainer, seeded: dict
) -> AsyncGenerator[AsyncClient, None]:
    """Async client against an app wired to the temp database."""
    app = create_app(container=container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def clean_settings():
    """Reset the process settings between tests."""
    reset_settings()
    yield
    reset_settings()
