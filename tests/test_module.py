"""Tests for FastAPI wiring of the Neo4j service."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from fastapi_neo4j.api.routes import health
from fastapi_neo4j.config import Neo4jConfig, Neo4jScheme
from fastapi_neo4j.module import (
    get_neo4j_config,
    get_neo4j_service,
    neo4j_lifespan,
    resolve_config,
    setup_neo4j,
)
from fastapi_neo4j.services.neo4j_service import Neo4jService

CONFIG = Neo4jConfig(
    scheme=Neo4jScheme.BOLT,
    host="localhost",
    port=7687,
    username="neo4j",
    password="secret",
    database="movies",
)


@pytest.fixture
def mock_driver():
    driver = MagicMock()
    driver.close = AsyncMock()
    driver.get_server_info = AsyncMock(return_value={"address": "localhost:7687", "agent": "Neo4j/5.20.0"})
    return driver


@pytest.fixture
def mock_create_driver(mock_driver):
    with patch("fastapi_neo4j.module.create_driver", new_callable=AsyncMock) as mock:
        mock.return_value = mock_driver
        yield mock


def _app(lifespan=None):
    app = FastAPI(lifespan=lifespan)

    @app.get("/database")
    async def database(service: Neo4jService = Depends(get_neo4j_service)) -> dict:
        return {"database": service.get_config().database}

    @app.get("/config")
    async def config(config: Neo4jConfig = Depends(get_neo4j_config)) -> dict:
        return {"uri": config.uri}

    app.include_router(health.router, prefix="/api")
    return app


class TestResolveConfig:
    @pytest.mark.asyncio
    async def test_plain_config(self):
        assert await resolve_config(CONFIG) is CONFIG

    @pytest.mark.asyncio
    async def test_sync_factory(self):
        assert await resolve_config(lambda: CONFIG) is CONFIG

    @pytest.mark.asyncio
    async def test_async_factory(self):
        async def factory():
            return CONFIG

        assert await resolve_config(factory) is CONFIG


class TestLifespan:
    def test_connects_on_startup_and_closes_on_shutdown(self, mock_create_driver, mock_driver):
        app = _app(neo4j_lifespan(CONFIG))

        with TestClient(app) as client:
            mock_create_driver.assert_awaited_once_with(CONFIG)
            assert client.get("/database").json() == {"database": "movies"}
            assert client.get("/config").json() == {"uri": "bolt://localhost:7687"}
            mock_driver.close.assert_not_awaited()

        mock_driver.close.assert_awaited_once()

    def test_async_config_factory(self, mock_create_driver):
        async def factory():
            return CONFIG

        app = _app(neo4j_lifespan(factory))

        with TestClient(app) as client:
            assert client.get("/database").json() == {"database": "movies"}

        mock_create_driver.assert_awaited_once_with(CONFIG)

    def test_setup_neo4j_keeps_existing_lifespan(self, mock_create_driver, mock_driver):
        events = []

        @asynccontextmanager
        async def existing(app):
            events.append("startup")
            yield
            events.append("shutdown")

        app = setup_neo4j(_app(existing), CONFIG)

        with TestClient(app) as client:
            assert events == ["startup"]
            assert client.get("/database").status_code == 200

        assert events == ["startup", "shutdown"]
        mock_driver.close.assert_awaited_once()

    def test_service_missing_without_lifespan(self):
        client = TestClient(_app(), raise_server_exceptions=True)

        with pytest.raises(RuntimeError, match="not initialized"):
            client.get("/database")


class TestHealthRoutes:
    def test_health(self, mock_create_driver):
        with TestClient(_app(neo4j_lifespan(CONFIG))) as client:
            assert client.get("/api/health").json() == {"status": "healthy"}

    def test_database_health(self, mock_create_driver, mock_driver):
        with TestClient(_app(neo4j_lifespan(CONFIG))) as client:
            response = client.get("/api/health/db")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
        assert response.json()["server"] == "{ address: 'localhost:7687', agent: 'Neo4j/5.20.0' }"
        mock_driver.get_server_info.assert_awaited_once_with(database="movies")

    def test_database_unhealthy(self, mock_create_driver, mock_driver):
        mock_driver.get_server_info.side_effect = ConnectionError("refused")

        with TestClient(_app(neo4j_lifespan(CONFIG))) as client:
            response = client.get("/api/health/db")

        assert response.status_code == 503
        assert "refused" in response.json()["detail"]
