"""FastAPI wiring: driver lifespan, dependencies and error handling."""

import inspect
import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import FastAPI, Request
from neo4j import AsyncDriver

from fastapi_neo4j.config import Neo4jConfig
from fastapi_neo4j.db.driver import create_driver
from fastapi_neo4j.errors import register_exception_handlers
from fastapi_neo4j.services.neo4j_service import Neo4jService

logger = logging.getLogger(__name__)

ConfigFactory = Callable[[], Neo4jConfig | Awaitable[Neo4jConfig]]
ConfigSource = Neo4jConfig | ConfigFactory
Lifespan = Callable[[FastAPI], AbstractAsyncContextManager[None]]


async def resolve_config(source: ConfigSource) -> Neo4jConfig:
    """Return the config itself, or the result of calling its factory."""
    if isinstance(source, Neo4jConfig):
        return source
    config = source()
    if inspect.isawaitable(config):
        config = await config
    return config


def neo4j_lifespan(source: ConfigSource, inner: Lifespan | None = None) -> Lifespan:
    """
    Build a lifespan that connects to Neo4j on startup and closes on shutdown.

    ``source`` is either a ``Neo4jConfig`` or a (sync or async) callable
    returning one, resolved at startup. The service is stored on
    ``app.state.neo4j``. ``inner`` is an existing lifespan to run inside.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        config = await resolve_config(source)
        logger.info(f"Connecting to Neo4j at {config.uri}...")
        driver = await create_driver(config)
        service = Neo4jService(config, driver)
        app.state.neo4j = service
        try:
            if inner is None:
                yield
            else:
                async with inner(app):
                    yield
        finally:
            await service.close()

    return lifespan


def setup_neo4j(app: FastAPI, source: ConfigSource) -> FastAPI:
    """Attach Neo4j lifespan and error handling to an existing application."""
    app.router.lifespan_context = neo4j_lifespan(
        source, inner=app.router.lifespan_context
    )
    register_exception_handlers(app)
    return app


# Dependencies for FastAPI
def get_neo4j_service(request: Request) -> Neo4jService:
    """FastAPI dependency for the Neo4j service."""
    service = getattr(request.app.state, "neo4j", None)
    if service is None:
        raise RuntimeError("Neo4j service not initialized. Use neo4j_lifespan or setup_neo4j.")
    return service


def get_neo4j_driver(request: Request) -> AsyncDriver:
    """FastAPI dependency for the underlying driver."""
    return get_neo4j_service(request).get_driver()


def get_neo4j_config(request: Request) -> Neo4jConfig:
    """FastAPI dependency for a copy of the connection config."""
    return get_neo4j_service(request).get_config()
