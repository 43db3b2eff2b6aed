"""Neo4j driver integration for FastAPI applications."""

from neo4j import AsyncDriver, AsyncSession, AsyncTransaction, EagerResult

from fastapi_neo4j.config import Neo4jConfig, Neo4jScheme
from fastapi_neo4j.db.driver import create_driver
from fastapi_neo4j.db.records import collapse_null_collections, normalize_records
from fastapi_neo4j.errors import neo4j_exception_handler, register_exception_handlers
from fastapi_neo4j.module import (
    get_neo4j_config,
    get_neo4j_driver,
    get_neo4j_service,
    neo4j_lifespan,
    setup_neo4j,
)
from fastapi_neo4j.services.neo4j_service import Neo4jService, Statement

__all__ = [
    "AsyncDriver",
    "AsyncSession",
    "AsyncTransaction",
    "EagerResult",
    "Neo4jConfig",
    "Neo4jScheme",
    "Neo4jService",
    "Statement",
    "create_driver",
    "collapse_null_collections",
    "normalize_records",
    "neo4j_exception_handler",
    "register_exception_handlers",
    "get_neo4j_config",
    "get_neo4j_driver",
    "get_neo4j_service",
    "neo4j_lifespan",
    "setup_neo4j",
]
