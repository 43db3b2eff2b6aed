"""Health check endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from fastapi_neo4j.db.driver import format_server_info
from fastapi_neo4j.module import get_neo4j_service
from fastapi_neo4j.services.neo4j_service import Neo4jService

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/health/db")
async def database_health(
    service: Neo4jService = Depends(get_neo4j_service),
) -> dict[str, str]:
    """Check Neo4j database connectivity."""
    try:
        server_info = await service.get_driver().get_server_info(
            database=service.get_config().database
        )
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Database unhealthy: {str(e)}")
    return {
        "status": "healthy",
        "database": "connected",
        "server": format_server_info(server_info),
    }
