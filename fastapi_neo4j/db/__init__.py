"""Database module for Neo4j connectivity and result conversion."""

from fastapi_neo4j.db.driver import create_driver, format_server_info
from fastapi_neo4j.db.records import (
    collapse_null_collections,
    normalize_records,
    normalize_value,
)

__all__ = [
    "create_driver",
    "format_server_info",
    "collapse_null_collections",
    "normalize_records",
    "normalize_value",
]
