"""Translation of Neo4j driver errors into HTTP responses."""

import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from neo4j.exceptions import Neo4jError

logger = logging.getLogger(__name__)

CONSTRAINT_VALIDATION_FAILED = "Neo.ClientError.Schema.ConstraintValidationFailed"

# Node(54776) already exists with label `User` and property `email` = 'duplicate@email.com'
UNIQUE_VIOLATION_TEXT = "already exists with"
# Node(54778) with label `Test` must have the property `mustExist`
REQUIRED_PROPERTY_TEXT = "must have the property"

QUOTED_IDENTIFIER = re.compile(r"`([^`]+)`")


def _constraint_property(message: str) -> str | None:
    """Property name from a constraint message; the first quoted name is the label."""
    matches = QUOTED_IDENTIFIER.findall(message)
    if not matches:
        return None
    return matches[1] if len(matches) > 1 else matches[0]


def _error_body(status_code: int, error: str, message: list[str]) -> dict:
    return {"statusCode": status_code, "message": message, "error": error}


def map_neo4j_error(exc: Neo4jError) -> tuple[int, dict]:
    """Return the status code and JSON body for a driver error."""
    message = exc.message or str(exc)
    code = getattr(exc, "code", None)

    if not code or code == CONSTRAINT_VALIDATION_FAILED:
        prop = _constraint_property(message)
        if prop and UNIQUE_VIOLATION_TEXT in message:
            return status.HTTP_400_BAD_REQUEST, _error_body(
                status.HTTP_400_BAD_REQUEST, "Bad Request", [f"{prop} already taken"]
            )
        if prop and REQUIRED_PROPERTY_TEXT in message:
            return status.HTTP_400_BAD_REQUEST, _error_body(
                status.HTTP_400_BAD_REQUEST, "Bad Request", [f"{prop} should not be empty"]
            )

    return status.HTTP_500_INTERNAL_SERVER_ERROR, _error_body(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", []
    )


async def neo4j_exception_handler(request: Request, exc: Neo4jError) -> JSONResponse:
    """FastAPI exception handler for ``Neo4jError``."""
    status_code, body = map_neo4j_error(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Unhandled Neo4j error on {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the Neo4j error handler on an application."""
    app.add_exception_handler(Neo4jError, neo4j_exception_handler)
