"""Tests for the Neo4j error to HTTP response mapping."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from neo4j.exceptions import Neo4jError

from fastapi_neo4j.errors import (
    CONSTRAINT_VALIDATION_FAILED,
    map_neo4j_error,
    register_exception_handlers,
)

UNIQUE_MESSAGE = (
    "Node(54776) already exists with label `User` and property `email` = 'duplicate@email.com'"
)
REQUIRED_MESSAGE = "Node(54778) with label `Test` must have the property `mustExist`"


def _error(message, code=CONSTRAINT_VALIDATION_FAILED):
    return Neo4jError.hydrate(message=message, code=code)


@pytest.fixture
def client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/unique")
    async def unique():
        raise _error(UNIQUE_MESSAGE)

    @app.get("/required")
    async def required():
        raise _error(REQUIRED_MESSAGE)

    @app.get("/other")
    async def other():
        raise _error("Invalid input 'MATCHH'", code="Neo.ClientError.Statement.SyntaxError")

    return TestClient(app)


class TestMapNeo4jError:
    def test_unique_violation(self):
        status_code, body = map_neo4j_error(_error(UNIQUE_MESSAGE))

        assert status_code == 400
        assert body == {"statusCode": 400, "message": ["email already taken"], "error": "Bad Request"}

    def test_required_property_violation(self):
        status_code, body = map_neo4j_error(_error(REQUIRED_MESSAGE))

        assert status_code == 400
        assert body == {
            "statusCode": 400,
            "message": ["mustExist should not be empty"],
            "error": "Bad Request",
        }

    def test_other_code_is_not_inspected(self):
        status_code, body = map_neo4j_error(
            _error(UNIQUE_MESSAGE, code="Neo.ClientError.Statement.SyntaxError")
        )

        assert status_code == 500
        assert body == {"statusCode": 500, "message": [], "error": "Internal Server Error"}

    def test_unmatched_constraint_message(self):
        status_code, _ = map_neo4j_error(_error("Some other constraint failure"))

        assert status_code == 500


class TestExceptionHandler:
    def test_unique_violation_response(self, client):
        response = client.get("/unique")

        assert response.status_code == 400
        assert response.json() == {
            "statusCode": 400,
            "message": ["email already taken"],
            "error": "Bad Request",
        }

    def test_required_property_response(self, client):
        response = client.get("/required")

        assert response.status_code == 400
        assert response.json()["message"] == ["mustExist should not be empty"]

    def test_other_errors_are_internal(self, client):
        response = client.get("/other")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal Server Error"
