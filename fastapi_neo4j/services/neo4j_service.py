"""Service wrapping a Neo4j driver with read, write and transaction helpers."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from neo4j import (
    READ_ACCESS,
    WRITE_ACCESS,
    AsyncDriver,
    AsyncManagedTransaction,
    AsyncResult,
    AsyncSession,
    EagerResult,
)
from neo4j.exceptions import Neo4jError

from fastapi_neo4j.config import Neo4jConfig
from fastapi_neo4j.db.records import collapse_null_collections, normalize_records

logger = logging.getLogger(__name__)


@dataclass
class Statement:
    """A single Cypher statement for a multi-statement transaction."""

    statement: str
    parameters: dict[str, Any] = field(default_factory=dict)


StatementLike = Statement | Mapping[str, Any]


async def _eager(result: AsyncResult) -> EagerResult:
    """Fully consume a result while its transaction is still open."""
    keys = list(await result.keys())
    records = [record async for record in result]
    summary = await result.consume()
    return EagerResult(records, summary, keys)


def _as_statement(item: StatementLike) -> Statement:
    if isinstance(item, Statement):
        return item
    return Statement(item["statement"], dict(item.get("parameters") or {}))


class Neo4jService:
    """Read, write and transaction helpers on top of a verified driver."""

    def __init__(self, config: Neo4jConfig, driver: AsyncDriver):
        self._config = config
        self._driver = driver
        self._closed = False

    def get_driver(self) -> AsyncDriver:
        """Get the driver instance to access the full API of the neo4j package."""
        return self._driver

    def get_config(self) -> Neo4jConfig:
        """Return a copy of the connection config."""
        return self._config.model_copy(deep=True)

    async def close(self) -> None:
        """Close the driver on application shutdown."""
        if self._closed:
            return
        self._closed = True
        await self._driver.close()
        logger.info("Neo4j driver closed.")

    def get_read_session(self, database: str | None = None) -> AsyncSession:
        """Acquire a READ session."""
        return self._driver.session(
            database=database or self._config.database,
            default_access_mode=READ_ACCESS,
        )

    def get_write_session(self, database: str | None = None) -> AsyncSession:
        """Acquire a WRITE session."""
        return self._driver.session(
            database=database or self._config.database,
            default_access_mode=WRITE_ACCESS,
        )

    async def read_raw(
        self,
        query: str,
        params: dict[str, Any] | None = None,
        database: str | None = None,
    ) -> EagerResult:
        """READ transaction without modifying the database, raw result."""
        session = self.get_read_session(database)

        async def work(tx: AsyncManagedTransaction) -> EagerResult:
            return await _eager(await tx.run(query, params))

        logger.debug(f"Executing read query: {query[:100]}")
        try:
            return await session.execute_read(work)
        except Neo4jError as e:
            logger.error(f"Neo4j read query failed: {e}")
            raise
        finally:
            await session.close()

    async def read(
        self,
        query: str,
        params: dict[str, Any] | None = None,
        database: str | None = None,
    ) -> list[dict[str, Any]]:
        """READ transaction without modifying the database, converted records."""
        result = await self.read_raw(query, params, database)
        return normalize_records(result.records)

    async def write_raw(
        self,
        query: str,
        params: dict[str, Any] | None = None,
        database: str | None = None,
    ) -> EagerResult:
        """WRITE transaction that modifies the database, raw result."""
        session = self.get_write_session(database)

        async def work(tx: AsyncManagedTransaction) -> EagerResult:
            return await _eager(await tx.run(query, params))

        logger.debug(f"Executing write query: {query[:100]}")
        try:
            return await session.execute_write(work)
        except Neo4jError as e:
            logger.error(f"Neo4j write query failed: {e}")
            raise
        finally:
            await session.close()

    async def write(
        self,
        query: str,
        params: dict[str, Any] | None = None,
        database: str | None = None,
    ) -> list[dict[str, Any]]:
        """WRITE transaction that modifies the database, converted records."""
        result = await self.write_raw(query, params, database)
        return normalize_records(result.records)

    async def multiple_statements_raw(
        self,
        statements: Iterable[StatementLike],
        database: str | None = None,
    ) -> list[EagerResult]:
        """
        Run several statements in one transaction and return raw results.

        Statements run in order. If any of them fails the transaction is
        rolled back and the error re-raised, so none of their effects persist.
        """
        session = self.get_write_session(database)
        try:
            tx = await session.begin_transaction()
            try:
                results = []
                for item in statements:
                    s = _as_statement(item)
                    logger.debug(f"Executing statement: {s.statement[:100]}")
                    results.append(await _eager(await tx.run(s.statement, s.parameters)))
                await tx.commit()
                return results
            except Exception as e:
                logger.error(f"Transaction failed, rolling back: {e}")
                await tx.rollback()
                raise
        finally:
            await session.close()

    async def multiple_statements(
        self,
        statements: Iterable[StatementLike],
        database: str | None = None,
    ) -> list[list[dict[str, Any]]]:
        """Run several statements in one transaction, converted records per statement."""
        results = await self.multiple_statements_raw(statements, database)
        return [normalize_records(result.records) for result in results]

    @staticmethod
    def extract_records(records: Any) -> Any:
        return normalize_records(records)

    @staticmethod
    def remove_empty_arrays(
        data: list[Any], array_key: str, check_key: str
    ) -> list[Any]:
        return collapse_null_collections(data, array_key, check_key)
