"""Neo4j driver bootstrap with retry until a connection timeout."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase, basic_auth

from fastapi_neo4j.config import Neo4jConfig

logger = logging.getLogger(__name__)

RETRY_INTERVAL = 5.0  # seconds between connection attempts

DEFAULT_DRIVER_OPTIONS: dict[str, Any] = {
    "max_connection_lifetime": 3600,
    "max_connection_pool_size": 50,
    "connection_acquisition_timeout": 60,
}


def driver_options(config: Neo4jConfig) -> dict[str, Any]:
    """Default driver options overridden by the configured ones."""
    return {**DEFAULT_DRIVER_OPTIONS, **(config.options or {})}


def format_server_info(info: Any) -> str:
    """
    Render server info as ``{ key: value, ... }``.

    Accepts a mapping or the driver's ``ServerInfo``. Fields that are None
    are left out and string values are single-quoted.
    """
    if isinstance(info, Mapping):
        fields = dict(info)
    else:
        fields = {
            "address": str(info.address) if info.address is not None else None,
            "agent": info.agent,
            "protocol_version": (
                str(info.protocol_version) if info.protocol_version is not None else None
            ),
        }

    output = []
    for key, value in fields.items():
        if value is None:
            continue
        rendered = f"'{value}'" if isinstance(value, str) else value
        output.append(f"{key}: {rendered}")
    return "{ " + ", ".join(output) + " }"


async def _attempt_connection(
    config: Neo4jConfig, options: dict[str, Any]
) -> AsyncDriver:
    """Build a driver and verify it against the configured database."""
    driver = AsyncGraphDatabase.driver(
        config.uri,
        auth=basic_auth(config.username, config.password),
        **options,
    )
    try:
        server_info = await driver.get_server_info(database=config.database)
    except BaseException:
        await driver.close()
        raise

    logger.info(f"Neo4j Server: {format_server_info(server_info)}")
    return driver


async def create_driver(
    config: Neo4jConfig,
    *,
    retry_interval: float = RETRY_INTERVAL,
) -> AsyncDriver:
    """
    Create a verified Neo4j driver, retrying until the config's timeout.

    Attempts start immediately and then every ``retry_interval`` seconds.
    Connection failures are retried silently apart from a warning. Once
    ``verify_connection_timeout`` milliseconds have passed without a
    verified driver, retrying stops and the last connection error is raised.

    Raises:
        Exception: The last connection error seen before the deadline.
        TimeoutError: If no attempt finished before the deadline.
    """
    options = driver_options(config)
    loop = asyncio.get_running_loop()
    reason: BaseException | None = None

    async def retry_loop() -> AsyncDriver:
        nonlocal reason
        started = loop.time()
        attempt = 0
        while True:
            try:
                return await _attempt_connection(config, options)
            except Exception as e:
                reason = e
                logger.warning(
                    f"Neo4j driver instantiation failed. Retry in {retry_interval:g} seconds..."
                )

            attempt += 1
            next_attempt_at = started + attempt * retry_interval
            await asyncio.sleep(max(0.0, next_attempt_at - loop.time()))

    timeout = config.verify_connection_timeout / 1000
    task = asyncio.ensure_future(retry_loop())
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except BaseException:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    # A driver verified while the cancellation was pending lost the race
    if not task.cancelled() and task.exception() is None:
        await task.result().close()

    logger.error("Neo4j driver instantiation failed!")
    if reason is None:
        raise TimeoutError(
            f"Could not connect to Neo4j at {config.uri} within "
            f"{config.verify_connection_timeout} ms"
        )
    logger.error(reason)
    raise reason
