"""Connection configuration and application settings."""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Neo4jScheme(str, Enum):
    """URI schemes supported by the Neo4j driver."""

    NEO4J = "neo4j"
    NEO4J_S = "neo4j+s"
    NEO4J_SSC = "neo4j+ssc"
    BOLT = "bolt"
    BOLT_S = "bolt+s"
    BOLT_SSC = "bolt+ssc"


class Neo4jConfig(BaseModel):
    """Connection settings for a single Neo4j server."""

    model_config = ConfigDict(frozen=True)

    scheme: Neo4jScheme
    host: str
    port: int | str
    username: str
    password: str
    database: str | None = None
    options: dict[str, Any] | None = None
    # Milliseconds to keep retrying before the bootstrap gives up
    verify_connection_timeout: int = Field(60000, gt=0)

    @property
    def uri(self) -> str:
        return f"{self.scheme.value}://{self.host}:{self.port}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Application
    APP_NAME: str = "FastAPI Neo4j"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server
    PORT: int = 8000

    # Neo4j
    NEO4J_SCHEME: Neo4jScheme = Neo4jScheme.BOLT
    NEO4J_HOST: str = "localhost"
    NEO4J_PORT: int = 7687
    NEO4J_USERNAME: str = "neo4j"
    NEO4J_PASSWORD: str = "password"
    NEO4J_DATABASE: str | None = None
    NEO4J_VERIFY_CONNECTION_TIMEOUT: int = 60000

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    def neo4j_config(self) -> Neo4jConfig:
        """Build the driver connection config from these settings."""
        return Neo4jConfig(
            scheme=self.NEO4J_SCHEME,
            host=self.NEO4J_HOST,
            port=self.NEO4J_PORT,
            username=self.NEO4J_USERNAME,
            password=self.NEO4J_PASSWORD,
            database=self.NEO4J_DATABASE,
            verify_connection_timeout=self.NEO4J_VERIFY_CONNECTION_TIMEOUT,
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the application process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


settings = Settings()
