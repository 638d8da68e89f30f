"""Configuration management for the Tourney API service."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse, urlunparse

from decouple import Choices
from decouple import config


class Environment(Enum):
    """Supported deployment environments."""

    DEVELOPMENT = "development"
    CI = "CI"
    PRODUCTION = "production"


@dataclass
class Config:
    """Configuration for the Tourney API service."""

    # Required fields
    database_url: str

    # Database name, only applied to PostgreSQL URLs
    database_name: str = "tourney_db"

    # Environment configuration
    environment: Environment = Environment.DEVELOPMENT

    # HTTP server configuration
    http_host: str = "0.0.0.0"
    http_port: int = 8080

    # Create tables on startup instead of running alembic migrations
    auto_create_tables: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"

    # OpenTelemetry configuration
    otel_enabled: bool = False
    otel_service_name: str = "tourney-api"
    otel_exporter_type: str = "console"
    otel_otlp_endpoint: str = "http://localhost:4317"
    otel_export_interval_millis: int = 60000
    otel_export_timeout_millis: int = 30000

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        # Helper function to simplify config calls
        def get_config(key: str, default=None, cast=None):
            if default is not None:
                if cast is not None:
                    return config(key, default=default, cast=cast)
                else:
                    return config(key, default=default)
            else:
                return config(key)

        env = Environment(
            get_config("ENVIRONMENT", "development", Choices(["development", "CI", "production"]))
        )

        return cls(
            # Required
            database_url=get_config("DATABASE_URL"),
            database_name=get_config("DATABASE_NAME", "tourney_db"),
            # Environment
            environment=env,
            # HTTP server
            http_host=get_config("HTTP_HOST", "0.0.0.0"),
            http_port=get_config("HTTP_PORT", 8080, int),
            auto_create_tables=get_config(
                "AUTO_CREATE_TABLES", env == Environment.DEVELOPMENT, bool
            ),
            # Logging
            log_level=get_config(
                "LOG_LEVEL", "INFO", Choices(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
            ),
            log_format=get_config("LOG_FORMAT", "json", Choices(["json", "text"])),
            # OpenTelemetry
            otel_enabled=get_config("OTEL_ENABLED", False, bool),
            otel_service_name=get_config("OTEL_SERVICE_NAME", "tourney-api"),
            otel_exporter_type=get_config(
                "OTEL_EXPORTER_TYPE", "console", Choices(["console", "otlp", "none"])
            ),
            otel_otlp_endpoint=get_config("OTEL_OTLP_ENDPOINT", "http://localhost:4317"),
            otel_export_interval_millis=get_config("OTEL_EXPORT_INTERVAL_MILLIS", 60000, int),
            otel_export_timeout_millis=get_config("OTEL_EXPORT_TIMEOUT_MILLIS", 30000, int),
        )

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == Environment.CI

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    def is_sqlite(self) -> bool:
        """Check if the configured store is SQLite."""
        return urlparse(self.database_url).scheme.startswith("sqlite")

    def get_database_url(self) -> str:
        """Build the async driver URL for the configured store.

        SQLite URLs keep their path and switch to the aiosqlite driver.
        PostgreSQL URLs switch to asyncpg and take ``database_name`` as path.
        """
        parsed = urlparse(self.database_url)
        scheme = parsed.scheme

        if scheme.startswith("sqlite"):
            return self.database_url.replace(f"{scheme}://", "sqlite+aiosqlite://", 1)

        if scheme in ("postgres", "postgresql"):
            scheme = "postgresql+asyncpg"

        path = f"/{self.database_name}"

        return urlunparse(
            (scheme, parsed.netloc, path, parsed.params, parsed.query, parsed.fragment)
        )


# Global configuration instance
_config: Optional[Config] = None


def init_config() -> Config:
    """Initialize the global configuration from the environment."""
    global _config
    _config = Config.from_env()
    return _config


def get_config() -> Config:
    """Get the global configuration instance."""
    if _config is None:
        raise RuntimeError("Configuration not initialized. Call init_config() first.")
    return _config


def reset_config() -> None:
    """Reset the global configuration. Used by tests."""
    global _config
    _config = None


def is_config_initialized() -> bool:
    """Check whether the global configuration has been initialized."""
    return _config is not None
