"""Application configuration using Pydantic Settings.

Settings are loaded from environment variables (and an optional ``.env``
file) and split into sections for the store, the HTTP server, the superuser
policy and the people-counting device poller.
"""

import logging
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_CLIENT_PREFIXES = [
    "::1",
    "127.0.0.1",
    "192.168.",
    "10.",
]


class MongoConfig(BaseSettings):
    """MongoDB configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    initdb_root_username: str = Field(..., description="MongoDB root user")
    initdb_root_password: str = Field(..., description="MongoDB root password")

    dev_host: str = Field(default="localhost", description="Host for local dev")
    dev_port: int = Field(default=27017, description="Port for local dev")
    docker_host: str = Field(default="mongo", description="Host inside compose")
    docker_port: int = Field(default=27017, description="Port inside compose")

    db_name: str = Field(default="peoplecount", description="Database name")
    server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long driver calls wait for a reachable server",
    )
    users_collection: str = Field(
        default="users",
        description="Collection holding the user directory",
    )

    def uri_for(self, profile: str) -> str:
        """Build the connection URI for a deployment profile.

        Args:
            profile: ``dev`` selects the dev host/port, anything else the
                docker host/port.

        Returns:
            MongoDB connection URI authenticating against ``admin``.
        """
        if profile == "dev":
            host, port = self.dev_host, self.dev_port
        else:
            host, port = self.docker_host, self.docker_port

        username = quote_plus(self.initdb_root_username)
        password = quote_plus(self.initdb_root_password)
        return f"mongodb://{username}:{password}@{host}:{port}/?authSource=admin"


class ServerConfig(BaseSettings):
    """HTTP server and basic-auth gate settings."""

    model_config = SettingsConfigDict(
        env_prefix="EXPRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    port: int = Field(default=3000, description="Listen port")
    user: str = Field(..., description="Basic-auth username")
    password: str = Field(
        ...,
        validation_alias="EXPRESS_PASS",
        description="Basic-auth password",
    )


class SuperUserConfig(BaseSettings):
    """Static superuser credentials for forced password resets."""

    model_config = SettingsConfigDict(
        env_prefix="SUPERUSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    email: str = Field(..., description="Superuser email")
    password: str = Field(..., description="Superuser password")


class AppConfig(BaseSettings):
    """General application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="dev",
        description="Deployment profile (dev or docker)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    allowed_client_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_CLIENT_PREFIXES),
        description="Client address prefixes allowed through the gate",
    )


class DeviceConfig(BaseSettings):
    """People-counting camera settings used by the poller script."""

    model_config = SettingsConfigDict(
        env_prefix="DEVICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(
        default=(
            "http://10.8.1.101/ISAPI/System/Video/inputs/channels/1/counting/search"
        ),
        description="Counting search endpoint of the device",
    )
    username: str = Field(default="admin", description="Digest-auth username")
    password: str = Field(default="2008-TheNuance", description="Digest-auth password")
    region_id: int = Field(default=1, description="Counting region to query")
    max_attempts: int = Field(default=10, description="Total attempts before giving up")
    retry_delay: float = Field(default=1.0, description="Seconds between attempts")
    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")


def configure_logging(log_level: str) -> None:
    """Configure root logging for the service and scripts.

    Args:
        log_level: Level name; unknown names fall back to INFO.
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Quiet noisy third-party loggers
    for noisy_logger in (
        "pymongo",
        "pymongo.ocsp_support",
        "pymongo.pool",
        "pymongo.topology",
        "urllib3",
    ):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    # Load from .env
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    mongo: MongoConfig = Field(default_factory=MongoConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    superuser: SuperUserConfig = Field(default_factory=SuperUserConfig)
    app: AppConfig = Field(default_factory=AppConfig)

    @property
    def mongo_uri(self) -> str:
        """Connection URI for the active deployment profile."""
        return self.mongo.uri_for(self.app.env)

    def configure_logging(self) -> None:
        """Configure application logging based on settings."""
        configure_logging(self.app.log_level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance.

    Returns:
        Settings instance with loaded configuration.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
