"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean application settings with lowercase fields and derived values
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DEFAULT_ENDPOINT = "https://api.turfgame.com/v5/users"


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Upstream API ───────────────────────────────────────────────────

    TURF_API_USERS_URL: str = Field(default=_DEFAULT_ENDPOINT)
    # Comma separated; kept as a plain string so pydantic-settings does not
    # try to JSON-decode it.
    TURF_USERS: str = Field(default="")
    POLL_INTERVAL_SEC: int = Field(default=300)
    HTTP_TIMEOUT_SECONDS: float = Field(default=10.0)

    # ── Metrics server ─────────────────────────────────────────────────

    HTTPD_HOST: str = Field(default="0.0.0.0")
    HTTPD_PORT: str = Field(default="9097")
    WAITRESS_THREADS: int = Field(default=4)
    PRUNE_STALE_REGIONS: bool = Field(default=False)

    # ── Process ────────────────────────────────────────────────────────

    GRACEFUL_SHUTDOWN_TIMEOUT: int = Field(default=30)
    LOG_LEVEL: str = Field(default="INFO")


class Settings(BaseModel):
    """Application settings with lowercase fields and derived values."""

    model_config = ConfigDict(from_attributes=True)

    # ── Upstream API ───────────────────────────────────────────────────

    endpoint: str = _DEFAULT_ENDPOINT
    players: list[str] = Field(default_factory=list)
    poll_interval_seconds: int = 300
    http_timeout_seconds: float = 10.0

    # ── Metrics server ─────────────────────────────────────────────────

    metrics_host: str = "0.0.0.0"
    metrics_port: str = "9097"
    waitress_threads: int = 4
    prune_stale_regions: bool = False

    # ── Process ────────────────────────────────────────────────────────

    graceful_shutdown_timeout: int = 30
    log_level: str = "INFO"

    def validate_config(self) -> None:
        from turf_exporter.exceptions import ConfigurationError

        errors: list[str] = []

        if not self.players:
            errors.append("TURF_USERS cannot be an empty string")

        if self.poll_interval_seconds <= 0:
            errors.append("POLL_INTERVAL_SEC must be greater than zero")

        if self.http_timeout_seconds <= 0:
            errors.append("HTTP_TIMEOUT_SECONDS must be greater than zero")

        try:
            port = int(self.metrics_port)
        except ValueError:
            port = 0
        if not self.metrics_port.isdecimal() or not 0 < port < 65536:
            errors.append(
                f"HTTPD_PORT must be a TCP port number, got {self.metrics_port!r}"
            )

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(cls, env: "Environment | None" = None) -> "Settings":
        if env is None:
            env = Environment()

        players = [name.strip() for name in env.TURF_USERS.split(",")]

        return cls(
            endpoint=env.TURF_API_USERS_URL,
            players=[name for name in players if name],
            poll_interval_seconds=env.POLL_INTERVAL_SEC,
            http_timeout_seconds=env.HTTP_TIMEOUT_SECONDS,
            metrics_host=env.HTTPD_HOST,
            metrics_port=env.HTTPD_PORT.strip(),
            waitress_threads=env.WAITRESS_THREADS,
            prune_stale_regions=env.PRUNE_STALE_REGIONS,
            graceful_shutdown_timeout=env.GRACEFUL_SHUTDOWN_TIMEOUT,
            log_level=env.LOG_LEVEL.upper(),
        )
