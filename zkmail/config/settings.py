"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ProverMode(str, Enum):
    """Proving backend selection."""

    MOCK = "mock"
    SNARKJS = "snarkjs"


class ProverSettings(BaseSettings):
    """Proving backend and circuit artifact configuration."""

    model_config = SettingsConfigDict(env_prefix="PROVER_")

    mode: ProverMode = ProverMode.MOCK

    # Artifact locations: absolute paths, paths relative to circuits_dir, or http(s) URLs
    circuit_wasm: str = "twitter-login_js/twitter-login.wasm"
    proving_key: str = "twitter-login_0001.zkey"
    verification_key: str = "verification_key.json"

    # snarkjs invocation
    snarkjs_command: str = "npx snarkjs"
    timeout_seconds: int = 120

    # Mock backend
    mock_key_id: str = "zkmail-mock-key"
    mock_delay_seconds: float = 0.0

    @property
    def snarkjs_argv(self) -> list[str]:
        """Split the snarkjs command into argv form."""
        return self.snarkjs_command.split()


class EmailSettings(BaseSettings):
    """Login-notification email checks."""

    model_config = SettingsConfigDict(env_prefix="EMAIL_")

    trusted_domains: str = "twitter.com,x.com"

    @property
    def trusted_domains_list(self) -> list[str]:
        """Parse domains string into list."""
        return [d.strip().lower() for d in self.trusted_domains.split(",") if d.strip()]


class CircuitSettings(BaseSettings):
    """Circuit witness parameters."""

    model_config = SettingsConfigDict(env_prefix="CIRCUIT_")

    salt_upper_bound: int = Field(default=1_000_000, gt=0)


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False
    service_name: str = "zkmail"

    # Project paths
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent.parent)
    circuits_dir: Path | None = None

    prover: ProverSettings = Field(default_factory=ProverSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    circuit: CircuitSettings = Field(default_factory=CircuitSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def resolved_circuits_dir(self) -> Path:
        """Directory that relative artifact paths are resolved against."""
        return self.circuits_dir or self.project_root / "circuits"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
