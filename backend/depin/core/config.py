"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/depin/core/config.py
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent.parent
_project_root = _backend_dir.parent
ENV_FILE = _project_root / ".env"
# Fallback: try in backend/ directory if not found in project root
if not ENV_FILE.exists():
    ENV_FILE = _backend_dir / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=True)


TRANSFER_BACKENDS = ("vault", "http")


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "DePIN Ledger"
    app_env: str = Field(default="development", description="Application environment")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:8000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_sqlalchemy: bool = Field(default=False, description="Enable SQLAlchemy query logging")
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"depin.services": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=True, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/depin.log",
        description="Path to log file (relative to project root)"
    )
    log_file_rotation: str = Field(
        default="midnight",
        description="Log file rotation: 'midnight' or 'W0'..'W6' (weekly)"
    )
    log_file_retention: int = Field(default=30, ge=1, description="Number of days to keep log files")
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (tokens, secrets) - NOT RECOMMENDED"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./depin_ledger.db",
        description="SQLAlchemy database URL"
    )
    database_pool_size: int = Field(default=20, ge=1, description="Database pool size")
    database_max_overflow: int = Field(default=10, ge=0, description="Database max overflow")
    database_auto_create: bool = Field(
        default=False,
        description="Create ledger tables on startup instead of running Alembic"
    )

    # Ledger policy
    max_device_id_length: int = Field(
        default=32,
        ge=1,
        le=255,
        description="Maximum device identifier length in UTF-8 bytes"
    )
    reward_pool_account: str = Field(
        default="reward-pool",
        description="Account the reward transfers are drawn from"
    )
    enforce_network_pause: bool = Field(
        default=False,
        description="Reject telemetry submissions while the network is paused"
    )

    # Collaborators
    transfer_backend: str = Field(
        default="vault",
        description="Transfer backend: 'vault' (in-process pool) or 'http' (custody API)"
    )
    vault_initial_balance: int = Field(
        default=1_000_000_000,
        ge=0,
        description="Reward units seeded into the in-process vault pool"
    )
    custody_api_url: Optional[str] = Field(
        default=None,
        description="Base URL of the custody API (e.g., http://custody:9000)"
    )
    custody_api_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single custody API call (seconds)"
    )
    auth_header_name: str = Field(
        default="X-Verified-Caller",
        description="Header carrying the caller identity verified by the auth gateway"
    )

    @field_validator("transfer_backend")
    @classmethod
    def validate_transfer_backend(cls, v):
        """Restrict transfer backend to known implementations"""
        value = (v or "").strip().lower()
        if value not in TRANSFER_BACKENDS:
            raise ValueError(f"transfer_backend must be one of {TRANSFER_BACKENDS}, got '{v}'")
        return value

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite"""
        return self.database_url.startswith("sqlite")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
