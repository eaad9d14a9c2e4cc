"""
Centralized configuration for keyvault.

All configuration is loaded from environment variables with sensible defaults.
A ``.env`` file in the working directory is honoured for local development.

Usage:
    from keyvault.config import get_config
    cfg = get_config()
    print(cfg.read_db.dict)      # {"dbname": "secrets", "port": 5432, "host": "postgres", ...}
    print(cfg.auth.write_key)    # value of $API_MASTER_KEY_WRITE
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection parameters for one database role."""

    host: str = "postgres"
    port: int = 5432
    name: str = "secrets"
    user: str = ""
    password: str = ""

    @property
    def dict(self) -> dict[str, str | int]:
        """Return a psycopg2.connect() kwargs dict."""
        d: dict[str, str | int] = {
            "dbname": self.name,
            "port": self.port,
        }
        if self.host:
            d["host"] = self.host
        if self.user:
            d["user"] = self.user
        if self.password:
            d["password"] = self.password
        return d


@dataclass(frozen=True)
class AuthConfig:
    """Process-wide master API keys.

    The read key grants read access only; the write key grants both.
    An empty key never authenticates anyone.
    """

    read_key: str = ""
    write_key: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.read_key and self.write_key)


@dataclass(frozen=True)
class Config:
    """Top-level keyvault configuration."""

    read_db: DatabaseConfig = field(default_factory=DatabaseConfig)
    write_db: DatabaseConfig = field(default_factory=DatabaseConfig)
    # Owner role, only used by migrations (CREATE TABLE / GRANT)
    admin_db: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "WARNING"

    def db(self, role: str) -> DatabaseConfig:
        """Return the connection parameters for ``role`` ("read", "write" or "admin")."""
        if role == "read":
            return self.read_db
        if role == "write":
            return self.write_db
        if role == "admin":
            return self.admin_db
        raise ValueError(f"Unknown database role: {role!r}")


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    host = os.environ.get("PG_HOST", "postgres")
    port = int(os.environ.get("PG_PORT", "5432"))
    name = os.environ.get("POSTGRES_DB", "secrets")

    read_db = DatabaseConfig(
        host=host,
        port=port,
        name=name,
        user=os.environ.get("SECRETS_READ_USER", ""),
        password=os.environ.get("SECRETS_READ_PASSWORD", ""),
    )
    write_db = DatabaseConfig(
        host=host,
        port=port,
        name=name,
        user=os.environ.get("SECRETS_WRITE_USER", ""),
        password=os.environ.get("SECRETS_WRITE_PASSWORD", ""),
    )

    admin_db = DatabaseConfig(
        host=host,
        port=port,
        name=name,
        user=os.environ.get("POSTGRES_USER", os.environ.get("USER", "postgres")),
        password=os.environ.get("POSTGRES_PASSWORD", ""),
    )

    auth = AuthConfig(
        read_key=os.environ.get("API_MASTER_KEY_READ", ""),
        write_key=os.environ.get("API_MASTER_KEY_WRITE", ""),
    )

    return Config(
        read_db=read_db,
        write_db=write_db,
        admin_db=admin_db,
        auth=auth,
        host=os.environ.get("KEYVAULT_HOST", "0.0.0.0"),
        port=int(os.environ.get("KEYVAULT_PORT", "3000")),
        log_level=os.environ.get("KEYVAULT_LOG_LEVEL", "WARNING").upper(),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
