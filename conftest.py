"""
Root-level shared test fixtures.

Every test starts from a clean keyvault environment: the config singleton is
reset and the env vars it reads are cleared, so nothing leaks from the
developer's shell or a local .env.
"""

from __future__ import annotations

import uuid

import pytest

READ_KEY = "test-api-key-read"
WRITE_KEY = "test-api-key-write"

KEYVAULT_ENV = [
    "PG_HOST",
    "PG_PORT",
    "POSTGRES_DB",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "SECRETS_READ_USER",
    "SECRETS_READ_PASSWORD",
    "SECRETS_WRITE_USER",
    "SECRETS_WRITE_PASSWORD",
    "API_MASTER_KEY_READ",
    "API_MASTER_KEY_WRITE",
    "KEYVAULT_HOST",
    "KEYVAULT_PORT",
    "KEYVAULT_LOG_LEVEL",
]


@pytest.fixture
def test_prefix():
    """Unique prefix for test isolation."""
    return f"test_{uuid.uuid4().hex[:8]}"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove keyvault env vars and ignore any .env file."""
    from keyvault.config import reset_config

    for key in KEYVAULT_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("keyvault.config.load_dotenv", lambda *a, **kw: False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def api_keys(monkeypatch):
    """Configure the read/write master keys."""
    from keyvault.config import reset_config

    monkeypatch.setenv("API_MASTER_KEY_READ", READ_KEY)
    monkeypatch.setenv("API_MASTER_KEY_WRITE", WRITE_KEY)
    reset_config()
    return {"read": READ_KEY, "write": WRITE_KEY}
