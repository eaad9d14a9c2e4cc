"""Pydantic request/response models for the keyvault API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class SecretInput(BaseModel):
    """Body of ``POST /secrets``."""

    key: str
    value: Any

    @field_validator("key")
    @classmethod
    def key_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("key must not be empty")
        return v


class SecretValueOnly(BaseModel):
    """Body of ``PUT /secrets/{key}``."""

    value: Any


class SearchInput(BaseModel):
    """Body of ``POST /search``."""

    query: str | None = Field(None, description="Query string; empty or missing returns every secret")
    key_contains: str | None = Field(None, description="Only consider secrets whose key contains this text")


class SecretOut(BaseModel):
    secret_key: str
    project_key: str
    secret_value: Any
