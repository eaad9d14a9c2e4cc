"""Database access for keyvault."""

from keyvault.db.connection import close_pools, get_connection, get_pool

__all__ = ["close_pools", "get_connection", "get_pool"]
