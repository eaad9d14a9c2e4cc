"""HTTP API for keyvault."""
