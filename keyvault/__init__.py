"""keyvault — self-hosted, project-scoped JSON secrets with boolean search."""

__version__ = "0.1.0"
