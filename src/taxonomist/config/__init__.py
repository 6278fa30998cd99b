"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogRestConfig, get_catalog_rest_config, rest_catalog_configured
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconciliation import ReconciliationConfig, get_reconciliation_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CatalogRestConfig",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_catalog_rest_config",
    "get_database_config",
    "get_reconciliation_config",
    "get_storage_config",
    "optional_env_var",
    "rest_catalog_configured",
    "require_env_var",
    "require_env_vars",
]
