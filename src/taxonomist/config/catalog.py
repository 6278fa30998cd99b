"""Catalog backend configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

CATALOG_REST_PATH = "/rest/v1/"
CATALOG_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class CatalogRestConfig:
    """Holds the hosted catalog (PostgREST) connection values."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig


def rest_catalog_configured() -> bool:
    return optional_env_var("TAXONOMIST_CATALOG_URL") is not None


def get_catalog_rest_config(*, resilience: ResilienceConfig | None = None) -> CatalogRestConfig:
    values = require_env_vars(("TAXONOMIST_CATALOG_URL", "TAXONOMIST_CATALOG_KEY"))
    base_url = values["TAXONOMIST_CATALOG_URL"].rstrip("/") + CATALOG_REST_PATH
    api_key = values["TAXONOMIST_CATALOG_KEY"]
    return CatalogRestConfig(
        base_url=base_url,
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="catalog",
            base_url=base_url,
            timeout_seconds=CATALOG_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
        ),
    )
