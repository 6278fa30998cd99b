"""HTTP client for the hosted catalog's PostgREST interface."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

import httpx
from pydantic import ValidationError

from taxonomist.adapters.http_resilience import ResilientClient
from taxonomist.domain.errors import ConnectivityError, ConstraintError

from .schema import PostgrestError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from uuid import UUID

    from taxonomist.config.catalog import CatalogRestConfig
    from taxonomist.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

type Row = dict[str, Any]


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class PostgrestClient:
    """Low-level table access: select, insert and delete by id.

    Every call opens its own ``ResilientClient`` and runs to completion, so the
    public methods are synchronous. Failures come out as ``ConnectivityError`` or
    ``ConstraintError`` only.
    """

    def __init__(
        self,
        *,
        config: CatalogRestConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or _default_client_factory

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, str] | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        params: dict[str, str] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if limit is not None:
            params["limit"] = str(limit)
        return asyncio.run(self._request("GET", table, params=params))

    def insert(self, table: str, payload: Mapping[str, object]) -> Row:
        rows = asyncio.run(
            self._request(
                "POST",
                table,
                json=dict(payload),
                headers={"Prefer": "return=representation"},
            )
        )
        if not rows:
            raise ConnectivityError(f"Catalog returned no row for insert into {table}")
        return rows[0]

    def delete(self, table: str, row_id: UUID) -> None:
        asyncio.run(self._request("DELETE", table, params={"id": f"eq.{row_id}"}))

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
        headers: dict[str, str] | None = None,
    ) -> list[Row]:
        try:
            async with self._client_factory(self._resilience) as client:
                response = await client.request(
                    method, table, params=params, json=json, headers=headers
                )
        except httpx.TransportError as exc:
            log.warning("Catalog %s %s failed: %s", method, table, exc)
            raise ConnectivityError(f"Catalog unreachable: {exc}") from exc

        _raise_for_status(response, method=method, table=table)
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            raise ConnectivityError(f"Catalog returned invalid JSON for {table}") from exc
        if isinstance(payload, dict):
            return [cast("Row", payload)]
        if not isinstance(payload, list):
            raise ConnectivityError(f"Unexpected catalog response payload for {table}")
        return cast("list[Row]", payload)


def _raise_for_status(response: httpx.Response, *, method: str, table: str) -> None:
    status = response.status_code
    if status < httpx.codes.BAD_REQUEST:
        return

    error = _parse_error(response)
    message = error.message or response.reason_phrase
    detail = f"{method} {table} -> {status}: {message}"
    if status >= httpx.codes.INTERNAL_SERVER_ERROR or status in {
        httpx.codes.REQUEST_TIMEOUT,
        httpx.codes.TOO_MANY_REQUESTS,
    }:
        log.warning("Catalog unavailable: %s", detail)
        raise ConnectivityError(detail)
    if status == httpx.codes.CONFLICT or error.is_constraint_violation:
        raise ConstraintError(detail)
    log.error("Catalog rejected request: %s (code=%s, hint=%s)", detail, error.code, error.hint)
    raise ConstraintError(detail)


def _parse_error(response: httpx.Response) -> PostgrestError:
    try:
        return PostgrestError.model_validate(response.json())
    except (ValueError, ValidationError):
        return PostgrestError()
