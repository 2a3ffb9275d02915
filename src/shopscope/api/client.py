"""Async REST client for the back-office admin API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..models import FetchResponse, MutationResponse, error_message

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Transport failure or error status from the admin API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _query_params(filters: Mapping[str, Any] | None) -> dict[str, Any]:
    """Flatten UI filter values into query params, skipping empty ones.

    Range values (``{"min": .., "max": ..}``) become ``key[min]`` style
    params, which is what the admin endpoints accept.
    """
    params: dict[str, Any] = {}
    for key, value in (filters or {}).items():
        if isinstance(value, Mapping):
            for bound, bound_value in value.items():
                if bound_value not in (None, ""):
                    params[f"{key}[{bound}]"] = bound_value
        elif value not in (None, ""):
            params[key] = value
    return params


class AdminApiClient:
    """Thin wrapper over the ``/admin/{resource}`` endpoints.

    A fresh ``httpx.AsyncClient`` is opened per call; *transport* is passed
    through so tests can plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._headers(),
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            try:
                payload = exc.response.json()
            except ValueError:
                payload = None
            message = error_message(payload, f"HTTP {exc.response.status_code}")
            logger.error("%s %s failed with %s: %s", method, url,
                         exc.response.status_code, message)
            raise ApiError(message, exc.response.status_code) from exc
        except httpx.RequestError as exc:
            logger.error("%s %s request error: %s", method, url, exc)
            raise ApiError(f"Could not reach the server: {exc}") from exc
        except ValueError as exc:
            logger.error("%s %s returned a non-JSON body", method, url)
            raise ApiError("Server returned an invalid response") from exc

    # -- Collection ----------------------------------------------------------

    async def fetch(
        self,
        resource: str,
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int = 100,
    ) -> FetchResponse:
        params = {**_query_params(filters), "page": page, "limit": limit}
        logger.debug("Fetching %s with %s", resource, params)
        payload = await self._request("GET", resource, params=params)
        return FetchResponse.from_payload(payload, limit=limit)

    # -- Single-record mutations ---------------------------------------------

    async def update(self, resource: str, record_id: str, fields: Mapping[str, Any]) -> MutationResponse:
        payload = await self._request("PUT", f"{resource}/{record_id}", json=dict(fields))
        return MutationResponse.from_payload(payload)

    async def update_status(self, resource: str, record_id: str, status: str) -> MutationResponse:
        payload = await self._request("PUT", f"{resource}/{record_id}/status", json={"status": status})
        return MutationResponse.from_payload(payload)

    async def delete(self, resource: str, record_id: str) -> MutationResponse:
        payload = await self._request("DELETE", f"{resource}/{record_id}")
        return MutationResponse.from_payload(payload)


class ResourceGateway:
    """An :class:`AdminApiClient` bound to one resource path.

    This is the collection boundary the list controller and the bulk
    runner talk to.  ``status_endpoint`` routes status changes through
    ``PUT {resource}/{id}/status`` instead of a partial update.
    """

    def __init__(self, client: AdminApiClient, resource: str, status_endpoint: bool = False) -> None:
        self.client = client
        self.resource = resource
        self.status_endpoint = status_endpoint

    async def fetch(
        self,
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int = 100,
    ) -> FetchResponse:
        return await self.client.fetch(self.resource, filters, page, limit)

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> MutationResponse:
        return await self.client.update(self.resource, record_id, fields)

    async def set_status(self, record_id: str, status: str) -> MutationResponse:
        if self.status_endpoint:
            return await self.client.update_status(self.resource, record_id, status)
        return await self.client.update(self.resource, record_id, {"status": status})

    async def delete(self, record_id: str) -> MutationResponse:
        return await self.client.delete(self.resource, record_id)
