"""FamilyApiClient — async HTTP client for the family tree REST API.

Only the endpoints the graph view needs are wrapped: the authoritative
per-family layout document, plus the person and family reads used to
feed a rebuild. Bodies come back decoded but otherwise untouched; the
service layer decides what a malformed layout means.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/core"


class ApiError(Exception):
    """Non-2xx response from the family API."""

    def __init__(self, message: str, status: int, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class FamilyApiClient:
    """Thin wrapper over :class:`httpx.AsyncClient`.

    Args:
        base_url: API root, e.g. ``https://tree.example.org``.
        token: Bearer token sent on every request when set.
        timeout: Per-request timeout in seconds.
        transport: Optional transport override (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> FamilyApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Layout document
    # ------------------------------------------------------------------

    async def get_tree_layout(self, family_id: int) -> dict[str, Any] | None:
        """Fetch the stored layout record, or None when the family has none.

        The record is ``{"id", "familyId", "layout"}`` where ``layout`` is a
        JSON string. A 404, an empty body or a JSON ``null`` all mean "none".
        """
        try:
            body = await self._request("GET", f"{API_PREFIX}/families/{family_id}/layout")
        except ApiError as exc:
            if exc.status == 404:
                return None
            raise
        if body in (None, ""):
            return None
        if not isinstance(body, dict):
            msg = f"Unexpected layout record type: {type(body).__name__}"
            raise ApiError(msg, 200, body)
        return body

    async def save_tree_layout(
        self,
        family_id: int,
        positions: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Store *positions* (``[{"nodeId", "x", "y"}]``) and return the stored record."""
        body = await self._request(
            "POST",
            f"{API_PREFIX}/families/{family_id}/layout",
            json={"positions": positions},
        )
        if not isinstance(body, dict):
            msg = "Layout save returned no record"
            raise ApiError(msg, 200, body)
        return body

    # ------------------------------------------------------------------
    # People and families
    # ------------------------------------------------------------------

    async def get_persons(self) -> list[dict[str, Any]]:
        """Every person visible to the caller, with embedded relations."""
        return await self._request_list(f"{API_PREFIX}/persons")

    async def get_persons_by_family(self, family_id: int) -> list[dict[str, Any]]:
        """Persons belonging to one family, with embedded relations."""
        return await self._request_list(f"{API_PREFIX}/families/{family_id}/persons")

    async def get_families(self) -> list[dict[str, Any]]:
        """Family display metadata (``{"id", "name"}``)."""
        return await self._request_list(f"{API_PREFIX}/families")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _request_list(self, path: str) -> list[dict[str, Any]]:
        body = await self._request("GET", path)
        if not isinstance(body, list):
            msg = f"Expected a JSON list from {path}"
            raise ApiError(msg, 200, body)
        return body

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        response = await self._client.request(method, path, json=json, headers=headers)
        body = _decode_body(response)

        if response.status_code == 401:
            logger.warning("Family API rejected credentials for %s %s", method, path)
        if response.is_error:
            msg = f"Request failed: {response.status_code}"
            raise ApiError(msg, response.status_code, body)
        return body


def _decode_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            return None
    return response.text
