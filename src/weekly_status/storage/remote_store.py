# src/weekly_status/storage/remote_store.py

from __future__ import annotations

import logging

import httpx

from ..core.errors import InvalidShape, Unreachable
from ..core.models import Document
from ..core.normalize import is_valid_shape, normalize

logger = logging.getLogger(__name__)


def _make_timeout(seconds: float) -> httpx.Timeout:
    s = max(0.1, float(seconds))
    return httpx.Timeout(connect=min(s, 5.0), read=s, write=s, pool=s)


class HttpRemoteStore:
    """
    Remote document store speaking the state endpoint contract:

      GET <endpoint>  -> 200 + full document
      PUT <endpoint>  -> 200 + stored document

    Any transport error or non-2xx status is reported as Unreachable;
    the caller decides what "unreachable" means for the app (local-only mode).
    """

    def __init__(
        self,
        base_url: str,
        *,
        endpoint: str = "/api/state",
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=_make_timeout(timeout_seconds),
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def load_remote(self) -> Document:
        try:
            resp = await self._client.get(self._endpoint, headers={"Cache-Control": "no-store"})
        except httpx.HTTPError as e:
            raise Unreachable(f"GET {self._endpoint} failed: {e}") from e

        if not resp.is_success:
            raise Unreachable(f"Server returned {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidShape("Server returned a non-JSON body") from e

        if not is_valid_shape(data):
            raise InvalidShape("Invalid server state")

        logger.debug("Loaded remote state: %d weeks", len(data["weeks"]))
        return normalize(data)

    async def save_remote(self, doc: Document) -> Document:
        try:
            resp = await self._client.put(self._endpoint, json=doc)
        except httpx.HTTPError as e:
            raise Unreachable(f"PUT {self._endpoint} failed: {e}") from e

        if not resp.is_success:
            raise Unreachable(f"Server returned {resp.status_code}", status_code=resp.status_code)

        logger.debug("Saved remote state (%d bytes)", len(resp.content))
        try:
            stored = resp.json()
        except ValueError:
            return doc
        return normalize(stored) if is_valid_shape(stored) else doc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
