# src/weekly_status/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The synchronizer depends on Protocols instead of concrete stores.
This keeps the local slot and the remote endpoint swappable and makes testing easier.
"""

from typing import Any, Protocol

from .models import Document


class LocalStore(Protocol):
    """Synchronous durable slot (the fallback of last resort)."""

    def load_local(self) -> Document | None:
        """Current-version document, or None when absent or corrupt."""
        ...

    def save_local(self, doc: Document) -> None: ...

    def load_legacy(self) -> Any | None:
        """Raw value of the older-version slot, or None."""
        ...


class RemoteStore(Protocol):
    """
    Asynchronous document store behind the state endpoint.

    load_remote raises Unreachable or InvalidShape.
    save_remote raises Unreachable.
    """

    async def load_remote(self) -> Document: ...

    async def save_remote(self, doc: Document) -> Document: ...

    async def aclose(self) -> None: ...
