# src/weekly_status/core/errors.py

"""
Error taxonomy of the state layer.

None of these is fatal to the process:
- MalformedInput / InvalidShape are recovered with defaults,
- Unreachable demotes the synchronizer to local-only mode,
- InvalidImport is shown to the user, the document stays as it was,
- PayloadTooLarge is turned into a 413 by the state server.
"""

from __future__ import annotations


class WeeklyStatusError(Exception):
    """Base class for all state-layer errors."""


class MalformedInput(WeeklyStatusError):
    """Unparseable or shape-invalid JSON from storage, import or network."""


class InvalidShape(MalformedInput):
    """The remote store answered, but the body is not a state document."""


class Unreachable(WeeklyStatusError):
    """The remote store is down or answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidImport(WeeklyStatusError):
    """A user-supplied import failed validation."""


class PayloadTooLarge(WeeklyStatusError):
    def __init__(self, limit: int) -> None:
        super().__init__("Payload too large")
        self.limit = limit
