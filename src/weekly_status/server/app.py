# src/weekly_status/server/app.py

from __future__ import annotations

"""
State server.

Serves the persistence endpoint the synchronizer talks to:

  GET /api/state  -> 200 + document
  PUT /api/state  -> 200 + stored (normalized) document
                     413 when the body is over the size limit
                     400 when the body is not JSON or not a state document

The document lives in a single JSON file written atomically (DocumentFile).
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.errors import PayloadTooLarge
from ..core.normalize import Invalid, validate_document
from ..storage.document_file import DocumentFile

logger = logging.getLogger(__name__)

STATE_PATH = "/api/state"
NO_STORE = {"Cache-Control": "no-store"}


def _json(status_code: int, payload: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload, headers=NO_STORE)


async def read_body_limited(request: Request, max_bytes: int) -> bytes:
    """Read the request body, giving up as soon as it grows past `max_bytes`."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLarge(max_bytes)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLarge(max_bytes)
    return bytes(body)


def create_app(document_file: DocumentFile, *, max_body_bytes: int = 1_000_000) -> FastAPI:
    @asynccontextmanager
    async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
        document_file.ensure()
        logger.info("State file: %s", document_file.path)
        yield

    app = FastAPI(title="weekly-status state server", docs_url=None, redoc_url=None, lifespan=_lifespan)

    @app.exception_handler(Exception)
    async def _server_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _json(500, {"error": "Server error"})

    @app.get(STATE_PATH)
    async def get_state() -> JSONResponse:
        return _json(200, document_file.read())

    @app.put(STATE_PATH)
    async def put_state(request: Request) -> JSONResponse:
        try:
            body = await read_body_limited(request, max_body_bytes)
        except PayloadTooLarge as e:
            logger.warning("Rejected state payload over %d bytes", e.limit)
            return _json(413, {"error": str(e)})

        try:
            parsed = json.loads(body)
        except ValueError as e:
            return _json(400, {"error": f"Invalid JSON: {e}"})

        result = validate_document(parsed)
        if isinstance(result, Invalid):
            return _json(400, {"error": "Invalid state payload"})

        saved = document_file.write(result.document)
        return _json(200, saved)

    @app.api_route(STATE_PATH, methods=["POST", "PATCH", "DELETE"])
    async def state_method_not_allowed() -> JSONResponse:
        return _json(405, {"error": "Method not allowed"})

    return app
