"""
HTTP transport.

Serves ``GET /{identifier}/manifest``. Everything before the trailing
``/manifest`` segment is the item identifier. Manifest assembly does
blocking filesystem work and runs in the worker thread pool.
"""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from forager import __version__
from forager.identifiers import Identifier, ResolveError
from forager.manifests import ManifestSource


LOGGER = logging.getLogger("forager.web")


def create_app(source: ManifestSource) -> Starlette:
    """
    Build the web application for a manifest source.

    Parameters:
        source: Manifest source shared by all requests

    Returns:
        Starlette application
    """

    async def manifest(request: Request) -> Response:
        item_id = Identifier(request.path_params["identifier"])
        LOGGER.info("manifest_request", extra={"identifier": item_id.value})
        try:
            result = await run_in_threadpool(source.manifest_for, item_id)
        except ResolveError as e:
            LOGGER.warning(
                "manifest_failed",
                extra={"identifier": item_id.value, "error": str(e)},
            )
            return PlainTextResponse(str(e), status_code=500)
        return JSONResponse(result.to_json())

    async def health(request: Request) -> Response:
        return JSONResponse({"status": "ok", "version": __version__})

    app = Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/{identifier:path}/manifest", manifest, methods=["GET"]),
        ],
        middleware=[
            # IIIF viewers load manifests cross-origin
            Middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"]),
        ],
    )
    app.state.source = source
    return app
