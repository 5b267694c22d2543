"""AI Artify — FastAPI Application.

This module is the entry point for the web application.  It defines the
FastAPI ``app`` instance, the REST routes, and the ``main()`` CLI function
that launches the uvicorn server.

Architecture
------------
The application is a thin, stateless bridge:

- **Image generation** is delegated to
  :class:`~artify.core.gateway.GenerationGateway`, which calls the hosted
  inference API through a shared ``httpx.AsyncClient``.
- **Gallery persistence** happens in the browser: the page served at ``/``
  keeps the gallery in ``localStorage``.  Nothing user-specific is stored
  on the server.
- **Errors** raised by the gateway are converted to JSON bodies by a single
  exception handler.

Endpoints
---------
========  ==================  ======================================
Method    Path                Purpose
========  ==================  ======================================
GET       ``/``               Serve the main HTML page
POST      ``/api/generate``   Generate an image from a prompt
GET       ``/api/health``     Version and configuration status
========  ==================  ======================================

Usage
-----
CLI (installed entry point)::

    artify

Direct invocation::

    python -m artify.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from artify import __version__
from artify.api.models import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
)
from artify.core.config import ArtifyConfig, config
from artify.core.errors import GenerationError, InternalFailure, InvalidInput
from artify.core.gateway import GenerationGateway

logger = logging.getLogger(__name__)

TEMPLATES_DIR: Path = Path(__file__).resolve().parent.parent / "templates"


def create_app(
    settings: ArtifyConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration to use.  Defaults to the global ``config``.
        transport: Optional ``httpx`` transport for the upstream client,
            e.g. ``httpx.MockTransport`` in tests.

    Returns:
        The configured application.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the shared upstream client on startup, close it on shutdown."""
        client = httpx.AsyncClient(timeout=settings.request_timeout, transport=transport)
        app.state.gateway = GenerationGateway(settings, client=client)
        logger.info("Generation gateway ready (endpoint: %s)", settings.endpoint)

        yield  # Application runs here.

        await app.state.gateway.aclose()
        logger.info("Generation gateway closed on shutdown.")

    app = FastAPI(
        title="AI Artify",
        description="Text-to-image generation through a hosted inference API.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Allow cross-origin requests so the page can be served from a different
    # port during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
        """Render a classified generation failure as its JSON error body."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        """Serve the main application page.

        Raises:
            HTTPException: 404 if ``index.html`` is not found.
        """
        index_path = TEMPLATES_DIR / "index.html"
        if index_path.exists():
            return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
        raise HTTPException(status_code=404, detail="index.html not found")

    @app.post(
        "/api/generate",
        response_model=GenerateResponse,
        responses={
            status: {"model": ErrorResponse} for status in (400, 401, 429, 500, 503)
        },
    )
    async def generate_image(request: Request) -> GenerateResponse:
        """Generate an image from the ``prompt`` in the JSON body.

        The body is parsed by hand: a missing or non-string prompt returns
        the 400 error body, and a body that is not JSON at all is an
        internal error.

        Returns:
            ``{"success": true, "image": <data URI>, "prompt": <prompt>}``.

        Raises:
            GenerationError: Rendered by ``generation_error_handler``.
        """
        try:
            body = await request.json()
        except ValueError as e:
            logger.error("API route error: %s", e)
            raise InternalFailure() from e

        try:
            req = GenerateRequest.model_validate(body)
        except ValidationError as e:
            raise InvalidInput() from e

        gateway: GenerationGateway = request.app.state.gateway
        payload = await gateway.generate(req.prompt)
        return GenerateResponse(image=payload.image, prompt=payload.prompt)

    @app.get("/api/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        """Report the API version and whether a credential is configured."""
        app_settings: ArtifyConfig = request.app.state.settings
        return HealthResponse(version=__version__, configured=app_settings.api_key is not None)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~artify.core.config.config` (which loads
    from ``ARTIFY_SERVER_HOST`` and ``ARTIFY_SERVER_PORT`` environment
    variables).  Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``artify`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "artify.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
