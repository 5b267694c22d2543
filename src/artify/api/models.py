"""Pydantic request and response models for the AI Artify API.

The generate route validates its body by hand so that a missing or
non-string prompt yields the API's own 400 body instead of FastAPI's 422.
These models describe the payloads for documentation and for clients.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
GenerateResponse
    Successful ``POST /api/generate`` response.
ErrorResponse
    Body of every error response.
HealthResponse
    Response of ``GET /api/health``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Request body for ``POST /api/generate``.

    Attributes:
        prompt: Natural-language description of the image to generate.
    """

    prompt: str = Field(
        ...,
        description="Description of the image to generate.",
    )


class GenerateResponse(BaseModel):
    """Response body for a successful generation.

    Attributes:
        success: Always ``True``.
        image: Data URI of the generated image.
        prompt: The submitted prompt, echoed back.
    """

    success: bool = True
    image: str = Field(..., description="Generated image as a base64 data URI.")
    prompt: str = Field(..., description="The prompt the image was generated from.")


class ErrorResponse(BaseModel):
    """Body of an error response.

    Attributes:
        error: Human-readable error message.
        details: Upstream detail text, when available.
    """

    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    """Response body for ``GET /api/health``."""

    status: str = "ok"
    version: str
    configured: bool = Field(
        ...,
        description="Whether an upstream API key is configured.",
    )
