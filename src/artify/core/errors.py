"""Exception hierarchy for AI Artify.

Generation failures are fully classified: every way ``generate`` can fail
maps onto exactly one :class:`GenerationError` subclass, and each subclass
carries the HTTP status and the user-facing message the API returns for it.

Exception Hierarchy
-------------------
ArtifyError
├── GenerationError
│   ├── InvalidInput
│   ├── MisconfiguredService
│   ├── AuthenticationFailed
│   ├── ServiceWarmingUp
│   ├── RateLimited
│   ├── UpstreamError
│   └── InternalFailure
├── GenerationInProgress
└── PersistenceFailure
"""

from __future__ import annotations


class ArtifyError(Exception):
    """Base exception for all AI Artify errors."""


class GenerationError(ArtifyError):
    """A classified failure of a generation request.

    Attributes:
        status_code: HTTP status the API responds with.
        message: Human-readable message shown to the user.
        details: Upstream-supplied detail text, if any.
    """

    status_code: int = 500
    default_message: str = "Failed to generate image. Please try again."

    def __init__(self, message: str | None = None, details: str | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        """Name of the error kind, e.g. ``"RateLimited"``."""
        return type(self).__name__

    def to_dict(self) -> dict:
        """Return the JSON body for this error."""
        body: dict = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(GenerationError):
    """The prompt is missing, not a string, or blank."""

    status_code = 400
    default_message = "Prompt is required and must be a string"


class MisconfiguredService(GenerationError):
    """The upstream credential is not configured."""

    status_code = 500
    default_message = (
        "Hugging Face API key not configured. "
        "Please add HUGGINGFACE_API_KEY to your environment variables."
    )


class AuthenticationFailed(GenerationError):
    """The upstream rejected the credential (HTTP 401)."""

    status_code = 401
    default_message = (
        "Invalid API key. Please check your HUGGINGFACE_API_KEY environment variable."
    )


class ServiceWarmingUp(GenerationError):
    """The upstream model is still loading (HTTP 503)."""

    status_code = 503
    default_message = "Model is loading. Please try again in a few moments."


class RateLimited(GenerationError):
    """The upstream throttled the request (HTTP 429)."""

    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class UpstreamError(GenerationError):
    """Any other non-2xx upstream response."""

    status_code = 500
    default_message = "Failed to generate image. Please try again."


class InternalFailure(GenerationError):
    """Transport fault or otherwise unclassified failure."""

    status_code = 500
    default_message = "Internal server error. Please try again."


class GenerationInProgress(ArtifyError):
    """A session already has a generation request in flight."""


class PersistenceFailure(ArtifyError):
    """Writing the gallery to storage failed.

    Never raised to store callers; the store logs it and keeps the in-memory
    collection as the source of truth.
    """
