"""Generation Gateway: bridge between a prompt and the hosted inference API.

The gateway forwards a prompt to the text-to-image endpoint with the fixed
parameter set from :class:`~artify.core.config.ArtifyConfig`, classifies the
HTTP outcome, and turns a successful binary response into a data URI.

Outcome Classification
----------------------
========  =====================================
Upstream  Result
========  =====================================
2xx       :class:`~artify.core.models.ImagePayload`
401       :class:`AuthenticationFailed`
503       :class:`ServiceWarmingUp`
429       :class:`RateLimited`
other     :class:`UpstreamError`
========  =====================================

Transport faults and anything unexpected become :class:`InternalFailure`, so
``generate`` either returns a payload or raises a ``GenerationError``.

The gateway keeps no per-call state.  Concurrent calls are independent; it is
up to the caller to allow only one request in flight per UI session.
"""

from __future__ import annotations

import json
import logging

import httpx

from artify.core.config import ArtifyConfig
from artify.core.data_uri import encode_data_uri, normalize_content_type, sniff_mime_type
from artify.core.errors import (
    AuthenticationFailed,
    GenerationError,
    InternalFailure,
    InvalidInput,
    MisconfiguredService,
    RateLimited,
    ServiceWarmingUp,
    UpstreamError,
)
from artify.core.models import ImagePayload

logger = logging.getLogger(__name__)


def extract_error_details(body: str) -> str:
    """Pull a human-readable detail message out of an upstream error body.

    JSON objects yield their ``message`` field, or the ``error`` field used
    by the Hugging Face API.  Anything else is returned as raw text.

    Args:
        body: Raw response body text.

    Returns:
        Detail text to surface to the user.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return body

    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
    return body


class GenerationGateway:
    """Stateless client for the text-to-image inference endpoint.

    Args:
        config: Configuration holding the credential, endpoint and fixed
            generation parameters.
        client: Optional shared ``httpx.AsyncClient``.  When omitted, a client
            is opened for each request.
    """

    def __init__(self, config: ArtifyConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = client

    def build_request_body(self, prompt: str) -> dict:
        """Return the JSON body sent upstream for *prompt*."""
        return {
            "inputs": prompt,
            "parameters": self.config.generation_parameters.model_dump(),
        }

    async def generate(self, prompt: str) -> ImagePayload:
        """Generate an image for *prompt*.

        Args:
            prompt: Natural-language description.  Must be non-blank; it is
                sent and echoed back exactly as given.

        Returns:
            The generated image as an :class:`ImagePayload`.

        Raises:
            InvalidInput: Prompt is not a string or is blank.
            MisconfiguredService: No API key configured.
            AuthenticationFailed: Upstream answered 401.
            ServiceWarmingUp: Upstream answered 503.
            RateLimited: Upstream answered 429.
            UpstreamError: Upstream answered with another error status.
            InternalFailure: Transport fault or unexpected error.
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidInput()

        api_key = self.config.api_key
        logger.info("Hugging Face API key exists: %s", api_key is not None)
        if api_key is None:
            raise MisconfiguredService()
        logger.info("API key length: %d", len(api_key))

        try:
            return await self._request(prompt, api_key)
        except GenerationError:
            raise
        except Exception as e:
            logger.exception("Generation request failed: %s", e)
            raise InternalFailure() from e

    async def aclose(self) -> None:
        """Close the shared client, if one was supplied."""
        if self._client is not None:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Internals.
    # ------------------------------------------------------------------

    async def _request(self, prompt: str, api_key: str) -> ImagePayload:
        endpoint = self.config.endpoint
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        body = self.build_request_body(prompt)

        logger.info("Making request to inference API: %s", endpoint)
        if self._client is not None:
            response = await self._client.post(
                endpoint, json=body, headers=headers, timeout=self.config.request_timeout
            )
        else:
            async with httpx.AsyncClient(timeout=self.config.request_timeout) as client:
                response = await client.post(endpoint, json=body, headers=headers)
        logger.info("API response status: %d", response.status_code)

        if not response.is_success:
            raise self._classify_failure(response)

        content_type = normalize_content_type(
            response.headers.get("content-type")
        ) or sniff_mime_type(response.content)
        image = encode_data_uri(response.content, content_type)
        logger.info("Successfully generated image (%d bytes)", len(response.content))
        return ImagePayload(
            image=image,
            prompt=prompt,
            content_type=content_type,
        )

    @staticmethod
    def _classify_failure(response: httpx.Response) -> GenerationError:
        error_text = response.text
        logger.error("Inference API error (%d): %s", response.status_code, error_text)
        details = extract_error_details(error_text)

        if response.status_code == 401:
            logger.info("Authentication failed - check API key")
            return AuthenticationFailed(details=details)
        if response.status_code == 503:
            return ServiceWarmingUp()
        if response.status_code == 429:
            return RateLimited()
        return UpstreamError(details=details)
