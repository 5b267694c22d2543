"""Tests for artify.core.gateway — the generation gateway.

All upstream traffic goes to ``FakeUpstream`` through ``httpx.MockTransport``,
so every test can assert exactly how many requests were sent.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from artify.core.data_uri import decode_data_uri
from artify.core.errors import (
    AuthenticationFailed,
    InternalFailure,
    InvalidInput,
    MisconfiguredService,
    RateLimited,
    ServiceWarmingUp,
    UpstreamError,
)
from artify.core.gateway import GenerationGateway, extract_error_details


def run(coro):
    return asyncio.run(coro)


class TestInputValidation:
    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t "])
    def test_blank_prompt_rejected_without_network(self, gateway, upstream, prompt):
        with pytest.raises(InvalidInput):
            run(gateway.generate(prompt))
        assert upstream.requests == []

    def test_non_string_prompt_rejected(self, gateway, upstream):
        with pytest.raises(InvalidInput):
            run(gateway.generate(42))
        assert upstream.requests == []

    def test_missing_key_checked_before_network(self, unconfigured_config, upstream):
        gateway = GenerationGateway(unconfigured_config, client=upstream.client())
        with pytest.raises(MisconfiguredService) as exc_info:
            run(gateway.generate("a red circle"))
        assert "HUGGINGFACE_API_KEY" in exc_info.value.message
        assert upstream.requests == []


class TestOutboundRequest:
    def test_single_request_with_prompt_and_fixed_parameters(self, gateway, upstream, test_config):
        run(gateway.generate("a red circle"))

        assert len(upstream.requests) == 1
        request = upstream.requests[0]
        assert request.method == "POST"
        assert str(request.url) == test_config.endpoint
        assert request.headers["authorization"] == "Bearer hf_test_key"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {
            "inputs": "a red circle",
            "parameters": {
                "guidance_scale": 7.5,
                "num_inference_steps": 20,
                "width": 1024,
                "height": 1024,
            },
        }

    def test_prompt_sent_verbatim(self, gateway, upstream):
        """The gateway does not trim or rewrite a valid prompt."""
        run(gateway.generate("  spaced prompt "))
        assert json.loads(upstream.requests[0].content)["inputs"] == "  spaced prompt "


class TestSuccess:
    def test_returns_decodable_data_uri(self, gateway, png_bytes):
        payload = run(gateway.generate("a red circle"))

        assert payload.prompt == "a red circle"
        assert payload.content_type == "image/png"
        mime, data = decode_data_uri(payload.image)
        assert mime == "image/png"
        assert data == png_bytes

    def test_declared_content_type_is_used(self, gateway, upstream):
        upstream.reply(200, b"\xff\xd8\xff fake jpeg", {"content-type": "image/jpeg"})
        payload = run(gateway.generate("a cat"))
        assert payload.image.startswith("data:image/jpeg;base64,")
        assert decode_data_uri(payload.image)[1] == b"\xff\xd8\xff fake jpeg"

    def test_missing_content_type_is_sniffed(self, gateway, upstream, png_bytes):
        upstream.reply(200, png_bytes, {})
        payload = run(gateway.generate("a cat"))
        assert payload.content_type == "image/png"


class TestFailureClassification:
    def test_401_authentication_failed_with_message(self, gateway, upstream):
        upstream.reply(401, json.dumps({"message": "Invalid token"}))
        with pytest.raises(AuthenticationFailed) as exc_info:
            run(gateway.generate("a cat"))
        assert exc_info.value.status_code == 401
        assert exc_info.value.details == "Invalid token"

    def test_401_with_plain_text_body(self, gateway, upstream):
        upstream.reply(401, "Unauthorized")
        with pytest.raises(AuthenticationFailed) as exc_info:
            run(gateway.generate("a cat"))
        assert exc_info.value.details == "Unauthorized"

    def test_503_service_warming_up(self, gateway, upstream):
        upstream.reply(503, json.dumps({"error": "Model is currently loading", "estimated_time": 20}))
        with pytest.raises(ServiceWarmingUp) as exc_info:
            run(gateway.generate("a cat"))
        assert exc_info.value.message == "Model is loading. Please try again in a few moments."

    def test_429_rate_limited(self, gateway, upstream):
        upstream.reply(429, "Too many requests")
        with pytest.raises(RateLimited):
            run(gateway.generate("a cat"))

    @pytest.mark.parametrize("status", [400, 403, 404, 422, 500, 502])
    def test_other_errors_are_upstream_errors(self, gateway, upstream, status):
        upstream.reply(status, json.dumps({"error": "boom"}))
        with pytest.raises(UpstreamError) as exc_info:
            run(gateway.generate("a cat"))
        assert exc_info.value.details == "boom"
        assert len(upstream.requests) == 1

    def test_no_automatic_retry(self, gateway, upstream):
        upstream.reply(503, "loading")
        with pytest.raises(ServiceWarmingUp):
            run(gateway.generate("a cat"))
        assert len(upstream.requests) == 1

    def test_transport_fault_is_internal_failure(self, gateway, upstream):
        upstream.error = httpx.ConnectError("connection refused")
        with pytest.raises(InternalFailure) as exc_info:
            run(gateway.generate("a cat"))
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert exc_info.value.status_code == 500


class TestExtractErrorDetails:
    def test_message_field_preferred(self):
        assert extract_error_details('{"message": "m", "error": "e"}') == "m"

    def test_error_field(self):
        assert extract_error_details('{"error": "e"}') == "e"

    def test_non_string_error_is_serialised(self):
        assert extract_error_details('{"error": ["a", "b"]}') == '["a", "b"]'

    def test_plain_text(self):
        assert extract_error_details("Service Unavailable") == "Service Unavailable"

    def test_json_without_known_fields(self):
        assert extract_error_details('{"foo": 1}') == '{"foo": 1}'
