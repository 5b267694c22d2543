"""Data URI helpers.

Generated images travel and persist as self-contained ``data:`` URIs so a
gallery record needs no separate file reference.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def normalize_content_type(content_type: str | None) -> str:
    """Strip parameters (``; charset=...``) and lower-case a MIME type.

    Args:
        content_type: Raw ``Content-Type`` header value, possibly ``None``.

    Returns:
        The bare MIME type, or an empty string when none was given.
    """
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def sniff_mime_type(data: bytes) -> str:
    """Guess the MIME type of image bytes with Pillow.

    Returns:
        The detected image MIME type, or ``application/octet-stream``.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            mime = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        logger.debug("Could not identify image format of %d bytes", len(data))
        mime = None
    return mime or DEFAULT_MIME_TYPE


def encode_data_uri(data: bytes, content_type: str | None = None) -> str:
    """Wrap raw bytes into a base64 ``data:`` URI.

    If *content_type* is missing the type is sniffed from the bytes.

    Args:
        data: Raw binary payload.
        content_type: Declared MIME type, as sent by the upstream.

    Returns:
        String of the form ``data:<mime>;base64,<payload>``.
    """
    mime = normalize_content_type(content_type) or sniff_mime_type(data)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 ``data:`` URI into its MIME type and raw bytes.

    Raises:
        ValueError: If *uri* is not a base64 data URI.
    """
    if not uri.startswith("data:"):
        raise ValueError("Not a data URI")
    header, sep, payload = uri[5:].partition(",")
    if not sep:
        raise ValueError("Data URI has no payload separator")
    mime, _, encoding = header.rpartition(";")
    if encoding != "base64":
        raise ValueError("Only base64 data URIs are supported")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return mime or DEFAULT_MIME_TYPE, data


def extension_for(mime_type: str) -> str:
    """File extension used when saving an image of *mime_type* (default ``png``)."""
    return _EXTENSIONS.get(normalize_content_type(mime_type), "png")
