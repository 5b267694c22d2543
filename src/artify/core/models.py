"""Core data models shared by the gateway, the gallery store and the session.

Both models are frozen: a generated image never changes after creation, so
records can be passed around by reference without copying.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class ImagePayload(BaseModel):
    """Successful result of a generation request.

    Attributes:
        image: Data URI holding the generated image.
        prompt: The prompt exactly as submitted.
        content_type: MIME type declared for the image.
    """

    model_config = ConfigDict(frozen=True)

    image: str
    prompt: str
    content_type: str


class GeneratedImage(BaseModel):
    """A gallery record.

    Serialised with camelCase keys (``imageData``, ``createdAt``) so the
    persisted layout matches what the browser page keeps in ``localStorage``.

    Attributes:
        id: Opaque identifier, unique within the gallery.
        image_data: Data URI of the image.
        prompt: The prompt that produced the image.
        created_at: Time of successful generation.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    image_data: str = Field(alias="imageData")
    prompt: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
    )

    def to_record(self) -> dict:
        """Return the JSON-ready persisted form of this image."""
        return self.model_dump(mode="json", by_alias=True)
