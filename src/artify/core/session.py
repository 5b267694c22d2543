"""Session controller tying the generation gateway to the gallery store.

An :class:`ArtifySession` is what a user interface drives: it trims the
prompt, allows a single generation in flight, records a successful result in
the gallery, and exposes the gallery actions (download, delete, clear).
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from artify.core.data_uri import decode_data_uri, extension_for
from artify.core.errors import GenerationError, GenerationInProgress, InvalidInput
from artify.core.gallery_store import GalleryStore
from artify.core.gateway import GenerationGateway
from artify.core.models import GeneratedImage

logger = logging.getLogger(__name__)

EXAMPLE_PROMPTS = [
    "A majestic dragon soaring over a mystical forest at sunset",
    "Cyberpunk cityscape with neon lights and flying cars",
    "Abstract geometric patterns in vibrant colors",
    "A serene mountain landscape with aurora borealis",
]


class ArtifySession:
    """One user's generation session.

    Args:
        gateway: Gateway used to generate images.
        store: Gallery the results are added to.
        confirm_delete: Optional callback asked before an image is deleted.
            Returning ``False`` cancels the deletion.
    """

    example_prompts = EXAMPLE_PROMPTS

    def __init__(
        self,
        gateway: GenerationGateway,
        store: GalleryStore,
        *,
        confirm_delete: Callable[[GeneratedImage], bool] | None = None,
    ):
        self.gateway = gateway
        self.store = store
        self.confirm_delete = confirm_delete
        self.is_generating = False
        self.last_error: str | None = None

    async def generate(self, prompt: str) -> GeneratedImage:
        """Generate an image for *prompt* and add it to the gallery.

        Args:
            prompt: User input; surrounding whitespace is trimmed.

        Returns:
            The new gallery record.

        Raises:
            GenerationInProgress: Another request is still outstanding.
            GenerationError: The gateway failed; the message is also kept in
                :attr:`last_error`.
        """
        if self.is_generating:
            raise GenerationInProgress("A generation request is already in progress")

        prompt = prompt.strip() if isinstance(prompt, str) else ""
        if not prompt:
            raise InvalidInput()

        self.is_generating = True
        self.last_error = None
        try:
            payload = await self.gateway.generate(prompt)
        except GenerationError as e:
            logger.error("Generation error: %s", e.message)
            self.last_error = e.message
            raise
        finally:
            self.is_generating = False

        image = GeneratedImage(
            id=uuid.uuid4().hex,
            image_data=payload.image,
            prompt=payload.prompt,
            created_at=datetime.now(timezone.utc),
        )
        self.store.add(image)
        return image

    def delete(self, image_id: str) -> bool:
        """Delete an image, asking :attr:`confirm_delete` first if set.

        Returns:
            ``True`` if the image was removed.
        """
        image = self.store.get(image_id)
        if image is not None and self.confirm_delete is not None:
            if not self.confirm_delete(image):
                logger.info("Deletion of %s cancelled", image_id)
                return False
        return self.store.remove(image_id)

    def clear(self) -> None:
        """Remove every image from the gallery."""
        self.store.clear()

    def download(self, image_id: str, directory: Path | str) -> Path:
        """Write an image to ``<directory>/ai-artify-<id>.<ext>``.

        Raises:
            KeyError: No image with *image_id* exists.
            ValueError: The stored image data is not a valid data URI.
        """
        image = self.store.get(image_id)
        if image is None:
            raise KeyError(image_id)

        mime_type, data = decode_data_uri(image.image_data)
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"ai-artify-{image.id}.{extension_for(mime_type)}"
        path.write_bytes(data)
        return path
