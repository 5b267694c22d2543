"""AI Artify - text-to-image generation with a local gallery."""

__version__ = "0.1.0"

from artify.core.config import ArtifyConfig, config
from artify.core.gallery_store import GalleryStore
from artify.core.gateway import GenerationGateway
from artify.core.models import GeneratedImage, ImagePayload
from artify.core.session import ArtifySession

__all__ = [
    "ArtifyConfig",
    "ArtifySession",
    "GalleryStore",
    "GeneratedImage",
    "GenerationGateway",
    "ImagePayload",
    "config",
]
