"""Core components of AI Artify.

Modules
-------
config
    Pydantic Settings configuration and the global ``config`` instance.
errors
    Exception hierarchy.
data_uri
    Data URI encoding, decoding and MIME sniffing.
models
    ``ImagePayload`` and ``GeneratedImage``.
gateway
    ``GenerationGateway``, the client for the inference API.
gallery_store
    ``GalleryStore`` and its storage backends.
session
    ``ArtifySession``, the controller a user interface drives.
"""
