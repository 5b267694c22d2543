"""Configuration management for AI Artify.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the ARTIFY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (ARTIFY_* prefix)
2. .env file in the project root
3. Default values defined in ArtifyConfig

The upstream credential is the one exception to the prefix rule: it is read
from ``ARTIFY_HUGGINGFACE_API_KEY`` or, failing that, from the conventional
``HUGGINGFACE_API_KEY`` variable.

Example .env file:
    HUGGINGFACE_API_KEY=hf_xxxxxxxxxxxxxxxxx
    ARTIFY_MODEL_ID=stabilityai/stable-diffusion-xl-base-1.0
    ARTIFY_NUM_INFERENCE_STEPS=20
    ARTIFY_SERVER_PORT=7860

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from artify.core.config import config

    print(config.model_id)
    print(config.generation_parameters)

Fixed Generation Parameters
---------------------------
Guidance scale, step count and output size are operator settings.  They are
sent with every request and are never taken from the caller of
``GenerationGateway.generate``.
"""

from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenerationParameters(BaseModel):
    """Inference parameters sent with every text-to-image request.

    Attributes:
        guidance_scale: Classifier-free guidance scale.
        num_inference_steps: Number of diffusion steps.
        width: Output width in pixels.
        height: Output height in pixels.
    """

    guidance_scale: float = 7.5
    num_inference_steps: int = 20
    width: int = 1024
    height: int = 1024


class ArtifyConfig(BaseSettings):
    """Main configuration for AI Artify.

    Attributes
    ----------
    Upstream Settings:
        huggingface_api_key : SecretStr | None
            Bearer token for the inference API.  Required for generation.
        api_base_url : str
            Base URL of the hosted inference API.
        model_id : str
            Hugging Face model ID appended to ``api_base_url``.
        request_timeout : float | None
            Seconds to wait for the upstream.  ``None`` disables the timeout.

    Generation Settings:
        guidance_scale, num_inference_steps, width, height
            Fixed parameters, see :class:`GenerationParameters`.

    Gallery Settings:
        data_dir : Path
            Directory holding the local gallery file.
        gallery_storage_key : str
            Storage key of the persisted gallery.

    Server Settings:
        server_host : str
            Bind address for uvicorn.
        server_port : int
            Port for uvicorn (1024-65535).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ARTIFY_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    huggingface_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ARTIFY_HUGGINGFACE_API_KEY", "HUGGINGFACE_API_KEY"),
        description="Hugging Face API token used as the bearer credential",
    )
    api_base_url: str = Field(
        default="https://api-inference.huggingface.co/models",
        description="Base URL of the hosted inference API",
    )
    model_id: str = Field(
        default="stabilityai/stable-diffusion-xl-base-1.0",
        description="HuggingFace model ID for text-to-image generation",
    )
    request_timeout: float | None = Field(
        default=120.0,
        description="Upstream request timeout in seconds (None disables it)",
    )

    guidance_scale: float = Field(default=7.5, ge=0.0, le=30.0)
    num_inference_steps: int = Field(default=20, ge=1, le=150)
    width: int = Field(default=1024, ge=256, le=2048)
    height: int = Field(default=1024, ge=256, le=2048)

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for the locally persisted gallery",
    )
    gallery_storage_key: str = Field(
        default="ai-artify-gallery",
        description="Storage key holding the gallery JSON array",
    )

    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory."""
        super().__init__(**kwargs)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def api_key(self) -> str | None:
        """Return the plain API key, or ``None`` when unset or blank."""
        if self.huggingface_api_key is None:
            return None
        value = self.huggingface_api_key.get_secret_value().strip()
        return value or None

    @property
    def endpoint(self) -> str:
        """Full URL of the model inference endpoint."""
        return f"{self.api_base_url.rstrip('/')}/{self.model_id}"

    @property
    def generation_parameters(self) -> GenerationParameters:
        """Fixed parameter set sent with every generation request."""
        return GenerationParameters(
            guidance_scale=self.guidance_scale,
            num_inference_steps=self.num_inference_steps,
            width=self.width,
            height=self.height,
        )


# Global configuration instance
# Loads values from environment variables (ARTIFY_* prefix) and .env file.
config = ArtifyConfig()
