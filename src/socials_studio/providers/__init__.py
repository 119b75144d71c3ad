"""AI Providers - text, image and vision clients with a shared contract."""

from .base import (
    GenerationKind,
    GenerationRequest,
    ImageOperation,
    ProviderClient,
    ProviderResult,
)
from .config import ProviderConfig, load_provider_config
from .errors import ConfigurationError, ProviderError, UnsupportedOperationError
from .image import G4FImageProvider, ReveImageProvider
from .registry import build_image_chain, build_text_chain, build_vision_chain
from .text import ChatCompletionsProvider, GeminiTextProvider
from .vision import GeminiVisionProvider

__all__ = [
    "GenerationKind",
    "GenerationRequest",
    "ImageOperation",
    "ProviderClient",
    "ProviderResult",
    "ProviderConfig",
    "load_provider_config",
    "ProviderError",
    "ConfigurationError",
    "UnsupportedOperationError",
    "ChatCompletionsProvider",
    "GeminiTextProvider",
    "G4FImageProvider",
    "ReveImageProvider",
    "GeminiVisionProvider",
    "build_text_chain",
    "build_image_chain",
    "build_vision_chain",
]
