"""Chat completion providers.

Each provider implements the same Provider contract; ``create_provider``
maps a ProviderType to its implementation.
"""

from typing import Dict, Optional, Type

import httpx

from ..config import ProviderConfig
from ..models import ProviderType
from .anthropic import AnthropicProvider
from .azure import AzureProvider
from .base import Provider
from .openai import DeepSeekProvider, OpenAIProvider, QwenProvider

PROVIDER_CLASSES: Dict[ProviderType, Type[Provider]] = {
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.AZURE: AzureProvider,
    ProviderType.DEEPSEEK: DeepSeekProvider,
    ProviderType.QWEN: QwenProvider,
    ProviderType.ANTHROPIC: AnthropicProvider,
}


def create_provider(
    provider_type: ProviderType,
    config: ProviderConfig,
    timeout: float = 60.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Provider:
    """Instantiate the provider implementation for ``provider_type``."""
    return PROVIDER_CLASSES[provider_type](config, timeout=timeout, transport=transport)


__all__ = [
    "Provider",
    "OpenAIProvider",
    "AzureProvider",
    "DeepSeekProvider",
    "QwenProvider",
    "AnthropicProvider",
    "PROVIDER_CLASSES",
    "create_provider",
]
