"""Gateway dispatching chat requests to the configured providers."""
import logging
from typing import Dict, List, Optional, Sequence, Union

import httpx
from pydantic import ValidationError

from .config import GatewayConfig
from .errors import ConfigError, UnconfiguredProviderError
from .models import ChatMessage, ChatRequest, ChatResponse, ProviderType
from .providers import Provider, create_provider

logger = logging.getLogger(__name__)

OPENAI_FALLBACK_MODEL = "gpt-3.5-turbo"


class Gateway:
    """Owns one live provider per configured backend.

    Every provider is created and validated when the gateway is built; a
    single invalid provider aborts construction.
    """

    def __init__(
        self,
        config: GatewayConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        providers: Dict[ProviderType, Provider] = {}
        for provider_type, provider_config in config.providers.items():
            provider = create_provider(
                provider_type,
                provider_config,
                timeout=config.timeout_seconds,
                transport=transport,
            )
            provider.validate_config()
            providers[provider_type] = provider
            logger.debug("Initialized provider %s", provider_type.value)
        self._providers = providers

    @property
    def default_provider(self) -> ProviderType:
        return self.config.default_provider

    def available_providers(self) -> List[ProviderType]:
        return list(self._providers)

    def has_provider(self, provider_type: ProviderType) -> bool:
        return provider_type in self._providers

    def get_provider(self, provider_type: Union[ProviderType, str]) -> Provider:
        """Look up a live provider.

        Raises:
            UnconfiguredProviderError: If the provider was never initialized
        """
        key = provider_type.value if isinstance(provider_type, ProviderType) else str(provider_type)
        for candidate, provider in self._providers.items():
            if candidate.value == key:
                return provider
        raise UnconfiguredProviderError(key, [p.value for p in self._providers])

    async def chat_with_options(
        self,
        messages: Sequence[ChatMessage],
        provider: Optional[Union[ProviderType, str]] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> ChatResponse:
        """Send a chat completion to the selected provider.

        Args:
            messages: Messages to send
            provider: Provider override; defaults to the configured default
            model: Model override; defaults to the provider's default model
            max_tokens: Optional completion token limit
            temperature: Optional sampling temperature

        Returns:
            The provider's normalized response
        """
        target = self.get_provider(provider or self.config.default_provider)
        model_name = model or target.default_model() or OPENAI_FALLBACK_MODEL

        try:
            request = ChatRequest(
                messages=list(messages),
                model=model_name,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid request options: {e}") from e
        logger.debug("Dispatching to %s with model %s", target.provider_type.value, model_name)
        return await target.chat_completion(request)
