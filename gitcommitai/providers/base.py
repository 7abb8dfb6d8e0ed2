"""
Provider interface definition.

Defines the contract every chat completion backend implements, plus the
HTTP plumbing they share.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..config import ProviderConfig
from ..errors import (
    ConfigError,
    DecodeError,
    GatewayConnectionError,
    GatewayTimeoutError,
    ProviderError,
)
from ..models import ChatRequest, ChatResponse, ProviderType

logger = logging.getLogger(__name__)


class Provider(ABC):
    """
    Abstract base class for chat completion providers.

    A provider turns a normalized ChatRequest into one HTTP call against
    its backend and normalizes the answer back into a ChatResponse.
    """

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Provider settings
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self.config = config
        self.api_key = config.api_key
        self.timeout = timeout
        self._transport = transport

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        """Identifier of this provider."""
        pass

    @abstractmethod
    async def chat_completion(self, request: ChatRequest) -> ChatResponse:
        """
        Create a chat completion.

        Args:
            request: Chat completion request

        Returns:
            Chat completion response
        """
        pass

    @abstractmethod
    def default_model(self) -> Optional[str]:
        """Configured default model, falling back to the built-in one."""
        pass

    def supports_streaming(self) -> bool:
        return False

    def validate_config(self) -> None:
        """
        Check that the provider has what it needs to make requests.

        Raises:
            ConfigError: If a required setting is missing
        """
        if not self.api_key:
            raise ConfigError(f"{self.provider_type.value} API key is required")

    async def _post_json(
        self, url: str, payload: Dict[str, Any], headers: Dict[str, str]
    ) -> Any:
        """POST a JSON payload and return the decoded JSON body.

        Raises:
            GatewayTimeoutError: If the request times out
            GatewayConnectionError: On any other transport failure
            ProviderError: On a non-2xx status
            DecodeError: If the body is not valid JSON
        """
        name = self.provider_type.value
        logger.debug("POST %s (model=%s)", url, payload.get("model"))

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json", **headers},
                )
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(
                f"{name} request timed out after {self.timeout}s: {e}", provider=name
            ) from e
        except httpx.RequestError as e:
            raise GatewayConnectionError(
                f"Could not reach {name} at {url}: {e}", provider=name
            ) from e

        if not response.is_success:
            raise ProviderError(response.status_code, response.text, provider=name)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {name}: {e}", provider=name) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.provider_type.value!r})"
