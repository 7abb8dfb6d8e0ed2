"""Anthropic messages API provider."""

from typing import Any, Dict, Optional

from ..models import ChatRequest, ChatResponse, MessageRole, ProviderType
from .base import Provider

DEFAULT_ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(Provider):
    """
    Provider for Anthropic's messages API.

    The system prompt is a top-level field rather than a message, and
    ``max_tokens`` is mandatory.
    """

    BASE_URL = "https://api.anthropic.com/v1"
    DEFAULT_MODEL = "claude-3-5-sonnet-latest"
    DEFAULT_MAX_TOKENS = 1024

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.ANTHROPIC

    @property
    def base_url(self) -> str:
        return (self.config.base_url or self.BASE_URL).rstrip("/")

    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        system_parts = []
        messages = []
        for m in request.messages:
            if m.role == MessageRole.SYSTEM.value:
                system_parts.append(m.content)
            else:
                messages.append({"role": m.role, "content": m.content})

        data: Dict[str, Any] = {
            "model": request.model,
            "messages": messages,
            "max_tokens": request.max_tokens or self.DEFAULT_MAX_TOKENS,
        }
        if system_parts:
            data["system"] = "\n\n".join(system_parts)
        if request.temperature is not None:
            # Anthropic caps temperature at 1.0
            data["temperature"] = min(request.temperature, 1.0)
        data.update(request.extra)
        return data

    async def chat_completion(self, request: ChatRequest) -> ChatResponse:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.config.extra.get(
                "anthropic_version", DEFAULT_ANTHROPIC_VERSION
            ),
        }
        data = await self._post_json(
            f"{self.base_url}/messages", self.build_payload(request), headers
        )
        return ChatResponse.from_anthropic(data, provider=self.provider_type.value)

    def default_model(self) -> Optional[str]:
        return self.config.default_model or self.DEFAULT_MODEL
