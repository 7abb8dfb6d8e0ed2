"""
OpenAI-compatible providers.

OpenAI, DeepSeek and Qwen (DashScope compatible mode) share the same wire
format and bearer authentication; they only differ in endpoint and default
model.
"""

from typing import Optional

from ..models import ChatRequest, ChatResponse, ProviderType
from .base import Provider


class OpenAIProvider(Provider):
    """Provider for the OpenAI chat completions API."""

    BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-3.5-turbo"

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.OPENAI

    @property
    def base_url(self) -> str:
        return (self.config.base_url or self.BASE_URL).rstrip("/")

    async def chat_completion(self, request: ChatRequest) -> ChatResponse:
        data = await self._post_json(
            f"{self.base_url}/chat/completions",
            request.to_openai_format(),
            {"Authorization": f"Bearer {self.api_key}"},
        )
        return ChatResponse.from_openai(data, provider=self.provider_type.value)

    def default_model(self) -> Optional[str]:
        return self.config.default_model or self.DEFAULT_MODEL


class DeepSeekProvider(OpenAIProvider):
    """Provider for the DeepSeek API."""

    BASE_URL = "https://api.deepseek.com/v1"
    DEFAULT_MODEL = "deepseek-chat"

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.DEEPSEEK


class QwenProvider(OpenAIProvider):
    """Provider for Alibaba Qwen through DashScope's compatible mode."""

    BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    DEFAULT_MODEL = "qwen-max"

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.QWEN
