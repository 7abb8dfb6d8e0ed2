"""Azure OpenAI provider."""

from typing import Optional

from ..errors import ConfigError
from ..models import ChatRequest, ChatResponse, ProviderType
from .base import Provider

DEFAULT_API_VERSION = "2024-02-15-preview"


class AzureProvider(Provider):
    """
    Provider for Azure OpenAI Service.

    Azure addresses a deployment rather than a model: the deployment name is
    part of the URL and authentication uses the ``api-key`` header. The
    configured endpoint goes in ``base_url`` and the deployment in
    ``default_model``.
    """

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.AZURE

    @property
    def endpoint(self) -> str:
        return (self.config.base_url or "").rstrip("/")

    @property
    def api_version(self) -> str:
        return self.config.extra.get("api_version", DEFAULT_API_VERSION)

    def deployment_url(self, deployment: str) -> str:
        return (
            f"{self.endpoint}/openai/deployments/{deployment}/chat/completions"
            f"?api-version={self.api_version}"
        )

    async def chat_completion(self, request: ChatRequest) -> ChatResponse:
        deployment = request.model or self.config.default_model
        if not deployment:
            raise ConfigError("Azure deployment name is required")

        payload = request.to_openai_format()
        payload.pop("model", None)

        data = await self._post_json(
            self.deployment_url(deployment), payload, {"api-key": self.api_key}
        )
        return ChatResponse.from_openai(data, provider=self.provider_type.value)

    def default_model(self) -> Optional[str]:
        return self.config.default_model

    def validate_config(self) -> None:
        super().validate_config()
        if not self.endpoint:
            raise ConfigError("Azure endpoint is required")
        if not self.config.default_model:
            raise ConfigError("Azure deployment name is required")
