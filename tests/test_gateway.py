"""Tests for the provider gateway."""

import pytest

from gitcommitai.config import GatewayConfig, ProviderConfig
from gitcommitai.errors import ConfigError, UnconfiguredProviderError
from gitcommitai.gateway import Gateway
from gitcommitai.models import ChatMessage, ProviderType

MESSAGES = [ChatMessage.system("be brief"), ChatMessage.user("diff")]


def make_config(**providers):
    default = next(iter(providers))
    return GatewayConfig(
        default_provider=ProviderType(default),
        providers={ProviderType(name): cfg for name, cfg in providers.items()},
    )


def test_gateway_fails_fast_on_invalid_provider():
    config = make_config(
        openai=ProviderConfig(api_key="k"),
        deepseek=ProviderConfig(api_key=""),
    )
    with pytest.raises(ConfigError, match="deepseek API key is required"):
        Gateway(config)


def test_gateway_fails_fast_on_incomplete_azure():
    config = make_config(azure=ProviderConfig(api_key="k", base_url="https://x.openai.azure.com"))
    with pytest.raises(ConfigError, match="deployment"):
        Gateway(config)


def test_gateway_lists_providers():
    gateway = Gateway(make_config(
        qwen=ProviderConfig(api_key="q"),
        anthropic=ProviderConfig(api_key="a"),
    ))
    assert gateway.default_provider is ProviderType.QWEN
    assert gateway.available_providers() == [ProviderType.QWEN, ProviderType.ANTHROPIC]
    assert gateway.has_provider(ProviderType.ANTHROPIC)
    assert not gateway.has_provider(ProviderType.OPENAI)
    assert gateway.get_provider("anthropic").provider_type is ProviderType.ANTHROPIC


@pytest.mark.asyncio
async def test_unconfigured_provider(recorder):
    gateway = Gateway(make_config(openai=ProviderConfig(api_key="k")), transport=recorder.transport())

    with pytest.raises(UnconfiguredProviderError) as exc_info:
        await gateway.chat_with_options(MESSAGES, provider="deepseek")

    assert exc_info.value.available == ["openai"]
    assert "deepseek" in str(exc_info.value)
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_model_resolution_uses_builtin_default(recorder):
    gateway = Gateway(make_config(deepseek=ProviderConfig(api_key="k")), transport=recorder.transport())
    await gateway.chat_with_options(MESSAGES)
    assert recorder.payload()["model"] == "deepseek-chat"


@pytest.mark.asyncio
async def test_model_resolution_uses_configured_default(recorder):
    gateway = Gateway(
        make_config(openai=ProviderConfig(api_key="k", default_model="gpt-4o-mini")),
        transport=recorder.transport(),
    )
    await gateway.chat_with_options(MESSAGES)
    assert recorder.payload()["model"] == "gpt-4o-mini"


@pytest.mark.asyncio
async def test_overrides_reach_the_provider(recorder):
    gateway = Gateway(
        make_config(
            openai=ProviderConfig(api_key="o"),
            qwen=ProviderConfig(api_key="q"),
        ),
        transport=recorder.transport(),
    )

    response = await gateway.chat_with_options(
        MESSAGES,
        provider=ProviderType.QWEN,
        model="m",
        max_tokens=100,
        temperature=0.7,
    )

    assert response.content() == "feat: add greeting"
    assert recorder.requests[0].url.host == "dashscope.aliyuncs.com"
    assert recorder.requests[0].headers["Authorization"] == "Bearer q"
    payload = recorder.payload()
    assert (payload["model"], payload["temperature"], payload["max_tokens"]) == ("m", 0.7, 100)


@pytest.mark.asyncio
async def test_invalid_options_raise_config_error(recorder):
    gateway = Gateway(make_config(openai=ProviderConfig(api_key="k")), transport=recorder.transport())
    with pytest.raises(ConfigError):
        await gateway.chat_with_options(MESSAGES, temperature=3.0)
    assert recorder.requests == []
