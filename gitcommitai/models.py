"""Shared models for git-commit-ai."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError, DecodeError


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class CommitMode(str, Enum):
    NORMAL = "normal"
    AMEND = "amend"


class ProviderType(str, Enum):
    """Supported chat completion backends."""
    OPENAI = "openai"
    AZURE = "azure"
    DEEPSEEK = "deepseek"
    QWEN = "qwen"
    ANTHROPIC = "anthropic"

    @classmethod
    def parse(cls, value: str) -> "ProviderType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ", ".join(p.value for p in cls)
            raise ConfigError(f"Unknown provider '{value}' (expected one of: {known})")


class ChatMessage(BaseModel):
    """A single chat message."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.ASSISTANT, content=content)


class ChatRequest(BaseModel):
    """Normalized chat completion request.

    Providers translate this into their own wire format. ``extra`` carries
    provider-specific fields that are merged into the payload as-is.
    """

    model_config = ConfigDict(frozen=True)

    messages: List[ChatMessage] = Field(..., description="Conversation messages")
    model: str = Field(..., description="Model identifier")
    max_tokens: Optional[int] = Field(default=None, ge=1)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    extra: Dict[str, Any] = Field(default_factory=dict)

    def to_openai_format(self) -> Dict[str, Any]:
        """Convert to the OpenAI chat completions body."""
        data: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": m.role, "content": m.content} for m in self.messages
            ],
        }
        if self.temperature is not None:
            data["temperature"] = self.temperature
        if self.max_tokens is not None:
            data["max_tokens"] = self.max_tokens
        data.update(self.extra)
        return data


class Usage(BaseModel):
    """Token usage information."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Choice(BaseModel):
    """A single completion choice."""
    index: int = 0
    message: ChatMessage
    finish_reason: Optional[str] = None


class ChatResponse(BaseModel):
    """Normalized chat completion response."""

    id: str = ""
    object: str = "chat.completion"
    created: int = Field(default_factory=lambda: int(datetime.now().timestamp()))
    model: str = ""
    choices: List[Choice] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    def content(self) -> Optional[str]:
        """Content of the first choice, if any."""
        if not self.choices:
            return None
        return self.choices[0].message.content

    @classmethod
    def from_openai(cls, data: Any, provider: Optional[str] = None) -> "ChatResponse":
        """Create from an OpenAI-shaped response body."""
        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected response body: {data!r}", provider=provider)

        try:
            choices = []
            for c in data.get("choices") or []:
                message = c.get("message") or {}
                choices.append(Choice(
                    index=c.get("index", 0),
                    message=ChatMessage(
                        role=message.get("role", "assistant"),
                        content=message.get("content") or "",
                    ),
                    finish_reason=c.get("finish_reason"),
                ))

            return cls(
                id=data.get("id") or "",
                object=data.get("object") or "chat.completion",
                created=data.get("created") or int(datetime.now().timestamp()),
                model=data.get("model") or "",
                choices=choices,
                usage=Usage(**(data.get("usage") or {})),
            )
        except (AttributeError, TypeError, ValidationError) as e:
            raise DecodeError(f"Malformed response: {e}", provider=provider) from e

    @classmethod
    def from_anthropic(cls, data: Any, provider: Optional[str] = None) -> "ChatResponse":
        """Create from an Anthropic messages response body."""
        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected response body: {data!r}", provider=provider)

        try:
            blocks = data.get("content") or []
            text = "".join(
                block.get("text", "") for block in blocks if block.get("type", "text") == "text"
            )
            choices = []
            if blocks:
                choices.append(Choice(
                    index=0,
                    message=ChatMessage.assistant(text),
                    finish_reason=data.get("stop_reason"),
                ))

            usage_data = data.get("usage") or {}
            prompt_tokens = usage_data.get("input_tokens", 0)
            completion_tokens = usage_data.get("output_tokens", 0)

            return cls(
                id=data.get("id") or "",
                model=data.get("model") or "",
                choices=choices,
                usage=Usage(
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens,
                    total_tokens=prompt_tokens + completion_tokens,
                ),
            )
        except (AttributeError, TypeError, ValidationError) as e:
            raise DecodeError(f"Malformed response: {e}", provider=provider) from e
