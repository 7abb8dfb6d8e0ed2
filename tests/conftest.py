import json
import tempfile
from pathlib import Path

import httpx
import pytest
from git import Repo

pytest_plugins = ('pytest_asyncio',)

PROVIDER_ENV_VARS = [
    "OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL",
    "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_DEPLOYMENT",
    "AZURE_OPENAI_API_VERSION",
    "DEEPSEEK_API_KEY", "DEEPSEEK_BASE_URL", "DEEPSEEK_MODEL",
    "QWEN_API_KEY", "QWEN_BASE_URL", "QWEN_MODEL",
    "ANTHROPIC_API_KEY", "ANTHROPIC_BASE_URL", "ANTHROPIC_MODEL", "ANTHROPIC_VERSION",
    "LLM_MODEL", "LLM_PROVIDER", "LLM_TIMEOUT_SECONDS", "LLM_MAX_RETRIES",
    "GIT_COMMIT_AI_MODEL", "GIT_COMMIT_AI_SYSTEM_PROMPT", "GIT_COMMIT_AI_USER_PROMPT",
    "GIT_COMMIT_AI_EXCLUDE", "GIT_COMMIT_AI_MAX_TOKENS", "GIT_COMMIT_AI_TEMPERATURE",
    "GIT_COMMIT_AI_NO_VERIFY", "GIT_COMMIT_AI_ALWAYS_LOG", "GIT_COMMIT_AI_LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's provider settings out of the tests."""
    for var in PROVIDER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


def _init_repo(path) -> Repo:
    repo = Repo.init(path)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")
    return repo


@pytest.fixture
def temp_git_repo():
    """Create a temporary git repository with one commit."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        repo = _init_repo(tmp_dir)

        test_file = Path(tmp_dir) / "test.txt"
        test_file.write_text("Initial content\n")

        repo.index.add(["test.txt"])
        repo.index.commit("Initial commit")

        yield tmp_dir


@pytest.fixture
def empty_git_repo():
    """Create a temporary git repository without any commit."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        _init_repo(tmp_dir)
        yield tmp_dir


def openai_body(content="feat: add greeting", model="gpt-3.5-turbo"):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 12, "completion_tokens": 4, "total_tokens": 16},
    }


class RecordingTransport:
    """Callable for httpx.MockTransport that records every request."""

    def __init__(self, content="feat: add greeting", status_code=200, body=None):
        self.content = content
        self.status_code = status_code
        self.body = body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, json=openai_body(self.content))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def payload(self, index=-1):
        return json.loads(self.requests[index].content)


@pytest.fixture
def recorder():
    return RecordingTransport()


@pytest.fixture
def recorder_factory():
    return RecordingTransport
