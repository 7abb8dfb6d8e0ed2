"""
Error types for git-commit-ai.

Every failure the tool can report derives from CommitAIError so the CLI
boundary can catch them in one place.
"""

from typing import Iterable, Optional


class CommitAIError(Exception):
    """Base exception for git-commit-ai errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(CommitAIError):
    """Raised when provider or gateway settings are missing or invalid."""
    pass


class NoCommitsError(CommitAIError):
    """Raised when an amend is requested but HEAD has no commit."""

    def __init__(self, message: str = "No commits found to amend"):
        super().__init__(message)


class NoChangesError(CommitAIError):
    """Raised when there is nothing to describe."""

    def __init__(
        self,
        message: str = "No staged changes found. Stage your changes with 'git add' first.",
    ):
        super().__init__(message)


class ProviderError(CommitAIError):
    """Raised when a provider answers with a non-2xx status."""

    def __init__(self, status: int, body: str, provider: Optional[str] = None):
        self.status = status
        self.body = body
        self.provider = provider
        label = f"{provider} API error" if provider else "Provider error"
        super().__init__(f"{label} {status}: {body}")


class DecodeError(CommitAIError):
    """Raised when a provider response cannot be decoded."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class GatewayTimeoutError(CommitAIError):
    """Raised when a provider request times out."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class GatewayConnectionError(CommitAIError):
    """Raised when a provider cannot be reached."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class UnconfiguredProviderError(CommitAIError):
    """Raised when the requested provider was never initialized."""

    def __init__(self, provider: str, available: Iterable[str]):
        self.provider = provider
        self.available = sorted(available)
        listing = ", ".join(self.available) or "none"
        super().__init__(
            f"Provider '{provider}' is not configured (available: {listing})"
        )


class EmptyResponseError(CommitAIError):
    """Raised when the provider returns no usable choice."""

    def __init__(self, message: str = "No response returned by the provider"):
        super().__init__(message)


class GitError(CommitAIError):
    """Raised when a git operation fails."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)


class CommitError(GitError):
    """Raised when creating a commit fails after a message was generated."""

    def __init__(self, message: str, stderr: str = "", commit_message: Optional[str] = None):
        self.commit_message = commit_message
        super().__init__(message, stderr)


class AmendError(CommitError):
    """Raised when amending HEAD fails after a message was generated."""
    pass
