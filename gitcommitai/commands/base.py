"""Base command class for git operations.

This module provides the abstract base class for all git commands,
implementing the Command Pattern with observer support.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from git import GitCommandError, Repo
from rich.console import Console

from ..observers import GitOperationObserver


def git_stderr(error: GitCommandError) -> str:
    """Plain stderr text of a failed git call, without GitPython's framing."""
    stderr = (error.stderr or "").strip()
    if stderr.startswith("stderr: '") and stderr.endswith("'"):
        stderr = stderr[len("stderr: '"):-1].strip()
    return stderr


class GitCommand(ABC):
    """Abstract base class for git commands.

    Concrete commands implement execute(), which raises a GitError subclass
    on failure and notifies the attached observers on success.

    Attributes:
        repo (Repo): The git repository to operate on
        console (Console): Rich console for output
        observers (List[GitOperationObserver]): List of observers to notify
    """

    def __init__(self, repo: Repo, console: Optional[Console] = None):
        """Initialize the command.

        Args:
            repo: The git repository to operate on
            console: Optional Rich console for output
        """
        self.repo = repo
        self.console = console or Console()
        self.observers: List[GitOperationObserver] = []

    def add_observer(self, observer: GitOperationObserver) -> None:
        """Add an observer to be notified of command execution.

        Args:
            observer: The observer to add
        """
        self.observers.append(observer)

    def remove_observer(self, observer: GitOperationObserver) -> None:
        """Remove an observer from the notification list.

        Args:
            observer: The observer to remove
        """
        self.observers.remove(observer)

    @abstractmethod
    async def execute(self) -> None:
        """Execute the git command.

        Raises:
            GitError: If git reports a failure
        """
        pass
