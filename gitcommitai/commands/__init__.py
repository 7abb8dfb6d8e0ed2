"""Git operation commands using the Command Pattern.

This package implements the Command Pattern for git operations, allowing for:
1. Encapsulation of git operations as objects
2. Command history tracking
3. Integration with the Observer Pattern for notifications

Example:
    ```python
    from gitcommitai.commands import CommitCommand
    from gitcommitai.observers import FileLogObserver

    commit_cmd = CommitCommand(repo, "feat(cli): add --amend flag")
    commit_cmd.add_observer(FileLogObserver("git.log"))
    await commit_cmd.execute()
    ```
"""

from .base import GitCommand, git_stderr
from .commit import AmendCommand, CommitCommand
from .stage import StageAllCommand

__all__ = [
    "GitCommand",
    "CommitCommand",
    "AmendCommand",
    "StageAllCommand",
    "git_stderr",
]
