"""Command for staging every working tree change."""

from git import GitCommandError

from ..errors import GitError
from .base import GitCommand, git_stderr


class StageAllCommand(GitCommand):
    """Stage new, modified, deleted and renamed paths (``git add --all``)."""

    async def execute(self) -> None:
        try:
            self.repo.git.add("--all")
        except GitCommandError as e:
            stderr = git_stderr(e)
            raise GitError(f"Failed to add files: {stderr or e}", stderr=stderr) from e

        for observer in self.observers:
            await observer.on_changes_staged()
