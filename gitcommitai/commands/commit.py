"""Commands for creating and amending git commits."""

import os
import tempfile
from typing import List, Optional

from git import GitCommandError, Repo
from rich.console import Console

from ..errors import AmendError, CommitError
from .base import GitCommand, git_stderr


class CommitCommand(GitCommand):
    """Command for creating a git commit from whatever is staged.

    The message is handed to git through a temporary file (``git commit -F``)
    so multi-line text never goes through argument quoting. The file is
    removed whatever the outcome.

    Attributes:
        message (str): The commit message
        commit_hash (Optional[str]): The hash of the created commit
    """

    error_class = CommitError
    action = "create commit"

    def __init__(
        self,
        repo: Repo,
        message: str,
        console: Optional[Console] = None,
        no_verify: bool = False,
    ):
        """Initialize the commit command.

        Args:
            repo: The git repository to operate on
            message: The commit message
            console: Optional Rich console for output
            no_verify: Skip pre-commit hooks when creating commits
        """
        super().__init__(repo, console)
        self.message = message
        self.commit_hash: Optional[str] = None
        self.no_verify = no_verify

    def _commit_args(self, message_file: str) -> List[str]:
        args = ["-F", message_file]
        if self.no_verify:
            args.append("--no-verify")
        return args

    async def _notify(self) -> None:
        for observer in self.observers:
            await observer.on_commit_created(self.message, self.commit_hash)

    async def execute(self) -> None:
        """Create the commit.

        Raises:
            CommitError: If the message file cannot be written or git exits
                with a non-zero status
        """
        temp_file = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w", delete=False, suffix=".commitmsg", encoding="utf-8"
            ) as f:
                temp_file = f.name
                f.write(self.message)

            self.repo.git.commit(*self._commit_args(temp_file))
            self.commit_hash = self.repo.head.commit.hexsha
        except GitCommandError as e:
            stderr = git_stderr(e)
            raise self.error_class(
                f"Failed to {self.action}: {stderr or e}",
                stderr=stderr,
                commit_message=self.message,
            ) from e
        except OSError as e:
            raise self.error_class(
                f"Failed to {self.action}: could not write message file: {e}",
                commit_message=self.message,
            ) from e
        finally:
            if temp_file:
                try:
                    os.unlink(temp_file)
                except OSError:
                    pass

        await self._notify()


class AmendCommand(CommitCommand):
    """Command for rewriting HEAD with a new message.

    Anything staged at execution time is folded into the amended commit;
    authorship follows git's defaults for ``--amend``.
    """

    error_class = AmendError
    action = "amend commit"

    def _commit_args(self, message_file: str) -> List[str]:
        return ["--amend"] + super()._commit_args(message_file)

    async def _notify(self) -> None:
        for observer in self.observers:
            await observer.on_commit_amended(self.message, self.commit_hash)
