"""Core git functionality for git-commit-ai."""
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from rich.console import Console

from .commands import AmendCommand, CommitCommand, GitCommand, StageAllCommand, git_stderr
from .errors import GitError, NoChangesError, NoCommitsError
from .models import CommitMode
from .observers import GitOperationObserver
from .patterns import filter_excluded_files

logger = logging.getLogger(__name__)

# Hash of git's empty tree, used as the "before" side when there is no parent
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

STAGED_CHANGES_MARKER = "\n\n--- STAGED CHANGES ---\n\n"


def _pathspecs(files: Iterable[str]) -> List[str]:
    return [f":(literal){path}" for path in files]


class GitCommitter:
    """Handles git mutations using the Command Pattern."""

    def __init__(self, repo: Repo, console: Optional[Console] = None):
        self.repo = repo
        self.console = console or Console()
        self.observers: List[GitOperationObserver] = []
        self.command_history: List[GitCommand] = []

    def add_observer(self, observer: GitOperationObserver) -> None:
        """Add an observer to be notified of git operations."""
        self.observers.append(observer)

    def remove_observer(self, observer: GitOperationObserver) -> None:
        """Remove an observer from the notification list."""
        self.observers.remove(observer)

    async def execute_command(self, command: GitCommand) -> None:
        """Execute a git command and store it in history if successful."""
        for observer in self.observers:
            command.add_observer(observer)

        await command.execute()
        self.command_history.append(command)

    async def stage_all(self) -> None:
        await self.execute_command(StageAllCommand(self.repo, self.console))

    async def commit(self, message: str, no_verify: bool = False) -> str:
        """Create a commit from the index and return its hash."""
        command = CommitCommand(self.repo, message, self.console, no_verify=no_verify)
        await self.execute_command(command)
        return command.commit_hash

    async def amend(self, message: str, no_verify: bool = False) -> str:
        """Amend HEAD with a new message and return the new hash."""
        command = AmendCommand(self.repo, message, self.console, no_verify=no_verify)
        await self.execute_command(command)
        return command.commit_hash


class GitWorkflow:
    """Repository inspection, diff extraction and commit creation.

    A workflow wraps one repository for one invocation. Exclude patterns are
    applied per file: a file's diff is either sent whole or not at all.
    """

    def __init__(
        self,
        repo_path: Union[str, Path],
        exclude_patterns: Sequence[str] = (),
        console: Optional[Console] = None,
    ):
        try:
            self.repo = Repo(repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitError(
                f"Failed to open git repository at '{repo_path}'. "
                "Make sure you're in a git repository."
            ) from e

        self.exclude_patterns = list(exclude_patterns)
        self.committer = GitCommitter(self.repo, console)

    def add_observer(self, observer: GitOperationObserver) -> None:
        self.committer.add_observer(observer)

    def _git(self, command: str, *args: str, **kwargs):
        """Run a git subcommand, wrapping failures in GitError."""
        try:
            return getattr(self.repo.git, command)(*args, **kwargs)
        except GitCommandError as e:
            stderr = git_stderr(e)
            raise GitError(f"git {command} failed: {stderr or e}", stderr=stderr) from e

    def _diff(self, *args: str) -> str:
        """Diff text with undecodable bytes replaced, so it is always valid UTF-8."""
        output = self._git("diff", *args, stdout_as_string=False)
        return output.decode("utf-8", errors="replace")

    def _name_list(self, *args: str) -> List[str]:
        output = self._git("diff", "--name-only", "-z", "--no-renames", *args)
        return [name for name in output.split("\0") if name]

    def head_exists(self) -> bool:
        """Whether HEAD resolves to a commit."""
        return self.repo.head.is_valid()

    def _head_or_empty_tree(self) -> str:
        return "HEAD" if self.head_exists() else EMPTY_TREE_SHA

    def require_amendable(self) -> None:
        """
        Raises:
            NoCommitsError: If there is no commit to amend
        """
        if not self.head_exists():
            raise NoCommitsError("No commits found to amend message for")

    def staged_files(self) -> List[str]:
        """Paths whose index state differs from HEAD, in git's order."""
        return self._name_list("--cached", self._head_or_empty_tree())

    def has_staged_changes(self) -> bool:
        return bool(self.staged_files())

    def _last_commit_range(self) -> Tuple[str, str]:
        self.require_amendable()
        commit = self.repo.head.commit
        parent = commit.parents[0].hexsha if commit.parents else EMPTY_TREE_SHA
        return parent, commit.hexsha

    def last_commit_files(self) -> List[str]:
        """Paths touched by the last commit."""
        return self._name_list(*self._last_commit_range())

    def filter_files(self, files: Sequence[str]) -> List[str]:
        included = filter_excluded_files(files, self.exclude_patterns)
        if len(included) != len(files):
            logger.debug("Excluded %d file(s) from the diff", len(files) - len(included))
        return included

    def _staged_diff(self, files: Sequence[str]) -> str:
        if not files:
            return ""
        return self._diff(
            "--cached", "--no-color", "--no-renames",
            self._head_or_empty_tree(), "--", *_pathspecs(files),
        )

    def get_diff(self, mode: CommitMode = CommitMode.NORMAL) -> str:
        """Build the diff text sent to the provider.

        NORMAL describes the index against HEAD. AMEND describes the last
        commit against its parent, followed by any staged changes after a
        marker line.

        Raises:
            NoChangesError: If nothing is left to describe after filtering
            NoCommitsError: If AMEND is requested without a commit
        """
        if mode == CommitMode.AMEND:
            return self._amend_diff()

        files = self.filter_files(self.staged_files())
        if not files:
            raise NoChangesError("No changes to commit after applying exclude patterns")

        diff = self._staged_diff(files)
        if not diff.strip():
            raise NoChangesError("No changes to commit")
        return diff

    def _amend_diff(self) -> str:
        parent, head = self._last_commit_range()

        files = self.filter_files(self.last_commit_files())
        if not files:
            raise NoChangesError(
                "No changes in the last commit after applying exclude patterns"
            )

        last_commit_diff = self._diff(
            "--no-color", "--no-renames",
            parent, head, "--", *_pathspecs(files),
        )

        # Files touched in both places intentionally show up twice
        staged_diff = self._staged_diff(self.filter_files(self.staged_files()))
        if staged_diff.strip():
            return f"{last_commit_diff}{STAGED_CHANGES_MARKER}{staged_diff}"
        return last_commit_diff

    async def stage_all(self) -> None:
        """Stage every new, modified, deleted and renamed path."""
        await self.committer.stage_all()

    async def commit(self, message: str, no_verify: bool = False) -> str:
        """
        Raises:
            CommitError: If git refuses the commit
        """
        return await self.committer.commit(message, no_verify=no_verify)

    async def amend_commit(self, message: str, no_verify: bool = False) -> str:
        """
        Raises:
            AmendError: If git refuses the amend
        """
        return await self.committer.amend(message, no_verify=no_verify)
