"""Commit message generation workflow."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .core import GitWorkflow
from .errors import EmptyResponseError, GatewayTimeoutError, NoChangesError
from .gateway import Gateway
from .models import ChatResponse, CommitMode
from .prompts import DEFAULT_SYSTEM_PROMPT, DEFAULT_USER_PROMPT, build_messages

logger = logging.getLogger(__name__)


class GenerationState(str, Enum):
    IDLE = "idle"
    ACQUIRING_DIFF = "acquiring_diff"
    GENERATING = "generating"
    DRY_RUN_DONE = "dry_run_done"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class GenerationResult:
    message: str
    mode: CommitMode
    dry_run: bool
    committed: bool
    commit_hash: Optional[str] = None


class CommitMessageGenerator:
    """Turns the repository state into a commit message and, unless this is a
    dry run, a commit.

    Preconditions are checked before the provider is contacted, so a
    repository with nothing to describe never costs a request. The generated
    message is printed before git is asked to commit, which keeps it visible
    when the commit itself fails.
    """

    def __init__(
        self,
        workflow: GitWorkflow,
        gateway: Gateway,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        user_prompt: str = DEFAULT_USER_PROMPT,
        console: Optional[Console] = None,
        max_retries: Optional[int] = None,
    ):
        self.workflow = workflow
        self.gateway = gateway
        self.system_prompt = system_prompt
        self.user_prompt = user_prompt
        self.console = console or Console()
        self.max_retries = (
            gateway.config.max_retries if max_retries is None else max_retries
        )
        self.state = GenerationState.IDLE

    async def acquire_diff(self, mode: CommitMode, add_all: bool = False) -> str:
        """Stage if asked, check preconditions and return the diff text.

        Raises:
            NoChangesError: Nothing staged in NORMAL mode, or nothing left
                after exclusions
            NoCommitsError: AMEND requested on a repository without commits
        """
        if add_all:
            await self.workflow.stage_all()

        if mode == CommitMode.AMEND:
            self.workflow.require_amendable()
        elif not self.workflow.has_staged_changes():
            raise NoChangesError()

        return self.workflow.get_diff(mode)

    async def _chat(self, messages, **options) -> ChatResponse:
        attempt = 0
        while True:
            try:
                return await self.gateway.chat_with_options(messages, **options)
            except GatewayTimeoutError:
                if attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.warning(
                    "Request timed out, retrying (%d/%d)", attempt, self.max_retries
                )

    async def generate_message(
        self,
        diff: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        rules: Optional[str] = None,
        context: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Ask the provider for a message describing ``diff``.

        Raises:
            EmptyResponseError: If the provider returns no usable choice
        """
        messages = build_messages(
            self.system_prompt, self.user_prompt, diff, rules=rules, context=context
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=True,
        ) as progress:
            progress.add_task("Generating commit message...", total=None)
            response = await self._chat(
                messages,
                provider=provider,
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
            )

        content = response.content()
        if content is None:
            raise EmptyResponseError()

        message = content.strip()
        if not message:
            raise EmptyResponseError("The provider returned an empty commit message")

        usage = response.usage
        logger.debug(
            "Generated message with %s (tokens: prompt=%d completion=%d)",
            response.model or model, usage.prompt_tokens, usage.completion_tokens,
        )
        return message

    async def run(
        self,
        mode: CommitMode = CommitMode.NORMAL,
        dry_run: bool = False,
        add_all: bool = False,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        rules: Optional[str] = None,
        context: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        no_verify: bool = False,
    ) -> GenerationResult:
        """Run the whole workflow once.

        Returns:
            GenerationResult: The message and what was done with it
        """
        try:
            self.state = GenerationState.ACQUIRING_DIFF
            diff = await self.acquire_diff(mode, add_all=add_all)

            self.state = GenerationState.GENERATING
            message = await self.generate_message(
                diff,
                provider=provider,
                model=model,
                rules=rules,
                context=context,
                max_tokens=max_tokens,
                temperature=temperature,
            )

            self.console.print(message, markup=False, highlight=False)
            self.console.print()

            if dry_run:
                self.state = GenerationState.DRY_RUN_DONE
                if mode == CommitMode.AMEND:
                    self.console.print("[yellow]Dry run mode - no commit amended[/yellow]")
                else:
                    self.console.print("[yellow]Dry run mode - no commit created[/yellow]")
                return GenerationResult(message, mode, dry_run=True, committed=False)

            self.state = GenerationState.COMMITTING
            if mode == CommitMode.AMEND:
                commit_hash = await self.workflow.amend_commit(message, no_verify=no_verify)
                self.console.print("[green]Commit amended successfully[/green]")
            else:
                commit_hash = await self.workflow.commit(message, no_verify=no_verify)
                self.console.print("[green]Commit created successfully[/green]")

            self.state = GenerationState.DONE
            return GenerationResult(
                message, mode, dry_run=False, committed=True, commit_hash=commit_hash
            )
        except Exception:
            self.state = GenerationState.FAILED
            raise
