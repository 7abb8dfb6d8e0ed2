"""Tests for the commit message generation workflow."""

from pathlib import Path

import httpx
import pytest
from git import Repo
from rich.console import Console

from gitcommitai.config import GatewayConfig, ProviderConfig
from gitcommitai.core import GitWorkflow
from gitcommitai.errors import (
    CommitError,
    EmptyResponseError,
    GatewayTimeoutError,
    NoChangesError,
    NoCommitsError,
)
from gitcommitai.gateway import Gateway
from gitcommitai.generator import CommitMessageGenerator, GenerationState
from gitcommitai.models import CommitMode, ProviderType


def make_gateway(transport, max_retries=0, **providers):
    providers = providers or {"openai": ProviderConfig(api_key="sk-test")}
    config = GatewayConfig(
        default_provider=ProviderType(next(iter(providers))),
        providers={ProviderType(name): cfg for name, cfg in providers.items()},
        max_retries=max_retries,
    )
    return Gateway(config, transport=transport)


def make_generator(repo_dir, transport, exclude=(), **kwargs):
    console = Console(record=True, width=120)
    workflow = GitWorkflow(repo_dir, exclude_patterns=exclude, console=console)
    generator = CommitMessageGenerator(
        workflow, make_gateway(transport, **kwargs), console=console
    )
    return generator, console


def stage(repo_dir, name, content):
    (Path(repo_dir) / name).write_text(content)
    Repo(repo_dir).git.add(name)


@pytest.mark.asyncio
async def test_dry_run_prints_message_without_committing(temp_git_repo, recorder):
    recorder.content = "feat: say hello"
    stage(temp_git_repo, "a.txt", "hello\n")
    generator, console = make_generator(temp_git_repo, recorder.transport())
    head_before = Repo(temp_git_repo).head.commit.hexsha

    result = await generator.run(CommitMode.NORMAL, dry_run=True)

    assert result.message == "feat: say hello"
    assert result.committed is False
    assert generator.state is GenerationState.DRY_RUN_DONE
    assert Repo(temp_git_repo).head.commit.hexsha == head_before

    output = console.export_text()
    assert "feat: say hello" in output
    assert "Dry run mode - no commit created" in output

    assert len(recorder.requests) == 1
    user_message = recorder.payload()["messages"][1]["content"]
    assert "+hello" in user_message
    assert "{{diff}}" not in user_message


@pytest.mark.asyncio
async def test_nothing_staged_fails_before_any_request(temp_git_repo, recorder):
    generator, _ = make_generator(temp_git_repo, recorder.transport())

    with pytest.raises(NoChangesError):
        await generator.run(CommitMode.NORMAL)

    assert recorder.requests == []
    assert generator.state is GenerationState.FAILED


@pytest.mark.asyncio
async def test_amend_without_commits(empty_git_repo, recorder):
    generator, _ = make_generator(empty_git_repo, recorder.transport())

    with pytest.raises(NoCommitsError):
        await generator.run(CommitMode.AMEND)

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_all_changes_excluded_fails_before_any_request(temp_git_repo, recorder):
    stage(temp_git_repo, "yarn.lock", "lock\n")
    generator, _ = make_generator(temp_git_repo, recorder.transport(), exclude=["*.lock"])

    with pytest.raises(NoChangesError):
        await generator.run(CommitMode.NORMAL)

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_commit_created(temp_git_repo, recorder):
    recorder.content = "  feat: add greeting\n\nExplain the change.\n"
    stage(temp_git_repo, "a.txt", "hello\n")
    generator, console = make_generator(temp_git_repo, recorder.transport())

    result = await generator.run(CommitMode.NORMAL)

    repo = Repo(temp_git_repo)
    assert result.committed is True
    assert result.commit_hash == repo.head.commit.hexsha
    assert repo.head.commit.message.strip() == "feat: add greeting\n\nExplain the change."
    assert generator.state is GenerationState.DONE
    assert "Commit created successfully" in console.export_text()


@pytest.mark.asyncio
async def test_add_all_stages_before_generating(temp_git_repo, recorder):
    (Path(temp_git_repo) / "untracked.py").write_text("x = 1\n")
    generator, _ = make_generator(temp_git_repo, recorder.transport())

    result = await generator.run(CommitMode.NORMAL, add_all=True)

    assert result.committed is True
    assert "untracked.py" in Repo(temp_git_repo).head.commit.stats.files


@pytest.mark.asyncio
async def test_amend_rewrites_last_message(temp_git_repo, recorder):
    recorder.content = "chore: add initial file"
    generator, console = make_generator(temp_git_repo, recorder.transport())

    result = await generator.run(CommitMode.AMEND)

    repo = Repo(temp_git_repo)
    assert len(list(repo.iter_commits())) == 1
    assert repo.head.commit.message.strip() == "chore: add initial file"
    assert result.commit_hash == repo.head.commit.hexsha
    assert "Commit amended successfully" in console.export_text()


@pytest.mark.asyncio
async def test_amend_dry_run(temp_git_repo, recorder):
    generator, console = make_generator(temp_git_repo, recorder.transport())
    head_before = Repo(temp_git_repo).head.commit.hexsha

    await generator.run(CommitMode.AMEND, dry_run=True)

    assert Repo(temp_git_repo).head.commit.hexsha == head_before
    assert "Dry run mode - no commit amended" in console.export_text()


@pytest.mark.asyncio
async def test_rules_context_and_options_reach_the_provider(temp_git_repo, recorder):
    stage(temp_git_repo, "a.txt", "hello\n")
    generator, _ = make_generator(temp_git_repo, recorder.transport())

    await generator.run(
        CommitMode.NORMAL,
        dry_run=True,
        model="gpt-4o",
        rules="Mention the ticket id",
        context="Fixes JIRA-42",
        max_tokens=100,
        temperature=0.2,
    )

    payload = recorder.payload()
    assert payload["model"] == "gpt-4o"
    assert payload["max_tokens"] == 100
    assert payload["temperature"] == 0.2
    assert payload["messages"][0]["content"].endswith("Additional rules:\nMention the ticket id")
    assert payload["messages"][1]["content"].endswith(
        "Additional context for these changes:\nFixes JIRA-42"
    )


@pytest.mark.asyncio
async def test_empty_response(temp_git_repo, recorder_factory):
    recorder = recorder_factory(body={"id": "x", "choices": []})
    stage(temp_git_repo, "a.txt", "hello\n")
    generator, _ = make_generator(temp_git_repo, recorder.transport())

    with pytest.raises(EmptyResponseError):
        await generator.run(CommitMode.NORMAL)


@pytest.mark.asyncio
async def test_blank_message(temp_git_repo, recorder):
    recorder.content = "   \n"
    stage(temp_git_repo, "a.txt", "hello\n")
    generator, _ = make_generator(temp_git_repo, recorder.transport())

    with pytest.raises(EmptyResponseError):
        await generator.run(CommitMode.NORMAL)


@pytest.mark.asyncio
async def test_timeouts_are_retried(temp_git_repo):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json={
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "fix: retry"}}]
        })

    stage(temp_git_repo, "a.txt", "hello\n")
    generator, _ = make_generator(
        temp_git_repo, httpx.MockTransport(handler), max_retries=2
    )

    result = await generator.run(CommitMode.NORMAL, dry_run=True)

    assert result.message == "fix: retry"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_timeout_without_retries(temp_git_repo):
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ReadTimeout("slow", request=request)

    stage(temp_git_repo, "a.txt", "hello\n")
    generator, _ = make_generator(temp_git_repo, httpx.MockTransport(handler))

    with pytest.raises(GatewayTimeoutError):
        await generator.run(CommitMode.NORMAL)
    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_failed_commit_still_shows_message(temp_git_repo, recorder):
    recorder.content = "feat: blocked by hook"
    stage(temp_git_repo, "a.txt", "hello\n")

    hook = Path(temp_git_repo) / ".git" / "hooks" / "pre-commit"
    hook.parent.mkdir(exist_ok=True)
    hook.write_text("#!/bin/sh\nexit 1\n")
    hook.chmod(0o755)

    generator, console = make_generator(temp_git_repo, recorder.transport())

    with pytest.raises(CommitError) as exc_info:
        await generator.run(CommitMode.NORMAL)

    assert exc_info.value.commit_message == "feat: blocked by hook"
    assert "feat: blocked by hook" in console.export_text()

    result = await generator.run(CommitMode.NORMAL, no_verify=True)
    assert result.committed is True
