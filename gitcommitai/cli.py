#!/usr/bin/env python3
import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
import pyperclip
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import DEFAULT_CONFIG_FILENAME, Config, GatewayConfig, parse_model_spec
from .core import GitWorkflow
from .errors import CommitAIError
from .gateway import Gateway
from .generator import CommitMessageGenerator
from .models import CommitMode
from .observers import ConsoleLogObserver, FileLogObserver

console = Console()
error_console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
        force=True,
    )


def print_config(config: Config, config_path: Path) -> None:
    console.print("\n[bold]Current Configuration Settings:[/bold]")
    source = "config" if config_path.exists() else "default"
    if config_path.exists():
        console.print(f"[dim]Config file: {config_path.as_posix()}[/dim]")
    else:
        console.print("[dim]Using default values (no config file found)[/dim]")

    console.print(f"\n{'Setting':<20} {'Value':<30} {'Source':<10}")
    console.print("-" * 60)
    for name in ["model", "exclude", "max_tokens", "temperature", "no_verify", "always_log", "log_file"]:
        value = getattr(config, name)
        if isinstance(value, list):
            value = ", ".join(value) or "None"
        console.print(f"{name:<20} {str(value):<30} {source:<10}", markup=False)

    console.print(
        f"\nTo modify these settings, create or edit {DEFAULT_CONFIG_FILENAME} in your repository root"
    )


def show_config_dir(repo_path: Path, config_path: Path) -> None:
    if not config_path.exists():
        Config().save(repo_path)
        console.print("[yellow]Created new config file with default values[/yellow]")

    console.print(f"[green]Config file location:[/green] {config_path}")
    try:
        pyperclip.copy(str(config_path))
        console.print("[green]Path copied to clipboard![/green]")
    except pyperclip.PyperclipException as e:
        console.print(f"[yellow]Could not copy to clipboard: {e}[/yellow]")


@click.command()
@click.option(
    "--config-dir",
    is_flag=True,
    help="Display the config file location and copy it to clipboard",
)
@click.option(
    "--config-list", is_flag=True, help="Display current configuration settings"
)
@click.option(
    "-p",
    "--path",
    default=".",
    help="Path to git repository (defaults to current directory)",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "-d", "--dry-run", is_flag=True, help="Show the generated message without committing"
)
@click.option(
    "-A", "--amend", is_flag=True, help="Amend the last commit with a new message"
)
@click.option(
    "-a",
    "--add",
    "add_all",
    is_flag=True,
    help="Stage all untracked and modified files before generating the message",
)
@click.option(
    "-m",
    "--model",
    help="Provider (openai, azure, deepseek, qwen, anthropic) or provider/model, e.g. openai/gpt-4o",
)
@click.option("-r", "--rules", help="Additional rules for commit message generation")
@click.option("-c", "--context", help="Additional context for the changes")
@click.option(
    "--max-tokens",
    type=click.IntRange(min=1),
    help="Maximum number of tokens for the generated message (overrides config setting)",
)
@click.option(
    "--temperature",
    type=click.FloatRange(0.0, 2.0),
    help="Temperature for AI generation, 0.0 to 2.0 (overrides config setting)",
)
@click.option(
    "--no-verify",
    is_flag=True,
    help="Skip pre-commit hooks when creating commits",
)
@click.option(
    "-l",
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Optional file to log git operations (overrides config setting)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="git-commit-ai")
@click.pass_context
def main(
    ctx: click.Context,
    config_dir: bool,
    config_list: bool,
    path: Path,
    dry_run: bool,
    amend: bool,
    add_all: bool,
    model: Optional[str],
    rules: Optional[str],
    context: Optional[str],
    max_tokens: Optional[int],
    temperature: Optional[float],
    no_verify: bool,
    log_file: Optional[Path],
    verbose: bool,
):
    """
    Generate a git commit message from your changes with an AI provider.

    By default the staged changes are described and committed. Use --amend
    to rewrite the last commit's message instead, and --dry-run to only
    print the message.

    Provider credentials come from environment variables such as
    OPENAI_API_KEY, AZURE_OPENAI_API_KEY, DEEPSEEK_API_KEY, QWEN_API_KEY or
    ANTHROPIC_API_KEY. Other settings can be set in .gitcommitai.toml in the
    repository root; command line options override them.
    """
    setup_logging(verbose)
    repo_path = path.absolute()
    config_path = repo_path / DEFAULT_CONFIG_FILENAME

    try:
        if config_list:
            print_config(Config.load(repo_path), config_path)
            return

        if config_dir:
            show_config_dir(repo_path, config_path)
            return

        workflow = GitWorkflow(repo_path, console=console)
        config = Config.load(Path(workflow.repo.working_tree_dir))
        workflow.exclude_patterns = list(config.exclude)

        if no_verify:
            config.no_verify = True

        provider = None
        model_name = None
        model_spec = model or config.model
        if model_spec:
            provider, model_name = parse_model_spec(model_spec)

        gateway = Gateway(GatewayConfig.from_env())

        if verbose:
            workflow.add_observer(ConsoleLogObserver(console))
        log_file_path = log_file or config.get_log_file()
        if log_file_path:
            workflow.add_observer(FileLogObserver(str(log_file_path)))

        generator = CommitMessageGenerator(
            workflow,
            gateway,
            system_prompt=config.system_prompt,
            user_prompt=config.user_prompt,
            console=console,
        )

        asyncio.run(generator.run(
            mode=CommitMode.AMEND if amend else CommitMode.NORMAL,
            dry_run=dry_run,
            add_all=add_all,
            provider=provider,
            model=model_name,
            rules=rules,
            context=context,
            max_tokens=max_tokens or config.max_tokens,
            temperature=config.temperature if temperature is None else temperature,
            no_verify=config.no_verify,
        ))
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        ctx.exit(130)
    except CommitAIError as e:
        error_console.print(
            f"Error: {e}", style="red", markup=False, highlight=False, soft_wrap=True
        )
        ctx.exit(1)


if __name__ == "__main__":
    main()
