"""CLI entry point for cadr."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from cadr import __version__
from cadr.config import DEFAULT_CONFIG_PATH, AnalysisConfig, write_config
from cadr.confirm import should_prompt
from cadr.orchestrator import AnalysisWorkflow
from cadr.output import DEFAULT_ADR_DIR, ADRStore
from cadr.vcs import AllUncommitted, BranchDiff, ChangeSetMode, Staged
from cadr.vcs.models import DEFAULT_BASE_REF, DEFAULT_HEAD_REF

app = typer.Typer(
    name="cadr",
    help="Continuous Architectural Decision Records: detect significant changes and draft ADRs.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# provider -> (default model, default API key env var, where to get a key)
_PROVIDER_DEFAULTS: dict[str, tuple[str, str, str]] = {
    "openai": ("gpt-4", "OPENAI_API_KEY", "https://platform.openai.com/api-keys"),
    "gemini": ("gemini-2.0-flash", "GEMINI_API_KEY", "https://aistudio.google.com/app/apikey"),
    "anthropic": (
        "claude-haiku-4-5-20251001",
        "ANTHROPIC_API_KEY",
        "https://console.anthropic.com/settings/keys",
    ),
}
_DEFAULT_IGNORE_PATTERNS = ["*.md", "package-lock.json"]


def _configure_logging(verbose: bool) -> None:
    """Send cadr logs to stderr with --verbose; stay silent otherwise."""
    cadr_logger = logging.getLogger("cadr")
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )
        cadr_logger.setLevel(logging.INFO)
    elif not cadr_logger.handlers:
        cadr_logger.addHandler(logging.NullHandler())


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cadr {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log workflow details to stderr")
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Global options."""
    _configure_logging(verbose)


def resolve_mode(
    staged: bool, all_changes: bool, base: str | None, head: str | None
) -> ChangeSetMode:
    """Pick the diff mode; --base wins over --staged, which wins over --all."""
    if head is not None and base is None:
        raise typer.BadParameter("--head requires --base", param_hint="--head")
    if base is not None:
        return BranchDiff(base=base or DEFAULT_BASE_REF, head=head or DEFAULT_HEAD_REF)
    if staged:
        return Staged()
    return AllUncommitted()


def _always_confirm(reason: str) -> bool:
    return True


def _decline_non_interactive(reason: str) -> bool:
    rprint("[dim]Non-interactive environment detected; not prompting for ADR generation.[/dim]")
    logger.info("confirmation auto-declined (non-interactive)")
    return False


@app.command()
def analyze(
    staged: Annotated[bool, typer.Option("--staged", help="Analyze staged changes only")] = False,
    all_changes: Annotated[
        bool, typer.Option("--all", help="Analyze all uncommitted changes (default)")
    ] = False,
    base: Annotated[
        str | None,
        typer.Option("--base", help=f"Compare a branch range, e.g. {DEFAULT_BASE_REF}"),
    ] = None,
    head: Annotated[
        str | None, typer.Option("--head", help=f"Head ref for --base (default {DEFAULT_HEAD_REF})")
    ] = None,
    config: Annotated[
        str, typer.Option("--config", "-c", help="Path to cadr.yaml")
    ] = DEFAULT_CONFIG_PATH,
    adr_dir: Annotated[
        str, typer.Option("--adr-dir", help="Directory for generated ADRs")
    ] = DEFAULT_ADR_DIR,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Generate an ADR without asking")
    ] = False,
) -> None:
    """Analyze code changes and offer to draft an ADR for significant ones."""
    mode = resolve_mode(staged, all_changes, base, head)
    if yes:
        confirm = _always_confirm
    elif not should_prompt():
        confirm = _decline_non_interactive
    else:
        confirm = None

    workflow = AnalysisWorkflow(
        config_path=config,
        store=ADRStore(adr_dir),
        confirm=confirm,
        logger=logging.getLogger("cadr.workflow"),
    )
    asyncio.run(workflow.run(mode))


@app.command()
def init(
    provider: Annotated[
        str, typer.Option("--provider", help="openai | gemini | anthropic")
    ] = "openai",
    model: Annotated[str | None, typer.Option("--model", help="Analysis model")] = None,
    api_key_env: Annotated[
        str | None, typer.Option("--api-key-env", help="Env var holding the API key")
    ] = None,
    timeout: Annotated[
        int, typer.Option("--timeout", help="Request timeout in seconds (1-60)")
    ] = 15,
    ignore: Annotated[
        list[str] | None, typer.Option("--ignore", help="Ignore pattern (repeatable)")
    ] = None,
    path: Annotated[str, typer.Option("--path", help="Config file to write")] = DEFAULT_CONFIG_PATH,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file")] = False,
) -> None:
    """Create cadr.yaml."""
    if Path(path).exists() and not force:
        rprint(f"\nℹ️  Configuration file already exists: {path}")
        rprint("💡 Use --force to overwrite it.\n")
        return

    if provider not in _PROVIDER_DEFAULTS:
        raise typer.BadParameter(
            f"must be one of: {', '.join(_PROVIDER_DEFAULTS)}", param_hint="--provider"
        )
    default_model, default_key_env, key_url = _PROVIDER_DEFAULTS[provider]

    try:
        cfg = AnalysisConfig(
            provider=provider,
            analysis_model=model or default_model,
            api_key_env=api_key_env or default_key_env,
            timeout_seconds=timeout,
            ignore_patterns=ignore if ignore else _DEFAULT_IGNORE_PATTERNS,
        )
    except ValueError as e:
        rprint(f"[red]❌ Invalid configuration:[/red] {escape(str(e))}")
        return

    try:
        write_config(cfg, path)
    except OSError as e:
        logger.error("failed to write %s: %s", path, e)
        rprint(f"[red]❌ Failed to write {path}:[/red] {escape(str(e.strerror or e))}")
        return

    rprint(Panel(
        f"[dim]Provider:[/dim]     {cfg.provider}\n"
        f"[dim]Model:[/dim]        {cfg.analysis_model}\n"
        f"[dim]API Key Env:[/dim]  {cfg.api_key_env}\n"
        f"[dim]Timeout:[/dim]      {cfg.timeout_seconds}s\n"
        f"[dim]Ignore:[/dim]       {', '.join(cfg.ignore_patterns or []) or '-'}",
        title=f"Configuration saved to {path}",
        border_style="green",
    ))
    if not os.environ.get(cfg.api_key_env):
        rprint(f"\n[yellow]⚠️  {cfg.api_key_env} is not set in your environment.[/yellow]")
        rprint(f'   export {cfg.api_key_env}="your-api-key-here"')
        rprint(f"   Get your API key from: {key_url}")
    rprint("\n🎉 Ready to analyze! Stage your changes and run: cadr analyze --staged\n")
