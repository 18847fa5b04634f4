"""Orchestrator: config -> changes -> analysis -> confirmation -> ADR on disk.

Each stage returns ``Continue`` or a ``Halt`` carrying the terminal state
and the message shown to the user. ``AnalysisWorkflow.run`` never raises:
handled failures halt their stage and anything unexpected is caught once,
at the top.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from cadr.config import DEFAULT_CONFIG_PATH, AnalysisConfig, load_config
from cadr.confirm import prompt_for_generation
from cadr.llm import (
    AnalysisRequest,
    AnalysisResponse,
    GenerationRequest,
    GenerationResponse,
    analyze_changes,
    generate_adr_content,
)
from cadr.output import ADRStore
from cadr.prompts import format_analysis, format_generation
from cadr.vcs import (
    BranchDiff,
    ChangeSet,
    ChangeSetMode,
    ChangeSetResolver,
    GitClient,
    Staged,
    VcsError,
)


class WorkflowState(str, Enum):
    LOADING_CONFIG = "loading_config"
    RESOLVING_CHANGES = "resolving_changes"
    BUILDING_PROMPT = "building_prompt"
    ANALYZING = "analyzing"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    GENERATING = "generating"
    SAVING = "saving"
    # terminal
    CONFIG_ERROR = "config_error"
    VCS_ERROR = "vcs_error"
    NO_CHANGES = "no_changes"
    ANALYSIS_FAILED = "analysis_failed"
    NOT_SIGNIFICANT = "not_significant"
    DECLINED = "declined"
    GENERATION_FAILED = "generation_failed"
    SAVE_FAILED = "save_failed"
    SAVED = "saved"
    UNEXPECTED_ERROR = "unexpected_error"


_FAILURE_STATES = {
    WorkflowState.CONFIG_ERROR,
    WorkflowState.VCS_ERROR,
    WorkflowState.ANALYSIS_FAILED,
    WorkflowState.GENERATION_FAILED,
    WorkflowState.SAVE_FAILED,
    WorkflowState.UNEXPECTED_ERROR,
}


@dataclass(frozen=True)
class Continue:
    value: object = None


@dataclass(frozen=True)
class Halt:
    state: WorkflowState
    message: str
    file_path: str | None = None

    @property
    def failed(self) -> bool:
        return self.state in _FAILURE_STATES


# Every run ends in exactly one Halt.
WorkflowOutcome = Halt

StageResult = Continue | Halt
ConfirmFn = Callable[[str], bool]
AnalyzeFn = Callable[[AnalysisConfig, AnalysisRequest], Awaitable[AnalysisResponse]]
GenerateFn = Callable[[AnalysisConfig, GenerationRequest], Awaitable[GenerationResponse]]


@dataclass
class _Run:
    mode: ChangeSetMode
    state: WorkflowState = WorkflowState.LOADING_CONFIG
    config: AnalysisConfig | None = None
    change_set: ChangeSet = field(default_factory=ChangeSet)
    analysis_prompt: str = ""
    reason: str = ""
    content: str = ""
    title: str = ""


def _default_resolver(config: AnalysisConfig) -> ChangeSetResolver:
    return ChangeSetResolver(GitClient(), ignore_patterns=config.ignore_patterns)


def no_changes_message(mode: ChangeSetMode) -> str:
    if isinstance(mode, Staged):
        return (
            "No changes to analyze (staged).\n"
            "Stage some files first:\n   git add <files>\n   cadr analyze --staged"
        )
    if isinstance(mode, BranchDiff):
        return (
            f"No changes to analyze {mode.describe()}.\n"
            "No changes found between the specified git references."
        )
    return "No changes to analyze (uncommitted).\nMake some changes first, then run:\n   cadr analyze"


class AnalysisWorkflow:
    """Runs one analysis invocation end to end."""

    def __init__(
        self,
        *,
        config_path: str | Path = DEFAULT_CONFIG_PATH,
        config_loader: Callable[[str | Path], AnalysisConfig | None] = load_config,
        resolver_factory: Callable[[AnalysisConfig], ChangeSetResolver] = _default_resolver,
        analyze: AnalyzeFn = analyze_changes,
        generate: GenerateFn = generate_adr_content,
        store: ADRStore | None = None,
        confirm: ConfirmFn | None = None,
        console: Console | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config_path = config_path
        self.config_loader = config_loader
        self.resolver_factory = resolver_factory
        self.analyze = analyze
        self.generate = generate
        self.store = store or ADRStore()
        self.console = console or Console()
        self.confirm = confirm or (lambda reason: prompt_for_generation(reason, self.console))
        self.logger = logger or logging.getLogger(__name__)

    async def run(self, mode: ChangeSetMode) -> WorkflowOutcome:
        self.logger.info("starting analysis workflow (%s)", mode.describe())
        try:
            outcome = await self._run(mode)
        except Exception:
            self.logger.exception("unexpected error in analysis workflow")
            outcome = Halt(
                WorkflowState.UNEXPECTED_ERROR,
                "An unexpected error occurred.\nRun with --verbose for details.",
            )
        self._report(outcome)
        self.logger.info("analysis workflow finished: %s", outcome.state.value)
        return outcome

    async def _run(self, mode: ChangeSetMode) -> Halt:
        run = _Run(mode=mode)
        stages = (
            self._load_config,
            self._resolve_changes,
            self._build_prompt,
            self._analyze,
            self._await_confirmation,
            self._generate,
            self._save,
        )
        for stage in stages:
            step = await stage(run)
            if isinstance(step, Halt):
                return step
        raise RuntimeError("analysis workflow ended without a terminal state")

    def _enter(self, run: _Run, state: WorkflowState) -> None:
        run.state = state
        self.logger.debug("workflow state -> %s", state.value)

    # -- stages -------------------------------------------------------------

    async def _load_config(self, run: _Run) -> StageResult:
        self._enter(run, WorkflowState.LOADING_CONFIG)
        config = self.config_loader(self.config_path)
        if config is None:
            return Halt(
                WorkflowState.CONFIG_ERROR,
                "Configuration file not found or invalid.\n"
                "Run `cadr init` to create a configuration file.",
            )
        run.config = config
        return Continue(config)

    async def _resolve_changes(self, run: _Run) -> StageResult:
        self._enter(run, WorkflowState.RESOLVING_CHANGES)
        resolver = self.resolver_factory(run.config)
        try:
            change_set = await resolver.resolve(run.mode)
        except VcsError as e:
            self.logger.error("failed to resolve changes (%s): %s", e.kind.value, e)
            return Halt(WorkflowState.VCS_ERROR, f"Git Error: {e}")

        if not change_set.has_files:
            return Halt(WorkflowState.NO_CHANGES, no_changes_message(run.mode))

        count = len(change_set.file_paths)
        plural = "" if count == 1 else "s"
        self.console.print(f"\n📝 Analyzing {count} file{plural} ({escape(run.mode.describe())}):")
        for path in change_set.file_paths:
            self.console.print(f"  • {escape(path)}")
        self.console.print()

        if not change_set.has_diff:
            return Halt(WorkflowState.NO_CHANGES, "No diff content found.")
        run.change_set = change_set
        return Continue(change_set)

    async def _build_prompt(self, run: _Run) -> StageResult:
        self._enter(run, WorkflowState.BUILDING_PROMPT)
        run.analysis_prompt = format_analysis(
            run.change_set.file_paths, run.change_set.diff_text
        )
        return Continue(run.analysis_prompt)

    async def _analyze(self, run: _Run) -> StageResult:
        self._enter(run, WorkflowState.ANALYZING)
        config = run.config
        self.console.print("🔍 Analyzing changes for architectural significance...")
        self.console.print(f"🤖 Sending to {config.provider} {escape(config.analysis_model)}...\n")

        response = await self.analyze(
            config,
            AnalysisRequest(
                file_paths=list(run.change_set.file_paths),
                diff_content=run.change_set.diff_text,
                repository_context=Path.cwd().name,
                analysis_prompt=run.analysis_prompt,
            ),
        )
        if response.error is not None:
            return Halt(WorkflowState.ANALYSIS_FAILED, f"Analysis failed\n\n{response.error}")

        result = response.result
        label = (
            "✨ ARCHITECTURALLY SIGNIFICANT"
            if result.is_significant
            else "ℹ️  NOT ARCHITECTURALLY SIGNIFICANT"
        )
        self.console.print("[green]✅ Analysis Complete[/green]\n")
        self.console.print(f"📊 Result: [bold]{label}[/bold]")
        if result.reason:
            self.console.print(f"💭 Reasoning: {escape(result.reason)}")
        if result.confidence is not None:
            self.console.print(f"🎯 Confidence: {result.confidence * 100:.0f}%")
        self.console.print()

        if not result.is_significant:
            return Halt(WorkflowState.NOT_SIGNIFICANT, "No ADR needed for these changes.")
        run.reason = result.reason
        return Continue(result)

    async def _await_confirmation(self, run: _Run) -> StageResult:
        self._enter(run, WorkflowState.AWAITING_CONFIRMATION)
        confirmed = await asyncio.to_thread(self.confirm, run.reason)
        if not confirmed:
            return Halt(
                WorkflowState.DECLINED,
                "Skipping ADR generation.\n"
                "Recommendation: consider documenting this decision manually.",
            )
        return Continue(True)

    async def _generate(self, run: _Run) -> StageResult:
        self._enter(run, WorkflowState.GENERATING)
        self.console.print("\n🧠 Generating ADR draft...\n")
        response = await self.generate(
            run.config,
            GenerationRequest(
                file_paths=list(run.change_set.file_paths),
                diff_content=run.change_set.diff_text,
                reason=run.reason,
                generation_prompt=format_generation(
                    run.change_set.file_paths, run.change_set.diff_text
                ),
            ),
        )
        if response.error is not None:
            return Halt(WorkflowState.GENERATION_FAILED, f"ADR generation failed\n\n{response.error}")
        run.content = response.result.content
        run.title = response.result.title
        return Continue(response.result)

    async def _save(self, run: _Run) -> StageResult:
        self._enter(run, WorkflowState.SAVING)
        saved = await asyncio.to_thread(self.store.save, run.content, run.title)
        if not saved.success:
            return Halt(WorkflowState.SAVE_FAILED, f"Failed to save ADR\n\n{saved.error}")
        return Halt(
            WorkflowState.SAVED,
            f"Success! Draft ADR created\n\n📄 File: {saved.file_path}\n\n"
            "Next steps:\n"
            "   1. Review and refine the generated ADR\n"
            "   2. Commit it alongside your code changes",
            file_path=saved.file_path,
        )

    # -- output -------------------------------------------------------------

    def _report(self, outcome: Halt) -> None:
        message = escape(outcome.message)
        if outcome.failed:
            self.logger.error("%s: %s", outcome.state.value, outcome.message)
            self.console.print(f"\n[red]❌ {message}[/red]\n")
        elif outcome.state is WorkflowState.SAVED:
            self.console.print(f"[green]✅ {message}[/green]\n")
        else:
            self.console.print(f"ℹ️  {message}\n")
