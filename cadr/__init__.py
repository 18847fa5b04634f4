"""cadr - Continuous Architectural Decision Records.

Analyzes code changes with an LLM and drafts MADR documents for the ones
that are architecturally significant.
"""

from cadr.config import AnalysisConfig, load_config
from cadr.llm import analyze_changes, generate_adr_content, get_provider
from cadr.orchestrator import AnalysisWorkflow, WorkflowOutcome, WorkflowState
from cadr.output import ADRStore, SaveResult, save_adr
from cadr.prompts import format_analysis, format_generation
from cadr.vcs import AllUncommitted, BranchDiff, ChangeSetResolver, Staged

__version__ = "0.1.0"

__all__ = [
    "ADRStore",
    "AllUncommitted",
    "AnalysisConfig",
    "AnalysisWorkflow",
    "BranchDiff",
    "ChangeSetResolver",
    "SaveResult",
    "Staged",
    "WorkflowOutcome",
    "WorkflowState",
    "analyze_changes",
    "format_analysis",
    "format_generation",
    "generate_adr_content",
    "get_provider",
    "load_config",
    "save_adr",
]
