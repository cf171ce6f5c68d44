"""Per-file analysis, metrics roll-up and summaries."""

from debtscan.analysis.metrics import build_folder_structure, compute_metrics, severity_band
from debtscan.analysis.schemas import CodeDebtAnalysis, DebtIssue, SeverityBucket
from debtscan.analysis.state_machine import AnalysisStateMachine, ProgressCallback
from debtscan.analysis.summary import SummaryWriter

__all__ = [
    "AnalysisStateMachine",
    "CodeDebtAnalysis",
    "DebtIssue",
    "ProgressCallback",
    "SeverityBucket",
    "SummaryWriter",
    "build_folder_structure",
    "compute_metrics",
    "severity_band",
]
