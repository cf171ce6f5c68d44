"""Natural-language summary of a finished analysis run."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from debtscan.analysis.metrics import parse_report
from debtscan.analysis.prompts import build_summary_prompt
from debtscan.generators import ValidatingGenerator
from debtscan.models import Analysis, AnalysisFailure, AnalysisMetrics, FileScore, FolderNode
from debtscan.storage import atomic_write_json, atomic_write_text, read_json

logger = logging.getLogger(__name__)

SUMMARY_FILE = "summary.md"
METRICS_FILE = "metrics.json"
SUMMARY_STATE_FILE = "summary_state.json"

# Per-file findings are trimmed to keep the summary prompt bounded.
MAX_ISSUES_PER_FILE = 5


def digest_findings(
    results: Mapping[str, Analysis],
    scores: Mapping[str, FileScore] | None = None,
) -> dict[str, object]:
    """Compact per-file view of the results for the summary prompt."""
    scores = scores or {}
    findings: dict[str, object] = {}
    for path in sorted(results):
        analysis = results[path]
        if isinstance(analysis, AnalysisFailure):
            findings[path] = {"error": analysis.error}
            continue
        report = parse_report(analysis)
        if report is None:
            findings[path] = {"error": "malformed analysis"}
            continue
        top = sorted(report.issues, key=lambda i: -i.severity)[:MAX_ISSUES_PER_FILE]
        finding: dict[str, object] = {
            "totalIssues": report.total_issues,
            "issues": [f"{i.type} (severity {i.severity})" for i in top],
        }
        if path in scores:
            finding["debtScore"] = scores[path].score
            finding["priority"] = scores[path].priority
        findings[path] = finding
    return findings


def last_summary_timestamp(base_dir: Path | str) -> str | None:
    """When the summary in ``base_dir`` was last written, if ever."""
    try:
        return read_json(Path(base_dir) / SUMMARY_STATE_FILE).get("lastSummaryTimestamp")
    except (OSError, ValueError, AttributeError):
        return None


class SummaryWriter:
    """Writes ``summary.md`` and ``metrics.json`` into the output directory."""

    def __init__(self, generator: ValidatingGenerator, base_dir: Path | str):
        self.generator = generator
        self.base_dir = Path(base_dir)

    @property
    def summary_path(self) -> Path:
        return self.base_dir / SUMMARY_FILE

    async def write(
        self,
        results: Mapping[str, Analysis],
        metrics: AnalysisMetrics,
        folders: FolderNode,
    ) -> Path:
        """Generate the summary and persist it with the metrics.

        Returns:
            Path of the written summary
        """
        atomic_write_json(
            self.base_dir / METRICS_FILE,
            {"metrics": metrics.to_dict(), "folders": folders.to_dict()},
        )

        prompt = build_summary_prompt(
            metrics.to_dict(include_file_scores=False),
            folders.to_dict(),
            digest_findings(results, metrics.file_scores),
        )
        summary = await self.generator.validate_with_retry(
            prompt, str, transform=lambda text: text.strip() or None
        )
        atomic_write_text(self.summary_path, summary + "\n")
        self._record_timestamp()
        logger.info(f"Summary written to {self.summary_path}")
        return self.summary_path

    def _record_timestamp(self) -> None:
        try:
            atomic_write_json(
                self.base_dir / SUMMARY_STATE_FILE,
                {"lastSummaryTimestamp": datetime.now(timezone.utc).isoformat()},
            )
        except OSError as e:
            logger.error(f"Error saving summary state: {e}")
