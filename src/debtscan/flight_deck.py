"""Flight Deck - a TUI for watching a debtscan run."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, DataTable, Footer, Header, Input, Log, ProgressBar, Static

from debtscan.config import AnalysisConfig
from debtscan.models import AnalysisFailure, ProgressEvent
from debtscan.storage import AnalysisStateStore

PHASE_STYLES = {
    "idle": "dim",
    "embedding": "yellow",
    "analyzing": "green",
    "complete": "bold cyan",
    "error": "bold red",
}


@dataclass(frozen=True)
class RunSnapshot:
    """What the deck knows about the current run."""

    phase: str = "idle"
    remaining: int = 0
    done: int = 0
    failed: int = 0
    issues: int = 0
    percent: float = 0.0
    last_file: str = ""
    started: datetime | None = None
    finished: datetime | None = None

    def clock(self) -> str:
        if self.started is None:
            return "--:--"
        seconds = int(((self.finished or datetime.now()) - self.started).total_seconds())
        return "%02d:%02d" % divmod(seconds, 60)

    def advance(self, event: ProgressEvent, failed: bool, issues: int) -> RunSnapshot:
        """Fold one progress event in; the start-of-run event only sets the totals."""
        snapshot = replace(self, remaining=event.total, percent=event.progress)
        if not event.current_file:
            return snapshot
        return replace(
            snapshot,
            done=event.analyzed,
            last_file=event.current_file,
            failed=self.failed + int(failed),
            issues=self.issues + issues,
        )


class RunSummary(Static):
    """One-glance summary of the active run."""

    def show(self, snapshot: RunSnapshot) -> None:
        style = PHASE_STYLES.get(snapshot.phase, "white")
        self.update(
            f"[{style}]{snapshot.phase.upper()}[/]  {snapshot.clock()}\n"
            f"files  {snapshot.done}/{snapshot.remaining}"
            f"  [red]{snapshot.failed} failed[/]\n"
            f"debt   [magenta]{snapshot.issues} issues[/]\n"
            f"[dim]{snapshot.last_file}[/]"
        )


class FileTable(DataTable):
    """Per-file outcomes, newest last."""

    def on_mount(self) -> None:
        self.add_columns("#", "File", "Outcome", "Issues")
        self.zebra_stripes = True

    def record(self, path: str, failed: bool, issues: int) -> None:
        outcome = "[red]failed[/]" if failed else "[green]analyzed[/]"
        shown = path if len(path) <= 56 else "…" + path[-55:]
        self.add_row(str(self.row_count + 1), shown, outcome, "-" if failed else str(issues))
        self.move_cursor(row=self.row_count - 1)


class FlightDeck(App):
    """Interactive front end for ``debtscan analyze``."""

    class SnapshotChanged(Message):
        def __init__(self, snapshot: RunSnapshot) -> None:
            super().__init__()
            self.snapshot = snapshot

    class Note(Message):
        def __init__(self, text: str) -> None:
            super().__init__()
            self.text = text

    class FileDone(Message):
        def __init__(self, path: str, failed: bool, issues: int) -> None:
            super().__init__()
            self.path = path
            self.failed = failed
            self.issues = issues

    CSS = """
    #controls {
        height: auto;
        padding: 0 1;
        border-bottom: heavy $accent;
    }

    #source-input {
        width: 1fr;
    }

    RunSummary {
        width: 48;
        height: 6;
        padding: 0 1;
        border: tall $accent;
    }

    #run-progress {
        margin: 1 1 0 1;
    }

    FileTable {
        height: 2fr;
        margin: 0 1;
    }

    #events {
        height: 1fr;
        margin: 0 1;
        border-top: dashed $accent;
    }
    """

    BINDINGS = [
        Binding("r", "run", "Run", show=True),
        Binding("ctrl+l", "reset", "Reset", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    TITLE = "debtscan"
    SUB_TITLE = "Flight Deck"

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        super().__init__()
        self.config = config or AnalysisConfig()

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="controls"):
            with Vertical():
                yield Input(
                    value=str(self.config.directory),
                    placeholder="directory to analyze",
                    id="source-input",
                )
                with Horizontal():
                    yield Button("Run", id="run", variant="primary")
                    yield Button("Reset", id="reset")
            yield RunSummary(id="summary")
        yield ProgressBar(id="run-progress", total=100, show_eta=False)
        yield FileTable(id="files")
        yield Log(id="events", auto_scroll=True)
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(RunSummary).show(RunSnapshot())
        self._note(f"Results go to {self.config.output_dir}")

    def _note(self, text: str) -> None:
        self.query_one("#events", Log).write_line(f"{datetime.now():%H:%M:%S}  {text}")

    def on_flight_deck_snapshot_changed(self, message: SnapshotChanged) -> None:
        self.query_one(RunSummary).show(message.snapshot)
        self.query_one("#run-progress", ProgressBar).update(progress=message.snapshot.percent)

    def on_flight_deck_note(self, message: Note) -> None:
        self._note(message.text)

    def on_flight_deck_file_done(self, message: FileDone) -> None:
        self.query_one(FileTable).record(message.path, message.failed, message.issues)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "run":
            self.action_run()
        elif event.button.id == "reset":
            self.action_reset()

    def action_reset(self) -> None:
        self.query_one(RunSummary).show(RunSnapshot())
        self.query_one(FileTable).clear()
        self.query_one("#events", Log).clear()
        self.query_one("#run-progress", ProgressBar).update(progress=0)

    def action_run(self) -> None:
        directory = self.query_one("#source-input", Input).value.strip()
        if directory:
            self.analyze_directory(Path(directory))
        else:
            self._note("Enter a directory first")

    @work(exclusive=True, thread=True)
    def analyze_directory(self, directory: Path) -> None:
        """Drive one pipeline run on a worker thread with its own event loop."""
        from debtscan.pipeline import create_embedder, create_generator, run_pipeline

        config = self.config.model_copy(update={"directory": directory})
        store = AnalysisStateStore(config.output_dir)
        snapshot = RunSnapshot(phase="embedding", started=datetime.now())

        def publish(new: RunSnapshot) -> None:
            nonlocal snapshot
            snapshot = new
            self.post_message(self.SnapshotChanged(new))

        if not directory.is_dir():
            publish(replace(snapshot, phase="error"))
            self.post_message(self.Note(f"{directory} is not a directory"))
            return

        def on_progress(event: ProgressEvent) -> None:
            failed, issues = False, 0
            if event.current_file:
                record = store.load_result(event.current_file)
                failed = record is None or isinstance(record.analysis, AnalysisFailure)
                if not failed:
                    issues = int(record.analysis.payload.get("totalIssues", 0))
                self.post_message(self.FileDone(event.current_file, failed, issues))
            publish(replace(snapshot.advance(event, failed, issues), phase="analyzing"))

        self.post_message(self.Note(f"Embedding {directory} with {config.embedding_provider}"))
        try:
            report = asyncio.run(
                run_pipeline(
                    config,
                    create_embedder(config),
                    create_generator(config),
                    on_progress,
                    summarize=False,
                )
            )
        except Exception as e:
            publish(replace(snapshot, phase="error", finished=datetime.now()))
            self.post_message(self.Note(f"Run failed: {e}"))
            return

        publish(replace(snapshot, phase="complete", percent=100.0, finished=datetime.now()))
        metrics = report.metrics
        self.post_message(
            self.Note(
                f"{metrics.analyzed_files} analyzed, {metrics.failed_files} failed, "
                f"{metrics.total_issues} issues in total"
            )
        )


def main(config: AnalysisConfig | None = None) -> None:
    FlightDeck(config).run()


if __name__ == "__main__":
    main()
