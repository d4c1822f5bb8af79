"""Batch scraping: targets in, staff rows, a tracked run and a JSON report out."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from staff_pipeline.config import Settings
from staff_pipeline.errors import BatchFatalError
from staff_pipeline.models import RunSummary, ScrapeAttemptResult, ScrapeMethod, Target
from staff_pipeline.store import RUNS_FILE, STAFF_FILE, RunStore, StaffStore, load_targets
from staff_pipeline.strategies import HybridOrchestrator, ScrapeContext
from staff_pipeline.tracker import RunTracker

console = Console()


@dataclass
class BatchOutcome:
    run: RunSummary
    results: list[ScrapeAttemptResult] = field(default_factory=list)
    report_path: Optional[Path] = None


def parse_method(method: Union[ScrapeMethod, str]) -> ScrapeMethod:
    try:
        return ScrapeMethod(method)
    except ValueError:
        valid = ", ".join(m.value for m in ScrapeMethod)
        raise ValueError(f"Invalid scraping method: {method} (expected one of {valid})")


def load_batch_targets(
    path: Path,
    ids: Optional[list] = None,
    method: Union[ScrapeMethod, str] = ScrapeMethod.HYBRID,
    tracker: Optional[RunTracker] = None,
) -> list[Target]:
    """Read the batch's targets.

    When the file can't be read the batch still shows up in the run history,
    as a completed run with the error attached.
    """
    try:
        return load_targets(path, ids)
    except BatchFatalError as e:
        if tracker is not None:
            run = tracker.start(parse_method(method))
            tracker.fail(run.id, str(e))
        raise


def build_report(run: RunSummary, results: list[ScrapeAttemptResult]) -> dict:
    total_coaches = sum(len(r.staff_records) for r in results)
    return {
        "timestamp": datetime.now().isoformat(),
        "run_id": run.id,
        "method": run.method.value,
        "schools_processed": len(results),
        "total_coaches_found": total_coaches,
        "average_coaches_per_school": round(total_coaches / len(results), 1) if results else 0,
        "success_rate": run.success_rate,
        "results": [r.to_report_entry() for r in results],
    }


def save_scrape_report(run: RunSummary, results: list[ScrapeAttemptResult], report_dir: Path) -> Path:
    """Write the batch report as JSON and return its path."""
    report_dir.mkdir(parents=True, exist_ok=True)
    path = report_dir / f"coach-scraping-report-{datetime.now().strftime('%Y%m%d-%H%M%S')}-run{run.id}.json"
    with open(path, "w") as f:
        json.dump(build_report(run, results), f, indent=2, default=str)
    return path


def print_summary(run: RunSummary, results: list[ScrapeAttemptResult]) -> None:
    table = Table(title=f"Run {run.id} ({run.method.value})")
    table.add_column("School", style="cyan")
    table.add_column("Strategy")
    table.add_column("Coaches", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Status")

    for result in results:
        status = "[green]✓[/green]" if result.success else f"[red]✗ {result.error or ''}[/red]"
        strategy = result.strategy_used.value + (" (fallback)" if result.fell_back else "")
        table.add_row(
            result.target.display_name,
            strategy,
            str(len(result.staff_records)),
            f"{result.elapsed_ms / 1000:.1f}s",
            status,
        )

    console.print(table)
    console.print(
        f"\n[green]{run.targets_succeeded}/{run.targets_processed} schools, "
        f"{run.records_extracted} coaches ({run.success_rate}% success)[/green]"
    )


async def run_batch(
    targets: list[Target],
    method: Union[ScrapeMethod, str] = ScrapeMethod.HYBRID,
    settings: Optional[Settings] = None,
    ctx: Optional[ScrapeContext] = None,
    tracker: Optional[RunTracker] = None,
    staff_store: Optional[StaffStore] = None,
    orchestrator: Optional[HybridOrchestrator] = None,
    fallback_threshold: Optional[int] = None,
    report_dir: Optional[Path] = None,
    show_summary: bool = True,
) -> BatchOutcome:
    """Scrape targets one after another, with a fixed pause between them.

    Per-target failures end up in the run's errors. A BatchFatalError (run
    persistence) marks the run completed with an error entry and is re-raised.
    """
    method = parse_method(method)
    owns_ctx = ctx is None
    if ctx is None:
        ctx = ScrapeContext(settings or Settings.from_env())
    settings = ctx.settings

    if tracker is None:
        tracker = RunTracker(RunStore(settings.data_dir / RUNS_FILE))
    if staff_store is None:
        staff_store = StaffStore(settings.data_dir / STAFF_FILE)
    if orchestrator is None:
        orchestrator = HybridOrchestrator()

    run = tracker.start(method, len(targets))
    results: list[ScrapeAttemptResult] = []

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        ) as progress:
            task = progress.add_task("Scraping coaching staff...", total=len(targets))

            for i, target in enumerate(targets):
                if i:
                    await ctx.delay.delay(settings.inter_target_delay_ms)
                progress.update(task, description=f"Scraping {target.display_name}...")

                result = await orchestrator.scrape_target(target, ctx, method, fallback_threshold)
                results.append(result)

                if result.staff_records:
                    try:
                        staff_store.upsert_many(target.id, result.staff_records)
                    except OSError as e:
                        console.print(f"[red]Could not save staff for {target.display_name}: {e}[/red]")
                        tracker.note_error(run.id, f"Staff store write failed: {e}", target.id, target.display_name)

                run = tracker.record(run.id, result)
                progress.advance(task)

        run = tracker.complete(run.id)
    except BatchFatalError as e:
        console.print(f"[red]Batch aborted: {e}[/red]")
        tracker.fail(run.id, str(e))
        raise
    finally:
        if owns_ctx:
            await ctx.aclose()

    report_path = save_scrape_report(run, results, report_dir) if report_dir else None
    if report_path:
        console.print(f"[dim]Report saved: {report_path}[/dim]")
    if show_summary:
        print_summary(run, results)

    return BatchOutcome(run=run, results=results, report_path=report_path)
