"""Run tracker: owns the RunSummary of a batch and keeps it persisted."""

from typing import Optional

from rich.console import Console

from staff_pipeline.errors import BatchFatalError
from staff_pipeline.models import RunError, RunSummary, ScrapeAttemptResult, ScrapeMethod, utcnow
from staff_pipeline.store import RunStore

console = Console()


class RunTracker:
    """Incremental bookkeeping for scrape runs.

    Every update is written through to the store; a failed write raises
    BatchFatalError, except in `fail()` which is already the error path.
    """

    def __init__(self, store: RunStore):
        self.store = store
        self._elapsed_totals: dict[int, int] = {}

    def _require(self, run_id: int) -> RunSummary:
        run = self.store.get(run_id)
        if run is None:
            raise KeyError(f"Unknown run {run_id}")
        return run

    def start(self, method: ScrapeMethod, targets_total: int = 0) -> RunSummary:
        run = self.store.insert(RunSummary(method=method, targets_total=targets_total))
        self._elapsed_totals[run.id] = 0
        console.print(f"[dim]Started run {run.id} ({method.value}, {targets_total} targets)[/dim]")
        return run

    def record(self, run_id: int, result: ScrapeAttemptResult) -> RunSummary:
        """Fold one target's result into the running totals."""
        run = self._require(run_id)
        processed = run.targets_processed + 1
        succeeded = run.targets_succeeded + (1 if result.success else 0)
        total_elapsed = self._elapsed_totals.get(run_id, run.avg_elapsed_ms * run.targets_processed)
        total_elapsed += result.elapsed_ms
        self._elapsed_totals[run_id] = total_elapsed

        errors = list(run.errors)
        if not result.success:
            errors.append(RunError(
                message=result.error or "No coaching staff found",
                target_id=result.target.id,
                target_name=result.target.display_name,
            ))

        run = run.model_copy(update={
            "targets_processed": processed,
            "targets_succeeded": succeeded,
            "records_extracted": run.records_extracted + len(result.staff_records),
            "success_rate": round(succeeded / processed * 100, 1),
            "avg_elapsed_ms": round(total_elapsed / processed),
            "errors": errors,
        })
        self.store.update(run)
        return run

    def note_error(self, run_id: int, message: str, target_id=None, target_name: Optional[str] = None) -> RunSummary:
        run = self._require(run_id)
        run = run.model_copy(update={
            "errors": list(run.errors) + [RunError(message=message, target_id=target_id, target_name=target_name)],
        })
        self.store.update(run)
        return run

    def complete(self, run_id: int) -> RunSummary:
        run = self._require(run_id).model_copy(update={"completed_at": utcnow()})
        self.store.update(run)
        self._elapsed_totals.pop(run_id, None)
        return run

    def fail(self, run_id: int, message: str) -> Optional[RunSummary]:
        """Mark the run completed with an error entry, as far as the store allows."""
        run = self.store.get(run_id)
        if run is None:
            return None
        run = run.model_copy(update={
            "completed_at": utcnow(),
            "errors": list(run.errors) + [RunError(message=message)],
        })
        try:
            self.store.update(run)
        except BatchFatalError as e:
            console.print(f"[red]Could not record failure of run {run_id}: {e}[/red]")
        self._elapsed_totals.pop(run_id, None)
        return run

    def get(self, run_id: int) -> Optional[RunSummary]:
        return self.store.get(run_id)

    def job_status(self, run_id: int) -> Optional[dict]:
        run = self.store.get(run_id)
        return run.to_job_status() if run else None

    def list_recent(self, limit: int = 10) -> list[RunSummary]:
        return self.store.list_recent(limit)
