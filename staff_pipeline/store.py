"""JSON-file stores for targets, scrape runs and extracted staff."""

import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import ValidationError
from rich.console import Console

from staff_pipeline.errors import BatchFatalError
from staff_pipeline.models import RunSummary, StaffRecord, Target

console = Console()

RUNS_FILE = "scrape_runs.json"
STAFF_FILE = "athletic_staff.json"

# Hard cap on listings, whatever the caller asks for
MAX_RECENT_RUNS = 50


def load_targets(path: Path, ids: Optional[Iterable[Union[int, str]]] = None) -> list[Target]:
    """Read `[{id, name, athletic_website}]` from a JSON file.

    Entries without a website are skipped. Any failure to read the file is
    batch-fatal: there is nothing to scrape.
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise BatchFatalError(f"Could not read targets from {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("schools") or data.get("targets") or []
    if not isinstance(data, list):
        raise BatchFatalError(f"Targets file {path} must contain a list")

    wanted = {str(i) for i in ids} if ids else None
    targets = []
    for entry in data:
        if not isinstance(entry, dict) or not entry.get("athletic_website"):
            continue
        if wanted is not None and str(entry.get("id")) not in wanted:
            continue
        try:
            targets.append(Target.model_validate(entry))
        except ValidationError as e:
            raise BatchFatalError(f"Invalid target entry {entry.get('id')!r}: {e}") from e
    return targets


class RunStore:
    """Persistent run summaries, keyed by integer id."""

    def __init__(self, store_path: Path):
        self.store_path = store_path
        self._runs: dict[int, RunSummary] = {}
        self._load()

    def _load(self) -> None:
        if not self.store_path.exists():
            return
        try:
            with open(self.store_path) as f:
                data = json.load(f)
            for run_data in data.get("runs", []):
                run = RunSummary.model_validate(run_data)
                self._runs[run.id] = run
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise BatchFatalError(f"Failed to load run store {self.store_path}: {e}") from e

    def _save(self) -> None:
        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.store_path, "w") as f:
                json.dump({
                    "updated_at": datetime.now().timestamp(),
                    "runs": [run.model_dump(mode="json") for run in self._runs.values()],
                }, f, indent=2)
        except OSError as e:
            raise BatchFatalError(f"Failed to persist run store {self.store_path}: {e}") from e

    def insert(self, run: RunSummary) -> RunSummary:
        """Store a new run, assigning the next id."""
        run_id = max(self._runs, default=0) + 1
        stored = run.model_copy(update={"id": run_id})
        self._runs[run_id] = stored
        self._save()
        return stored

    def update(self, run: RunSummary) -> None:
        if run.id not in self._runs:
            raise KeyError(f"Unknown run {run.id}")
        self._runs[run.id] = run
        self._save()

    def get(self, run_id: int) -> Optional[RunSummary]:
        return self._runs.get(run_id)

    def list_recent(self, limit: int = 10) -> list[RunSummary]:
        """Newest runs first, never more than 50."""
        limit = max(0, min(limit, MAX_RECENT_RUNS))
        runs = sorted(self._runs.values(), key=lambda r: r.started_at, reverse=True)
        return runs[:limit]


class StaffStore:
    """Extracted staff rows, one per (target, name, sport)."""

    def __init__(self, store_path: Path):
        self.store_path = store_path
        self._rows: dict[str, dict] = {}
        self._load()

    @staticmethod
    def _key(target_id, name: str, sport: str) -> str:
        return f"{target_id}|{name.lower()}|{sport}"

    def _load(self) -> None:
        if not self.store_path.exists():
            return
        try:
            with open(self.store_path) as f:
                data = json.load(f)
            for row in data.get("staff", []):
                self._rows[self._key(row["target_id"], row["name"], row["sport"])] = row
            console.print(f"[dim]Loaded {len(self._rows)} staff rows from store[/dim]")
        except (OSError, json.JSONDecodeError, KeyError) as e:
            console.print(f"[yellow]Failed to load staff store: {e}[/yellow]")
            self._rows = {}

    def _save(self) -> None:
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, "w") as f:
            json.dump({
                "updated_at": datetime.now().timestamp(),
                "staff": list(self._rows.values()),
            }, f, indent=2)

    def upsert_many(self, target_id, records: list[StaffRecord]) -> tuple[int, int]:
        """Insert or refresh rows. Returns (inserted, updated)."""
        inserted = updated = 0
        for record in records:
            row = record.to_store_record(target_id)
            key = self._key(target_id, record.name, record.sport)
            if key in self._rows:
                updated += 1
            else:
                inserted += 1
            self._rows[key] = row
        if records:
            self._save()
        return inserted, updated

    def for_target(self, target_id) -> list[dict]:
        return [row for row in self._rows.values() if str(row["target_id"]) == str(target_id)]

    def __len__(self) -> int:
        return len(self._rows)
