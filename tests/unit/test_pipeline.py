"""Tests for batch scraping."""

import asyncio
import json

import pytest

from staff_pipeline.errors import BatchFatalError
from staff_pipeline.models import ScrapeMethod, Strategy, Target
from staff_pipeline.pipeline import build_report, load_batch_targets, parse_method, run_batch
from staff_pipeline.store import RunStore, StaffStore
from staff_pipeline.strategies import HybridOrchestrator
from staff_pipeline.tracker import RunTracker


class ExplodingTracker(RunTracker):
    """Tracker whose store dies on the first per-target update."""

    def record(self, run_id, result):
        raise BatchFatalError("Failed to persist run store: disk full")


@pytest.fixture
def targets(target) -> list[Target]:
    return [target, Target(id=3, name="Example Tech", athletic_website="https://tech.example.edu")]


@pytest.fixture
def tracker(tmp_path) -> RunTracker:
    return RunTracker(RunStore(tmp_path / "scrape_runs.json"))


@pytest.fixture
def staff_store(tmp_path) -> StaffStore:
    return StaffStore(tmp_path / "athletic_staff.json")


def batch(targets, ctx, **kwargs):
    async def _run():
        async with ctx:
            return await run_batch(targets, ctx=ctx, show_summary=False, **kwargs)

    return asyncio.run(_run())


class TestRunBatch:
    def test_successful_batch(self, targets, make_ctx, make_strategy, tracker, staff_store, no_delay, tmp_path):
        orchestrator = HybridOrchestrator(
            make_strategy(Strategy.REMOTE, count=3),
            make_strategy(Strategy.STEALTH, count=1),
        )
        outcome = batch(
            targets, make_ctx(),
            tracker=tracker, staff_store=staff_store, orchestrator=orchestrator,
            report_dir=tmp_path / "reports",
        )

        run = outcome.run
        assert run.status == "completed"
        assert run.targets_processed == 2
        assert run.targets_succeeded == 2
        assert run.records_extracted == 6
        assert run.success_rate == 100.0
        assert run.errors == []

        assert len(staff_store.for_target(1)) == 3
        assert len(staff_store.for_target(3)) == 3
        # Fixed pause between targets, none before the first
        assert no_delay.requests == [(2000, 0.0)]

        report = json.loads(outcome.report_path.read_text())
        assert outcome.report_path.name.startswith("coach-scraping-report-")
        assert report["run_id"] == run.id
        assert report["method"] == "hybrid"
        assert report["schools_processed"] == 2
        assert report["total_coaches_found"] == 6
        assert report["average_coaches_per_school"] == 3.0
        assert report["results"][0]["coaches_found"] == 3
        assert report["results"][0]["coaches"][0]["name"] == "Jane Doe"

    def test_failures_are_recorded_not_raised(self, targets, make_ctx, make_strategy, tracker, staff_store):
        orchestrator = HybridOrchestrator(
            make_strategy(Strategy.REMOTE, error=RuntimeError("boom")),
            make_strategy(Strategy.STEALTH, count=0),
        )
        outcome = batch(targets, make_ctx(), tracker=tracker, staff_store=staff_store, orchestrator=orchestrator)

        assert outcome.run.status == "completed"
        assert outcome.run.success_rate == 0.0
        assert [e.target_id for e in outcome.run.errors] == [1, 3]
        assert outcome.report_path is None
        assert len(staff_store) == 0

    def test_method_is_passed_through(self, targets, make_ctx, make_strategy, tracker, staff_store):
        remote = make_strategy(Strategy.REMOTE, count=3)
        stealth = make_strategy(Strategy.STEALTH, count=2)
        outcome = batch(
            targets, make_ctx(), method="stealth",
            tracker=tracker, staff_store=staff_store, orchestrator=HybridOrchestrator(remote, stealth),
        )

        assert remote.calls == []
        assert len(stealth.calls) == 2
        assert outcome.run.method == ScrapeMethod.STEALTH

    def test_threshold_is_passed_through(self, targets, make_ctx, make_strategy, tracker, staff_store):
        remote = make_strategy(Strategy.REMOTE, count=3)
        stealth = make_strategy(Strategy.STEALTH, count=5)
        batch(
            targets, make_ctx(), fallback_threshold=4,
            tracker=tracker, staff_store=staff_store, orchestrator=HybridOrchestrator(remote, stealth),
        )
        assert len(stealth.calls) == 2

    def test_batch_fatal_error(self, targets, make_ctx, make_strategy, tmp_path, staff_store):
        tracker = ExplodingTracker(RunStore(tmp_path / "scrape_runs.json"))
        orchestrator = HybridOrchestrator(make_strategy(Strategy.REMOTE, count=3), make_strategy(Strategy.STEALTH))

        with pytest.raises(BatchFatalError):
            batch(targets, make_ctx(), tracker=tracker, staff_store=staff_store, orchestrator=orchestrator)

        run = tracker.get(1)
        assert run.status == "completed"
        assert "disk full" in run.errors[-1].message

    def test_empty_batch(self, make_ctx, tracker, staff_store):
        outcome = batch([], make_ctx(), tracker=tracker, staff_store=staff_store)
        assert outcome.run.targets_processed == 0
        assert outcome.run.status == "completed"
        assert outcome.results == []

    def test_injected_empty_store_is_used(self, targets, make_ctx, make_strategy, tracker, tmp_path):
        store = StaffStore(tmp_path / "injected_staff.json")
        assert len(store) == 0
        orchestrator = HybridOrchestrator(make_strategy(Strategy.REMOTE, count=3), make_strategy(Strategy.STEALTH))
        ctx = make_ctx()

        batch(targets, ctx, tracker=tracker, staff_store=store, orchestrator=orchestrator)

        assert len(store.for_target(1)) == 3
        assert not (ctx.settings.data_dir / "athletic_staff.json").exists()

    def test_invalid_method(self, make_ctx, tracker):
        with pytest.raises(ValueError, match="Invalid scraping method"):
            batch([], make_ctx(), method="carrier-pigeon", tracker=tracker)
        assert tracker.list_recent() == []


@pytest.mark.parametrize("value,expected", [
    ("remote", ScrapeMethod.REMOTE),
    ("stealth", ScrapeMethod.STEALTH),
    ("hybrid", ScrapeMethod.HYBRID),
    (ScrapeMethod.HYBRID, ScrapeMethod.HYBRID),
])
def test_parse_method(value, expected):
    assert parse_method(value) == expected


def test_empty_report(tracker):
    run = tracker.start(ScrapeMethod.HYBRID)
    report = build_report(run, [])
    assert report["schools_processed"] == 0
    assert report["average_coaches_per_school"] == 0


class TestLoadBatchTargets:
    def test_reads_targets(self, tmp_path, tracker):
        path = tmp_path / "schools.json"
        path.write_text(json.dumps([
            {"id": 1, "name": "Example State", "athletic_website": "https://athletics.example.edu"},
            {"id": 2, "name": "No Site U"},
        ]))
        targets = load_batch_targets(path, method="stealth", tracker=tracker)
        assert [t.id for t in targets] == [1]
        assert tracker.list_recent() == []

    def test_unreadable_file_is_recorded(self, tmp_path, tracker):
        with pytest.raises(BatchFatalError, match="Could not read targets"):
            load_batch_targets(tmp_path / "missing.json", method="stealth", tracker=tracker)

        runs = tracker.list_recent()
        assert len(runs) == 1
        assert runs[0].method == ScrapeMethod.STEALTH
        assert runs[0].status == "completed"
        assert "Could not read targets" in runs[0].errors[0].message
