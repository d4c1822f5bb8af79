"""Tests for target loading and the JSON stores."""

import json

import pytest

from staff_pipeline.errors import BatchFatalError
from staff_pipeline.models import RunSummary, ScrapeMethod
from staff_pipeline.store import RunStore, StaffStore, load_targets

SCHOOLS = [
    {"id": 1, "name": "Example State University", "athletic_website": "https://athletics.example.edu/"},
    {"id": 2, "name": "No Website College", "athletic_website": None},
    {"id": 3, "name": "University of Alabama", "athletic_website": "https://rolltide.com", "division": "D1"},
]


def write_json(path, data):
    path.write_text(json.dumps(data))
    return path


class TestLoadTargets:
    def test_list_file(self, tmp_path):
        targets = load_targets(write_json(tmp_path / "schools.json", SCHOOLS))
        assert [t.id for t in targets] == [1, 3]
        assert targets[0].display_name == "Example State University"
        assert targets[0].base_url == "https://athletics.example.edu"

    def test_wrapped_list(self, tmp_path):
        targets = load_targets(write_json(tmp_path / "schools.json", {"schools": SCHOOLS}))
        assert len(targets) == 2

    def test_filter_by_id(self, tmp_path):
        path = write_json(tmp_path / "schools.json", SCHOOLS)
        assert [t.id for t in load_targets(path, ["3"])] == [3]
        assert [t.id for t in load_targets(path, [1])] == [1]

    def test_missing_file(self, tmp_path):
        with pytest.raises(BatchFatalError, match="Could not read targets"):
            load_targets(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "schools.json"
        path.write_text("[{")
        with pytest.raises(BatchFatalError):
            load_targets(path)

    def test_not_a_list(self, tmp_path):
        with pytest.raises(BatchFatalError, match="must contain a list"):
            load_targets(write_json(tmp_path / "schools.json", "Example State"))

    def test_entry_without_name(self, tmp_path):
        path = write_json(tmp_path / "schools.json", [{"id": 1, "athletic_website": "https://x.edu"}])
        with pytest.raises(BatchFatalError, match="Invalid target entry"):
            load_targets(path)


class TestRunStore:
    def test_insert_assigns_ids(self, tmp_path):
        store = RunStore(tmp_path / "runs.json")
        first = store.insert(RunSummary(method=ScrapeMethod.HYBRID))
        second = store.insert(RunSummary(method=ScrapeMethod.REMOTE))
        assert (first.id, second.id) == (1, 2)
        assert RunStore(tmp_path / "runs.json").get(2).method == ScrapeMethod.REMOTE

    def test_update_unknown(self, tmp_path):
        store = RunStore(tmp_path / "runs.json")
        with pytest.raises(KeyError):
            store.update(RunSummary(id=9, method=ScrapeMethod.HYBRID))

    def test_corrupt_store_is_fatal(self, tmp_path):
        path = tmp_path / "runs.json"
        path.write_text("not json")
        with pytest.raises(BatchFatalError):
            RunStore(path)


class TestStaffStore:
    def test_upsert(self, tmp_path, make_record):
        store = StaffStore(tmp_path / "staff.json")
        records = [make_record("Jane Doe"), make_record("John Smith")]
        assert store.upsert_many(1, records) == (2, 0)
        assert store.upsert_many(1, [make_record("JANE DOE"), make_record("Pat Lee")]) == (1, 1)
        assert store.upsert_many(2, records) == (2, 0)
        assert len(store) == 5

    def test_rows_survive_reload(self, tmp_path, make_record):
        StaffStore(tmp_path / "staff.json").upsert_many(1, [make_record("Jane Doe", email="jdoe@example.edu")])
        rows = StaffStore(tmp_path / "staff.json").for_target(1)
        assert len(rows) == 1
        assert rows[0]["email"] == "jdoe@example.edu"
        assert rows[0]["scraping_method"] == "stealth"
        assert rows[0]["contact_priority"] == 2

    def test_corrupt_store_starts_empty(self, tmp_path):
        path = tmp_path / "staff.json"
        path.write_text("{broken")
        assert len(StaffStore(path)) == 0
