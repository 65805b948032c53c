"""Tests for the JSON file node store."""

import json
from datetime import date, datetime, timedelta

import pytest

from orgtracker.adapters.file_store import JsonFileStore, serialize_fields
from orgtracker.core.nodes import NodeType
from orgtracker.core.recurrence import RecurrenceType
from orgtracker.errors import NodeNotFoundError, NodeValidationError, StoreError

NOW = datetime(2025, 1, 15, 9, 30)


@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "nodes.json"


@pytest.fixture
def store(path):
    return JsonFileStore(path, clock=lambda: NOW)


def test_serialize_fields():
    out = serialize_fields(
        {"deadline": date(2025, 1, 20), "type": NodeType.TASK, "recurrence_type": RecurrenceType.DAILY, "n": 3}
    )
    assert out == {"deadline": "2025-01-20", "type": "task", "recurrence_type": "daily", "n": 3}


class TestInsert:
    def test_assigns_ids_and_stamps_created_at(self, store):
        first = store.insert({"name": "Work", "type": NodeType.CATEGORY})
        second = store.insert({"name": "Report", "type": NodeType.TASK, "parent_id": first.id})

        assert (first.id, second.id) == (1, 2)
        assert second.created_at == NOW
        assert second.importance == 1

    def test_persists_to_disk(self, store, path):
        store.insert({"name": "Report", "type": "task", "deadline": "2025-01-20"})

        reopened = JsonFileStore(path)
        (node,) = reopened.fetch_nodes()
        assert node.deadline == date(2025, 1, 20)
        assert json.loads(path.read_text())["next_id"] == 2

    def test_rejects_invalid_node(self, store, path):
        with pytest.raises(NodeValidationError):
            store.insert({"name": "Work", "type": NodeType.CATEGORY, "deadline": date(2025, 1, 20)})
        assert not path.exists()


class TestReadWrite:
    def test_get_unknown_raises(self, store):
        with pytest.raises(NodeNotFoundError) as exc:
            store.get(42)
        assert exc.value.node_id == 42

    def test_update_merges_fields(self, store):
        task = store.insert({"name": "Report", "type": NodeType.TASK, "importance": 3})
        updated = store.update(task.id, {"importance": 8, "deadline": date(2025, 2, 1)})

        assert updated.importance == 8
        assert updated.name == "Report"
        assert store.get(task.id).deadline == date(2025, 2, 1)

    def test_update_unknown_raises(self, store):
        with pytest.raises(NodeNotFoundError):
            store.update(42, {"importance": 2})

    def test_update_validates(self, store):
        task = store.insert({"name": "Report", "type": NodeType.TASK})
        with pytest.raises(NodeValidationError):
            store.update(task.id, {"importance": 11})
        assert store.get(task.id).importance == 1

    def test_corrupt_file(self, path):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{not json")
        with pytest.raises(StoreError):
            JsonFileStore(path).fetch_nodes()


class TestDelete:
    def test_cascades_to_descendants(self, store):
        work = store.insert({"name": "Work", "type": NodeType.CATEGORY})
        team = store.insert({"name": "Team", "type": NodeType.CATEGORY, "parent_id": work.id})
        store.insert({"name": "1:1s", "type": NodeType.TASK, "parent_id": team.id})
        home = store.insert({"name": "Home", "type": NodeType.CATEGORY})

        store.delete(work.id)

        assert [n.id for n in store.fetch_nodes()] == [home.id]

    def test_unknown_raises(self, store):
        with pytest.raises(NodeNotFoundError):
            store.delete(42)


class TestFetchNodes:
    @pytest.fixture
    def seeded(self, store):
        work = store.insert({"name": "Work", "type": NodeType.CATEGORY, "category_id": "w"})
        store.insert({"name": "Dated", "type": NodeType.TASK, "deadline": date(2025, 1, 20), "category_id": "w"})
        store.insert({"name": "Undated", "type": NodeType.TASK, "parent_id": work.id})
        store.insert(
            {"name": "Done", "type": NodeType.TASK, "deadline": date(2025, 1, 10), "is_completed": True}
        )
        return store

    def test_no_filters(self, seeded):
        assert len(seeded.fetch_nodes()) == 4

    def test_filters_combine(self, seeded):
        names = [n.name for n in seeded.fetch_nodes(node_type=NodeType.TASK, with_deadline=True, completed=False)]
        assert names == ["Dated"]

    def test_category_filter(self, seeded):
        assert [n.name for n in seeded.fetch_nodes(category_id="w")] == ["Work", "Dated"]

    def test_without_deadline(self, seeded):
        names = [n.name for n in seeded.fetch_nodes(node_type=NodeType.TASK, with_deadline=False)]
        assert names == ["Undated"]


class TestFindRecentInstances:
    def test_matches_lineage_within_window(self, path):
        clock_times = iter([NOW - timedelta(minutes=10), NOW, NOW, NOW])
        store = JsonFileStore(path, clock=lambda: next(clock_times))
        template = store.insert(
            {"name": "Stretch", "type": NodeType.TASK, "is_recurring_template": True, "recurrence_type": "daily"}
        )
        fresh = store.insert({"name": "Stretch", "type": NodeType.TASK, "recurring_template_id": template.id})
        store.insert({"name": "Stretch", "type": NodeType.TASK, "recurring_template_id": 999})
        store.insert({"name": "Other", "type": NodeType.TASK, "recurring_template_id": template.id})

        found = store.find_recent_instances("Stretch", template.id, None, since=NOW - timedelta(seconds=60))

        assert [n.id for n in found] == [fresh.id]

    def test_old_instances_ignored(self, path):
        store = JsonFileStore(path, clock=lambda: NOW - timedelta(minutes=5))
        store.insert({"name": "Stretch", "type": NodeType.TASK, "recurring_template_id": 1})
        assert store.find_recent_instances("Stretch", 1, None, since=NOW - timedelta(seconds=60)) == []

    def test_aware_since_compares_with_naive_created_at(self, store):
        store.insert({"name": "Stretch", "type": NodeType.TASK, "recurring_template_id": 1})
        since = (NOW - timedelta(seconds=60)).astimezone()
        assert len(store.find_recent_instances("Stretch", 1, None, since=since)) == 1
        later = (NOW + timedelta(seconds=60)).astimezone()
        assert store.find_recent_instances("Stretch", 1, None, since=later) == []
