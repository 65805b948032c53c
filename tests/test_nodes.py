"""Tests for the node data model."""

from datetime import date, datetime

import pytest

from orgtracker.core.nodes import Node, NodeType, apply_completion, build_tree
from orgtracker.core.recurrence import RecurrenceType
from orgtracker.errors import NodeValidationError, RecurrenceError


@pytest.fixture
def rows():
    return [
        {"id": 1, "name": "Household", "type": "top_category", "root_category": "household"},
        {"id": 2, "name": "Kitchen", "type": "category", "parent_id": 1},
        {"id": 3, "name": "Clean oven", "type": "task", "parent_id": 2, "deadline": "2025-02-01"},
        {"id": 4, "name": "Buy soap", "type": "task", "parent_id": 2, "importance": 4},
        {"id": 5, "name": "Job", "type": "top_category", "root_category": "job"},
        {"id": 6, "name": "Orphan", "type": "task", "parent_id": 99},
    ]


class TestFromRow:
    def test_task_defaults_importance(self):
        node = Node.from_row({"id": 1, "name": "T", "type": "task"})
        assert node.importance == 1
        assert node.recurrence_type == RecurrenceType.NONE
        assert node.recurrence_interval == 1
        assert node.is_completed is False

    def test_category_has_no_importance(self):
        node = Node.from_row({"id": 1, "name": "C", "type": "category"})
        assert node.importance is None

    def test_parses_dates(self):
        node = Node.from_row(
            {
                "id": 1,
                "name": "T",
                "type": "task",
                "deadline": "2025-03-01T00:00:00",
                "completed_at": "2025-02-01T10:00:00Z",
                "recurrence_end_date": "2025-12-31",
            }
        )
        assert node.deadline == date(2025, 3, 1)
        assert node.completed_at.year == 2025
        assert node.recurrence_end_date == date(2025, 12, 31)

    def test_unknown_type_raises(self):
        with pytest.raises(NodeValidationError):
            Node.from_row({"id": 1, "name": "X", "type": "project"})

    def test_unknown_recurrence_raises(self):
        with pytest.raises(RecurrenceError):
            Node.from_row({"id": 1, "name": "X", "type": "task", "recurrence_type": "hourly"})

    def test_to_row_round_trip(self):
        row = {
            "id": 7,
            "name": "Water plants",
            "type": "task",
            "deadline": "2025-01-20",
            "recurrence_type": "weekly",
            "recurrence_day_of_week": 1,
            "is_recurring_template": True,
        }
        out = Node.from_row(row).to_row()
        assert out["deadline"] == "2025-01-20"
        assert out["recurrence_type"] == "weekly"
        assert out["is_recurring_template"] is True
        assert "children" not in out


class TestLineage:
    def test_template_is_its_own_lineage(self, make_task):
        task = make_task(id=5, is_recurring_template=True)
        assert task.is_recurring
        assert task.lineage_id == 5

    def test_instance_points_at_template(self, make_task):
        task = make_task(id=9, recurring_template_id=5)
        assert task.is_recurring
        assert task.lineage_id == 5

    def test_plain_task(self, make_task):
        task = make_task()
        assert not task.is_recurring
        assert task.lineage_id is None


class TestValidate:
    def test_valid_task(self, make_task):
        task = make_task(importance=10, completion_time=3, recurrence_type=RecurrenceType.DAILY)
        assert task.validate() is task

    def test_empty_name(self, make_task):
        with pytest.raises(NodeValidationError):
            make_task(name="  ").validate()

    def test_category_with_deadline(self, make_category):
        category = make_category(deadline=date(2025, 1, 1))
        with pytest.raises(NodeValidationError, match="deadline"):
            category.validate()

    @pytest.mark.parametrize("importance", [0, 11])
    def test_importance_range(self, make_task, importance):
        with pytest.raises(NodeValidationError):
            make_task(importance=importance).validate()

    def test_negative_effort(self, make_task):
        with pytest.raises(NodeValidationError):
            make_task(completion_time=-1).validate()

    def test_template_cannot_reference_template(self, make_task):
        with pytest.raises(NodeValidationError):
            make_task(is_recurring_template=True, recurring_template_id=3).validate()

    def test_completed_at_without_completion(self, make_task):
        with pytest.raises(NodeValidationError):
            make_task(completed_at=datetime(2025, 1, 1)).validate()

    def test_bad_recurrence_interval(self, make_task):
        with pytest.raises(NodeValidationError):
            make_task(recurrence_type=RecurrenceType.DAILY, recurrence_interval=0).validate()


class TestBuildTree:
    def test_roots_keyed_by_root_category(self, rows):
        roots = build_tree(rows)
        assert set(roots) == {"household", "job"}

    def test_children_attached_in_order(self, rows):
        household = build_tree(rows)["household"]
        kitchen = household.children[0]
        assert kitchen.name == "Kitchen"
        assert [c.name for c in kitchen.children] == ["Clean oven", "Buy soap"]

    def test_orphans_dropped(self, rows):
        roots = build_tree(rows)
        names = {n.name for r in roots.values() for n in [r, *r.children]}
        assert "Orphan" not in names

    def test_missing_root_category_uses_default(self):
        roots = build_tree([{"id": 1, "name": "Root", "type": "top_category"}])
        assert list(roots) == ["default"]

    def test_parentless_task_joins_category_root(self):
        roots = build_tree(
            [
                {"id": 1, "name": "Home", "type": "category", "root_category": "Home"},
                {"id": 2, "name": "Child", "type": "task", "parent_id": 1},
                {"id": 3, "name": "Loose", "type": "task", "root_category": "Home"},
            ]
        )
        assert roots["Home"].id == 1
        assert [c.name for c in roots["Home"].children] == ["Child", "Loose"]

    def test_category_root_wins_over_earlier_task(self):
        roots = build_tree(
            [
                {"id": 1, "name": "Loose", "type": "task", "root_category": "Home"},
                {"id": 2, "name": "Home", "type": "category", "root_category": "Home"},
            ]
        )
        assert roots["Home"].id == 2
        assert [c.name for c in roots["Home"].children] == ["Loose"]

    def test_parentless_tasks_share_synthetic_root(self):
        roots = build_tree(
            [
                {"id": 1, "name": "Renew passport", "type": "task"},
                {"id": 2, "name": "File taxes", "type": "task"},
            ]
        )
        root = roots["default"]
        assert root.type == NodeType.TOP_CATEGORY
        assert root.name == "default"
        assert [c.name for c in root.children] == ["Renew passport", "File taxes"]

    def test_single_parentless_task_is_its_own_root(self):
        roots = build_tree([{"id": 1, "name": "Renew passport", "type": "task"}])
        assert roots["default"].id == 1
        assert roots["default"].children == []


class TestApplyCompletion:
    def test_marks_completed_with_timestamp(self, make_task):
        now = datetime(2025, 1, 15, 9, 30)
        done = apply_completion(make_task(), True, "done!", now=now)
        assert done.is_completed is True
        assert done.completed_at == now
        assert done.completion_comment == "done!"

    def test_does_not_mutate_input(self, make_task):
        task = make_task()
        apply_completion(task, True, now=datetime(2025, 1, 15))
        assert task.is_completed is False
        assert task.completed_at is None

    def test_uncomplete_clears_timestamp(self, make_task):
        task = make_task(is_completed=True, completed_at=datetime(2025, 1, 1))
        undone = apply_completion(task, False)
        assert undone.is_completed is False
        assert undone.completed_at is None

    def test_recomplete_keeps_original_timestamp(self, make_task):
        first = datetime(2025, 1, 1)
        task = make_task(is_completed=True, completed_at=first)
        again = apply_completion(task, True, now=datetime(2025, 1, 5))
        assert again.completed_at == first

    def test_node_type_enum(self, make_task):
        assert make_task().type == NodeType.TASK
