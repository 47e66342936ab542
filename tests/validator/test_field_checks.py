# tests/validator/test_field_checks.py
from __future__ import annotations

import pytest

from allocheck.schemas.models import Client, IssueType, Severity, Task, Worker
from allocheck.validator.field_checks import (
    check_attributes_json,
    check_duplicate_ids,
    check_malformed_lists,
    check_overloaded_workers,
    check_ranges,
    check_required_fields,
)


# -----------------------------
# HELPER FACTORIES
# -----------------------------
def mk_client(cid: str | None = "C1", name: str | None = "Acme", priority=3, **kw) -> Client:
    return Client(client_id=cid, client_name=name, priority_level=priority, **kw)


def mk_worker(wid: str | None = "W1", name: str | None = "Ada", **kw) -> Worker:
    kw.setdefault("skills", ["python"])
    kw.setdefault("available_slots", [1])
    return Worker(worker_id=wid, worker_name=name, **kw)


def mk_task(tid: str | None = "T1", name: str | None = "ETL", duration=1, **kw) -> Task:
    return Task(task_id=tid, task_name=name, duration=duration, **kw)


# -----------------------------
# Presence
# -----------------------------
def test_missing_identifier_uses_positional_placeholder() -> None:
    """
    @brief
    Entities without an identifier stay addressable.

    @details
    The second client lacks ClientID; its issue must be attributed to the
    placeholder "client-1" (0-based position).
    """
    # --- Arrange ---
    clients = [mk_client("C1"), mk_client(None)]

    # --- Act ---
    issues = check_required_fields(clients, [], [])

    # --- Assert ---
    assert len(issues) == 1
    assert issues[0].type == IssueType.MISSING_REQUIRED_COLUMNS
    assert issues[0].severity == Severity.ERROR
    assert issues[0].entity_id == "client-1"
    assert issues[0].row == 1


def test_one_presence_error_per_entity_even_when_both_fields_missing() -> None:
    issues = check_required_fields([], [mk_worker(None, None)], [])

    assert len(issues) == 1
    assert issues[0].field == "WorkerID, WorkerName"
    assert issues[0].entity_id == "worker-0"


def test_blank_name_counts_as_missing() -> None:
    issues = check_required_fields([], [], [mk_task("T7", "   ")])

    assert len(issues) == 1
    assert issues[0].entity_id == "T7"
    assert issues[0].field == "TaskName"


def test_presence_pass_covers_clients_then_workers_then_tasks() -> None:
    issues = check_required_fields([mk_client(name="")], [mk_worker(name="")], [mk_task(name="")])

    assert [i.affected_entity for i in issues] == ["client", "worker", "task"]


# -----------------------------
# Uniqueness
# -----------------------------
def test_duplicate_reported_on_second_occurrence_only() -> None:
    """
    @brief
    First occurrence is accepted, the repeat is flagged.
    """
    # --- Arrange ---
    clients = [mk_client("C1"), mk_client("C2"), mk_client("C1")]

    # --- Act ---
    issues = check_duplicate_ids(clients, [], [])

    # --- Assert ---
    assert len(issues) == 1
    assert issues[0].type == IssueType.DUPLICATE_ID
    assert issues[0].entity_id == "C1"
    assert issues[0].row == 2


def test_every_repeat_after_first_is_reported() -> None:
    workers = [mk_worker("W1"), mk_worker("W1"), mk_worker("W1")]

    issues = check_duplicate_ids([], workers, [])

    assert [i.row for i in issues] == [1, 2]


def test_seen_set_is_per_entity_kind() -> None:
    # The same identifier in different collections is not a duplicate
    issues = check_duplicate_ids([mk_client("X1")], [mk_worker("X1")], [mk_task("X1")])

    assert issues == []


def test_blank_identifiers_are_not_duplicates() -> None:
    issues = check_duplicate_ids([mk_client(None), mk_client(None)], [], [])

    assert issues == []


# -----------------------------
# Ranges
# -----------------------------
@pytest.mark.parametrize("priority", [1, 3, 5, "4", 4.0])
def test_priority_inside_domain_passes(priority) -> None:
    assert check_ranges([mk_client(priority=priority)], [], []) == []


@pytest.mark.parametrize("priority", [0, 6, -1, "abc", None, "nan", 2.5, "3.5"])
def test_priority_outside_domain_or_non_numeric_fails(priority) -> None:
    issues = check_ranges([mk_client(priority=priority)], [], [])

    assert len(issues) == 1
    assert issues[0].type == IssueType.OUT_OF_RANGE_VALUE
    assert issues[0].severity == Severity.ERROR
    assert issues[0].field == "PriorityLevel"


def test_priority_bounds_are_configurable() -> None:
    issues = check_ranges([mk_client(priority=5)], [], [], priority_min=1, priority_max=4)

    assert len(issues) == 1


@pytest.mark.parametrize("duration,expected", [(1, 0), (4, 0), (0, 1), (-2, 1), ("x", 1), (None, 1)])
def test_task_duration_lower_bound(duration, expected) -> None:
    issues = check_ranges([], [], [mk_task(duration=duration)])

    assert len(issues) == expected
    assert all(i.field == "Duration" for i in issues)


def test_empty_or_malformed_skills_is_a_warning() -> None:
    """
    @brief
    Skills should be a non-empty list.

    @details
    An empty list and a plain string each produce one warning; a proper
    list produces none.
    """
    # --- Arrange ---
    workers = [
        mk_worker("W1", skills=[]),
        mk_worker("W2", skills="python,sql"),
        mk_worker("W3", skills=["sql"]),
    ]

    # --- Act ---
    issues = check_ranges([], workers, [])

    # --- Assert ---
    assert [i.entity_id for i in issues] == ["W1", "W2"]
    assert all(i.severity == Severity.WARNING for i in issues)
    assert "not a list" in issues[1].message


# -----------------------------
# Slot lists, attribute JSON, worker load
# -----------------------------
def test_malformed_slot_entries_reported_individually() -> None:
    issues = check_malformed_lists([mk_worker(available_slots=[1, "x", 2.5, 3])])

    assert [i.field for i in issues] == ["AvailableSlots[1]", "AvailableSlots[2]"]
    assert all(i.type == IssueType.MALFORMED_LIST for i in issues)


def test_non_list_skills_is_a_malformed_list_error() -> None:
    """
    @brief
    A Skills string blocks validity, unlike the advisory range warning.

    @details
    An empty string and a proper list are not malformed.
    """
    # --- Arrange ---
    workers = [
        mk_worker("W1", skills="a,b"),
        mk_worker("W2", skills=""),
        mk_worker("W3", skills=["a"]),
    ]

    # --- Act ---
    issues = check_malformed_lists(workers)

    # --- Assert ---
    assert len(issues) == 1
    assert issues[0].type == IssueType.MALFORMED_LIST
    assert issues[0].severity == Severity.ERROR
    assert issues[0].entity_id == "W1"
    assert issues[0].field == "Skills"
    assert issues[0].value == "a,b"
    assert "has malformed Skills list" in issues[0].message


def test_issue_value_is_detached_from_source_row() -> None:
    slots = ["x"]
    worker = mk_worker(available_slots=[1, slots])

    issues = check_malformed_lists([worker])
    slots.append("y")
    worker.available_slots.append("z")

    assert issues[0].value == ["x"]


@pytest.mark.parametrize(
    "attributes,expected",
    [({"a": 1}, 0), ('{"a": 1}', 0), ("", 0), ("{broken", 1), ("[1, 2]", 1)],
)
def test_attributes_json_must_hold_an_object(attributes, expected) -> None:
    issues = check_attributes_json([mk_client(attributes_json=attributes)])

    assert len(issues) == expected
    assert all(i.type == IssueType.BROKEN_JSON for i in issues)


def test_overloaded_worker_when_load_exceeds_slots() -> None:
    workers = [
        mk_worker("W1", available_slots=[1], max_load_per_phase=2),
        mk_worker("W2", available_slots=[1, 2], max_load_per_phase=2),
        mk_worker("W3", available_slots=[1]),
    ]

    issues = check_overloaded_workers(workers)

    assert [i.entity_id for i in issues] == ["W1"]
    assert issues[0].type == IssueType.OVERLOADED_WORKER
