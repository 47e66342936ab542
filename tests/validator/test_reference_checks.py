# tests/validator/test_reference_checks.py
from __future__ import annotations

from allocheck.schemas.models import Client, IssueType, Severity, Task, Worker
from allocheck.validator.reference_checks import check_skill_coverage, check_unknown_references


def test_unknown_reference_reported_and_cleared_once_task_exists() -> None:
    """
    @brief
    A dangling RequestedTaskIDs entry disappears when the task is added.
    """
    # --- Arrange ---
    clients = [Client(client_id="C1", client_name="Acme", requested_task_ids=["T9"])]
    tasks = [Task(task_id="T1", task_name="ETL", duration=1)]

    # --- Act ---
    before = check_unknown_references(clients, tasks)
    after = check_unknown_references(clients, tasks + [Task(task_id="T9", task_name="New")])

    # --- Assert ---
    assert len(before) == 1
    assert before[0].type == IssueType.UNKNOWN_REFERENCE
    assert before[0].severity == Severity.ERROR
    assert before[0].affected_entity == "client"
    assert before[0].entity_id == "C1"
    assert before[0].value == "T9"
    assert after == []


def test_one_issue_per_unmatched_entry() -> None:
    clients = [Client(client_id="C1", requested_task_ids=["T1", "T8", "T9"])]
    tasks = [Task(task_id="T1")]

    issues = check_unknown_references(clients, tasks)

    assert [i.value for i in issues] == ["T8", "T9"]


def test_empty_or_absent_requested_ids_are_tolerated() -> None:
    clients = [
        Client(client_id="C1", requested_task_ids=[]),
        Client(client_id="C2", requested_task_ids=None),
        Client(client_id="C3"),
    ]

    assert check_unknown_references(clients, []) == []


def test_missing_skill_reported_regardless_of_other_data() -> None:
    """
    @brief
    A skill nobody offers yields exactly one SkillCoverage error for the task.
    """
    # --- Arrange ---
    workers = [
        Worker(worker_id="W1", skills=["python", "sql"]),
        Worker(worker_id="W2", skills=["go"]),
    ]
    tasks = [
        Task(task_id="T1", required_skills=["python"]),
        Task(task_id="T2", required_skills=["Rust", "go"]),
    ]

    # --- Act ---
    issues = check_skill_coverage(workers, tasks)

    # --- Assert ---
    assert len(issues) == 1
    assert issues[0].type == IssueType.SKILL_COVERAGE
    assert issues[0].severity == Severity.ERROR
    assert issues[0].entity_id == "T2"
    assert issues[0].value == "Rust"


def test_same_gap_reported_for_each_task_but_once_within_a_task() -> None:
    tasks = [
        Task(task_id="T1", required_skills=["rust", "rust"]),
        Task(task_id="T2", required_skills=["rust"]),
    ]

    issues = check_skill_coverage([], tasks)

    assert [i.entity_id for i in issues] == ["T1", "T2"]


def test_malformed_worker_skills_do_not_cover_anything() -> None:
    workers = [Worker(worker_id="W1", skills="rust")]
    tasks = [Task(task_id="T1", required_skills=["rust"])]

    assert len(check_skill_coverage(workers, tasks)) == 1
