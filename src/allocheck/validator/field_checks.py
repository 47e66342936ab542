# src/allocheck/validator/field_checks.py
"""
@brief
Per-entity field checks: presence, identifier uniqueness, value ranges.

@details
Every function walks its collections in input order and returns a fresh
list of issues; nothing is shared between calls. Presence, uniqueness and
range checks cover clients, then workers, then tasks. The worker-list,
attribute-JSON and worker-load checks cover a single entity kind each.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from allocheck.schemas.models import (
    Client,
    EntityKind,
    IssueType,
    Severity,
    Task,
    ValidationIssue,
    Worker,
)
from allocheck.validator.common import as_number, entity_ref, is_blank, is_phase, make_issue


@dataclass(frozen=True)
class _KindFields:
    kind: EntityKind
    id_attr: str
    name_attr: str
    id_label: str
    name_label: str


_CLIENT = _KindFields(EntityKind.CLIENT, "client_id", "client_name", "ClientID", "ClientName")
_WORKER = _KindFields(EntityKind.WORKER, "worker_id", "worker_name", "WorkerID", "WorkerName")
_TASK = _KindFields(EntityKind.TASK, "task_id", "task_name", "TaskID", "TaskName")


def _check_presence(rows: Sequence[Any], kf: _KindFields) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for index, row in enumerate(rows):
        entity_id = getattr(row, kf.id_attr)
        missing = [
            label
            for attr, label in ((kf.id_attr, kf.id_label), (kf.name_attr, kf.name_label))
            if is_blank(getattr(row, attr))
        ]
        if not missing:
            continue
        kind_title = kf.kind.value.capitalize()
        issues.append(
            make_issue(
                IssueType.MISSING_REQUIRED_COLUMNS,
                Severity.ERROR,
                f"{kind_title} {index + 1} is missing required {' and '.join(missing)}",
                kf.kind,
                entity_ref(kf.kind, entity_id, index),
                field=", ".join(missing),
                row=index,
                suggestions=[f"Add the missing columns: {kf.id_label}, {kf.name_label}"],
            )
        )
    return issues


def _check_duplicates(rows: Sequence[Any], kf: _KindFields) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    seen: set[str] = set()
    for index, row in enumerate(rows):
        entity_id = getattr(row, kf.id_attr)
        if is_blank(entity_id):
            continue  # reported by the presence pass
        if entity_id in seen:
            issues.append(
                make_issue(
                    IssueType.DUPLICATE_ID,
                    Severity.ERROR,
                    f"Duplicate {kf.id_label} found: {entity_id}",
                    kf.kind,
                    entity_id,
                    field=kf.id_label,
                    value=entity_id,
                    row=index,
                )
            )
        else:
            seen.add(entity_id)
    return issues


def check_required_fields(
    clients: Sequence[Client], workers: Sequence[Worker], tasks: Sequence[Task]
) -> list[ValidationIssue]:
    """
    @brief
    Flag entities whose identifier or name is empty or absent.

    @details
    One error per offending entity. When the identifier itself is missing,
    the issue is addressed by the positional placeholder "{kind}-{index}".
    """
    return (
        _check_presence(clients, _CLIENT)
        + _check_presence(workers, _WORKER)
        + _check_presence(tasks, _TASK)
    )


def check_duplicate_ids(
    clients: Sequence[Client], workers: Sequence[Worker], tasks: Sequence[Task]
) -> list[ValidationIssue]:
    """
    @brief
    Flag every repeated identifier after its first occurrence.

    @details
    The seen-set starts empty for each entity kind. The first occurrence is
    accepted and never reported; each later one yields one DuplicateID.
    """
    return (
        _check_duplicates(clients, _CLIENT)
        + _check_duplicates(workers, _WORKER)
        + _check_duplicates(tasks, _TASK)
    )


def check_ranges(
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
    *,
    priority_min: int = 1,
    priority_max: int = 5,
    min_duration: int = 1,
) -> list[ValidationIssue]:
    """
    @brief
    Validate numeric domains and the worker skill set.

    @details
    PriorityLevel must be an integer in [priority_min, priority_max] and
    Duration must be at least min_duration. Missing or non-numeric values,
    and fractional priorities, are reported as range errors rather than
    raised. An empty or non-list Skills column is a warning.
    """
    issues: list[ValidationIssue] = []

    # (1) Client priority domain
    for index, client in enumerate(clients):
        level = as_number(client.priority_level)
        if level is not None and level.is_integer() and priority_min <= level <= priority_max:
            continue
        ref = entity_ref(EntityKind.CLIENT, client.client_id, index)
        issues.append(
            make_issue(
                IssueType.OUT_OF_RANGE_VALUE,
                Severity.ERROR,
                f"Client {ref} PriorityLevel must be an integer between "
                f"{priority_min}-{priority_max}, got {client.priority_level!r}",
                EntityKind.CLIENT,
                ref,
                field="PriorityLevel",
                value=client.priority_level,
                row=index,
            )
        )

    # (2) Worker skill set
    for index, worker in enumerate(workers):
        skills = worker.skills
        if isinstance(skills, list) and any(not is_blank(s) for s in skills):
            continue
        ref = entity_ref(EntityKind.WORKER, worker.worker_id, index)
        reason = "is empty" if isinstance(skills, list) or skills is None else "is not a list"
        issues.append(
            make_issue(
                IssueType.MISSING_REQUIRED_COLUMNS,
                Severity.WARNING,
                f"Worker {ref} Skills {reason}; it should be a non-empty list",
                EntityKind.WORKER,
                ref,
                field="Skills",
                value=skills,
                row=index,
            )
        )

    # (3) Task duration lower bound
    for index, task in enumerate(tasks):
        duration = as_number(task.duration)
        if duration is not None and duration >= min_duration:
            continue
        ref = entity_ref(EntityKind.TASK, task.task_id, index)
        issues.append(
            make_issue(
                IssueType.OUT_OF_RANGE_VALUE,
                Severity.ERROR,
                f"Task {ref} Duration must be at least {min_duration}, got {task.duration!r}",
                EntityKind.TASK,
                ref,
                field="Duration",
                value=task.duration,
                row=index,
            )
        )

    return issues


def check_malformed_lists(workers: Sequence[Worker]) -> list[ValidationIssue]:
    """
    @brief
    Flag list-valued worker columns that do not hold what they should.

    @details
    Every non-integer AvailableSlots entry is one error. A non-empty Skills
    value that is not a list is one more error, on top of the advisory
    Skills warning of the range pass.
    """
    issues: list[ValidationIssue] = []
    for index, worker in enumerate(workers):
        ref = entity_ref(EntityKind.WORKER, worker.worker_id, index)
        for pos, slot in enumerate(worker.available_slots or ()):
            if is_phase(slot):
                continue
            issues.append(
                make_issue(
                    IssueType.MALFORMED_LIST,
                    Severity.ERROR,
                    f"Worker {ref} has non-numeric value in AvailableSlots at index {pos}",
                    EntityKind.WORKER,
                    ref,
                    field=f"AvailableSlots[{pos}]",
                    value=slot,
                    row=index,
                )
            )

        skills = worker.skills
        if isinstance(skills, str) and skills:
            issues.append(
                make_issue(
                    IssueType.MALFORMED_LIST,
                    Severity.ERROR,
                    f"Worker {ref} has malformed Skills list",
                    EntityKind.WORKER,
                    ref,
                    field="Skills",
                    value=skills,
                    row=index,
                    suggestions=["Provide Skills as a list of strings"],
                )
            )
    return issues


def check_attributes_json(clients: Sequence[Client]) -> list[ValidationIssue]:
    """Flag AttributesJSON strings that do not decode to a JSON object."""
    issues: list[ValidationIssue] = []
    for index, client in enumerate(clients):
        raw = client.attributes_json
        if not isinstance(raw, str) or not raw.strip():
            continue
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, dict):
            continue
        ref = entity_ref(EntityKind.CLIENT, client.client_id, index)
        issues.append(
            make_issue(
                IssueType.BROKEN_JSON,
                Severity.ERROR,
                f"Client {ref} has invalid JSON in AttributesJSON",
                EntityKind.CLIENT,
                ref,
                field="AttributesJSON",
                value=raw,
                row=index,
            )
        )
    return issues


def check_overloaded_workers(workers: Sequence[Worker]) -> list[ValidationIssue]:
    """Flag workers whose MaxLoadPerPhase exceeds their number of available slots."""
    issues: list[ValidationIssue] = []
    for index, worker in enumerate(workers):
        if worker.max_load_per_phase is None or worker.available_slots is None:
            continue
        slot_count = len(worker.available_slots)
        if slot_count >= worker.max_load_per_phase:
            continue
        ref = entity_ref(EntityKind.WORKER, worker.worker_id, index)
        issues.append(
            make_issue(
                IssueType.OVERLOADED_WORKER,
                Severity.ERROR,
                f"Worker {ref} has MaxLoadPerPhase ({worker.max_load_per_phase}) "
                f"greater than AvailableSlots ({slot_count})",
                EntityKind.WORKER,
                ref,
                field="MaxLoadPerPhase",
                value=worker.max_load_per_phase,
                row=index,
            )
        )
    return issues
