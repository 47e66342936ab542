# src/allocheck/validator/phase_checks.py
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from allocheck.schemas.models import EntityKind, IssueType, Severity, Task, ValidationIssue, Worker
from allocheck.schemas.rules import PhaseWindowRule
from allocheck.validator.common import as_number, entity_ref, make_issue, phases, string_set


def check_phase_windows(
    rules: Iterable[PhaseWindowRule], tasks: Sequence[Task]
) -> list[ValidationIssue]:
    """
    @brief
    Compare each task's preferred phases with its phase-window rule.

    @details
    The rule's task is the first task carrying that TaskID. Rules naming an
    unknown task, and tasks without preferred phases, are skipped. One
    ConflictingPhaseWindow error is emitted per offending rule, not per
    disallowed phase.
    """
    first_by_id: dict[str, tuple[int, Task]] = {}
    for index, task in enumerate(tasks):
        if task.task_id is not None:
            first_by_id.setdefault(task.task_id, (index, task))

    issues: list[ValidationIssue] = []
    for rule in rules:
        located = first_by_id.get(rule.task_id)
        if located is None:
            continue
        index, task = located
        preferred = task.preferred_phases or []
        if not preferred:
            continue

        disallowed = [p for p in preferred if not rule.allows(p)]
        if not disallowed:
            continue

        issues.append(
            make_issue(
                IssueType.CONFLICTING_PHASE_WINDOW,
                Severity.ERROR,
                f"Task {task.task_id} preferred phases conflict with phase-window rule "
                f"(disallowed: {', '.join(str(p) for p in disallowed)})",
                EntityKind.TASK,
                task.task_id,
                field="PreferredPhases",
                value=", ".join(str(p) for p in preferred),
                row=index,
                suggestions=[f"Allowed phases: {rule.describe_allowed()}"],
            )
        )
    return issues


def phase_demand(tasks: Sequence[Task]) -> dict[int, float]:
    """Duration units requested per phase; a task counts in full for every phase it prefers."""
    demand: dict[int, float] = defaultdict(float)
    for task in tasks:
        duration = as_number(task.duration) or 0.0
        for phase in phases(task.preferred_phases):
            demand[phase] += duration
    return dict(demand)


def phase_supply(workers: Sequence[Worker]) -> dict[int, int]:
    """Worker slots per phase; every occurrence in AvailableSlots is one slot."""
    supply: dict[int, int] = defaultdict(int)
    for worker in workers:
        for phase in phases(worker.available_slots):
            supply[phase] += 1
    return dict(supply)


def check_phase_capacity(
    workers: Sequence[Worker], tasks: Sequence[Task]
) -> list[ValidationIssue]:
    """
    @brief
    Warn about phases whose task demand exceeds worker supply.

    @details
    A capacity heuristic, not a proof of infeasibility: demand assumes each
    task occupies every phase it prefers. Phases are reported in ascending
    order; a phase with no worker slots has a supply of 0.
    """
    demand = phase_demand(tasks)
    supply = phase_supply(workers)

    issues: list[ValidationIssue] = []
    for phase in sorted(demand):
        needed = demand[phase]
        available = supply.get(phase, 0)
        if needed <= available:
            continue
        needed_text = int(needed) if needed.is_integer() else needed
        issues.append(
            make_issue(
                IssueType.PHASE_SLOT_SATURATION,
                Severity.WARNING,
                f"Phase {phase} is oversubscribed: total task durations ({needed_text}) "
                f"> total worker slots ({available})",
                EntityKind.PHASE,
                str(phase),
                field="AvailableSlots",
                value={"demand": needed_text, "supply": available},
            )
        )
    return issues


def qualified_workers(task: Task, workers: Sequence[Worker]) -> list[Worker]:
    """
    @brief
    Workers sharing at least one skill and at least one phase with the task.

    @details
    Both tests are "any overlap", so the count neither proves that one worker
    covers all required skills nor that the overlapping phases coincide.
    """
    required = set(task.required_skills or ())
    preferred = set(task.preferred_phases or ())
    return [
        w
        for w in workers
        if required & string_set(w.skills) and preferred & set(phases(w.available_slots))
    ]


def check_max_concurrency(
    workers: Sequence[Worker], tasks: Sequence[Task]
) -> list[ValidationIssue]:
    """Warn when MaxConcurrent exceeds the number of qualified, available workers."""
    issues: list[ValidationIssue] = []
    for index, task in enumerate(tasks):
        if task.max_concurrent is None:
            continue
        count = len(qualified_workers(task, workers))
        if task.max_concurrent <= count:
            continue
        ref = entity_ref(EntityKind.TASK, task.task_id, index)
        issues.append(
            make_issue(
                IssueType.MAX_CONCURRENCY_FEASIBILITY,
                Severity.WARNING,
                f"Task {ref} MaxConcurrent ({task.max_concurrent}) exceeds qualified, "
                f"available workers ({count})",
                EntityKind.TASK,
                ref,
                field="MaxConcurrent",
                value=task.max_concurrent,
                row=index,
            )
        )
    return issues
