# src/allocheck/validator/reference_checks.py
from __future__ import annotations

from collections.abc import Sequence

from allocheck.schemas.models import (
    Client,
    EntityKind,
    IssueType,
    Severity,
    Task,
    ValidationIssue,
    Worker,
)
from allocheck.validator.common import entity_ref, is_blank, make_issue, string_set


def check_unknown_references(
    clients: Sequence[Client], tasks: Sequence[Task]
) -> list[ValidationIssue]:
    """
    @brief
    Verify that every requested TaskID names an existing task.

    @details
    One UnknownReference error per unmatched entry, attributed to the
    requesting client. Empty or absent RequestedTaskIDs are accepted.
    """
    known_ids = {t.task_id for t in tasks if not is_blank(t.task_id)}
    issues: list[ValidationIssue] = []

    for index, client in enumerate(clients):
        ref = entity_ref(EntityKind.CLIENT, client.client_id, index)
        for task_id in client.requested_task_ids or ():
            if task_id in known_ids:
                continue
            issues.append(
                make_issue(
                    IssueType.UNKNOWN_REFERENCE,
                    Severity.ERROR,
                    f"Client {ref} references unknown TaskID: {task_id}",
                    EntityKind.CLIENT,
                    ref,
                    field="RequestedTaskIDs",
                    value=task_id,
                    row=index,
                    suggestions=["Remove the reference or add the missing task"],
                )
            )
    return issues


def check_skill_coverage(
    workers: Sequence[Worker], tasks: Sequence[Task]
) -> list[ValidationIssue]:
    """
    @brief
    Report required skills that no worker offers.

    @details
    Builds the union of all worker skills, then emits one SkillCoverage
    error per missing skill per task. Repeats of a skill within one task
    are reported once; the same gap in different tasks is reported for
    each task.
    """
    offered: set[str] = set()
    for worker in workers:
        offered |= string_set(worker.skills)

    issues: list[ValidationIssue] = []
    for index, task in enumerate(tasks):
        ref = entity_ref(EntityKind.TASK, task.task_id, index)
        reported: set[str] = set()
        for skill in task.required_skills or ():
            if skill in offered or skill in reported:
                continue
            reported.add(skill)
            issues.append(
                make_issue(
                    IssueType.SKILL_COVERAGE,
                    Severity.ERROR,
                    f"Required skill '{skill}' for Task {ref} not covered by any worker",
                    EntityKind.TASK,
                    ref,
                    field="RequiredSkills",
                    value=skill,
                    row=index,
                )
            )
    return issues
