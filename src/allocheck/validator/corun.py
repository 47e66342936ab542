# src/allocheck/validator/corun.py
"""
@brief
Cycle detection over co-run task groups.

@details
Each co-run rule declares a group of tasks that must run together. The
group is modelled as a clique: every member is a neighbour of every other
member, self-loops excluded. A three-colour depth-first traversal finds
back-edges. Traversal state is local to one group, so rules are judged
independently of each other.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import Enum

from allocheck.schemas.models import EntityKind, IssueType, Severity, ValidationIssue
from allocheck.schemas.rules import CoRunRule
from allocheck.validator.common import is_blank, make_issue

logger = logging.getLogger(__name__)


class _Color(Enum):
    WHITE = 0  # unvisited
    GRAY = 1  # on the traversal stack
    BLACK = 2  # done


def build_adjacency(group: Sequence[str]) -> dict[str, list[str]]:
    """
    @brief
    Clique adjacency for one co-run group.

    @details
    Members keep their first-seen order; repeated and blank task IDs are
    collapsed or dropped, and no task is its own neighbour.
    """
    members: list[str] = []
    for task_id in group:
        if not is_blank(task_id) and task_id not in members:
            members.append(task_id)
    return {m: [n for n in members if n != m] for m in members}


def find_cycle_root(adjacency: dict[str, list[str]]) -> tuple[str, str] | None:
    """
    @brief
    Run the three-colour DFS and return the first cycle found.

    @returns
        (root, target): the task whose traversal detected the cycle and the
        on-stack task reached by the back-edge; None for an acyclic group.
    """
    color = {node: _Color.WHITE for node in adjacency}

    def visit(node: str) -> str | None:
        color[node] = _Color.GRAY
        for neighbour in adjacency[node]:
            if color[neighbour] is _Color.GRAY:
                return neighbour
            if color[neighbour] is _Color.WHITE:
                target = visit(neighbour)
                if target is not None:
                    return target
        color[node] = _Color.BLACK
        return None

    for root in adjacency:
        if color[root] is not _Color.WHITE:
            continue
        target = visit(root)
        if target is not None:
            return root, target
    return None


def check_corun_cycles(rules: Iterable[CoRunRule]) -> list[ValidationIssue]:
    """
    @brief
    Emit one CircularCoRunGroup error per cyclic co-run group.

    @details
    Processing of a group stops at its first detected cycle, so each rule
    contributes at most one issue. Any group of two or more distinct tasks
    is cyclic under the clique model.
    """
    issues: list[ValidationIssue] = []
    for rule in rules:
        found = find_cycle_root(build_adjacency(rule.task_ids))
        if found is None:
            continue
        root, target = found
        logger.debug("Co-run rule %s: back-edge %s -> %s", rule.id, root, target)
        issues.append(
            make_issue(
                IssueType.CIRCULAR_CO_RUN_GROUP,
                Severity.ERROR,
                f"Circular co-run group detected involving TaskID {root}",
                EntityKind.TASK,
                root,
                field="group",
                value=", ".join(rule.task_ids),
                suggestions=[f"Review co-run rule {rule.id or rule.name or '(unnamed)'}"],
            )
        )
    return issues
