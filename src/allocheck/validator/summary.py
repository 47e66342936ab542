# src/allocheck/validator/summary.py
from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from allocheck.schemas.models import Severity, ValidationIssue


class EntityCounts(BaseModel):
    errors: int = 0
    warnings: int = 0


class ValidationSummary(BaseModel):
    """
    @brief
    Consumer-side view of one validation run.

    @details
    `is_valid` is True when no issue has error severity; warnings alone
    never invalidate a dataset. Breakdowns keep first-seen order of the
    issue list.
    """

    is_valid: bool
    total: int = 0
    errors: int = 0
    warnings: int = 0
    by_entity: dict[str, EntityCounts] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)


def _plain(value: Any) -> str:
    return str(value.value if isinstance(value, Enum) else value)


def summarize(issues: Iterable[ValidationIssue]) -> ValidationSummary:
    """Count issues by severity, by affected entity kind and by issue type."""
    summary = ValidationSummary(is_valid=True)
    for issue in issues:
        summary.total += 1
        counts = summary.by_entity.setdefault(_plain(issue.affected_entity), EntityCounts())
        if issue.severity == Severity.ERROR:
            summary.errors += 1
            counts.errors += 1
        else:
            summary.warnings += 1
            counts.warnings += 1
        issue_type = _plain(issue.type)
        summary.by_type[issue_type] = summary.by_type.get(issue_type, 0) + 1
    summary.is_valid = summary.errors == 0
    return summary
