# tests/validator/test_summary.py
from __future__ import annotations

from allocheck.schemas.models import EntityKind, IssueType, Severity, ValidationIssue
from allocheck.validator.summary import summarize


def mk_issue(issue_type: IssueType, severity: Severity, kind: EntityKind) -> ValidationIssue:
    return ValidationIssue(
        type=issue_type,
        severity=severity,
        message="m",
        affected_entity=kind,
        entity_id="X",
    )


def test_empty_issue_list_is_valid() -> None:
    summary = summarize([])

    assert summary.is_valid is True
    assert summary.total == 0
    assert summary.by_entity == {}
    assert summary.by_type == {}


def test_warnings_alone_keep_dataset_valid() -> None:
    summary = summarize(
        [mk_issue(IssueType.PHASE_SLOT_SATURATION, Severity.WARNING, EntityKind.PHASE)]
    )

    assert summary.is_valid is True
    assert summary.warnings == 1
    assert summary.errors == 0


def test_counts_by_severity_entity_and_type() -> None:
    """
    @brief
    Breakdowns use plain string keys in first-seen order.
    """
    # --- Arrange ---
    issues = [
        mk_issue(IssueType.DUPLICATE_ID, Severity.ERROR, EntityKind.CLIENT),
        mk_issue(IssueType.SKILL_COVERAGE, Severity.ERROR, EntityKind.TASK),
        mk_issue(IssueType.MAX_CONCURRENCY_FEASIBILITY, Severity.WARNING, EntityKind.TASK),
        mk_issue(IssueType.DUPLICATE_ID, Severity.ERROR, EntityKind.CLIENT),
    ]

    # --- Act ---
    summary = summarize(issues)

    # --- Assert ---
    assert summary.is_valid is False
    assert (summary.total, summary.errors, summary.warnings) == (4, 3, 1)
    assert list(summary.by_entity) == ["client", "task"]
    assert summary.by_entity["task"].errors == 1
    assert summary.by_entity["task"].warnings == 1
    assert summary.by_type == {
        "DuplicateID": 2,
        "SkillCoverage": 1,
        "MaxConcurrencyFeasibility": 1,
    }
    assert summary.model_dump()["by_entity"]["client"] == {"errors": 2, "warnings": 0}
