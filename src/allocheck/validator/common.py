# src/allocheck/validator/common.py
from __future__ import annotations

import copy
import math
from collections.abc import Iterable
from typing import Any

from allocheck.schemas.models import EntityKind, IssueType, Severity, ValidationIssue


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def as_number(value: Any) -> float | None:
    """
    @brief
    Interpret a raw cell as a finite number.

    @details
    Accepts ints, floats and numeric strings. Booleans, NaN, infinities and
    anything unparsable map to None so callers can report them instead of
    raising.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def is_phase(value: Any) -> bool:
    """Phase numbers are plain integers."""
    return isinstance(value, int) and not isinstance(value, bool)


def phases(values: Iterable[Any] | None) -> list[int]:
    """Integer phase entries of a slot/phase list, in order, duplicates kept."""
    return [v for v in (values or ()) if is_phase(v)]


def string_set(values: Any) -> set[str]:
    """Members of a list-valued skill column; anything else is an empty set."""
    if not isinstance(values, list):
        return set()
    return {v for v in values if isinstance(v, str)}


def entity_ref(kind: EntityKind, entity_id: Any, index: int) -> str:
    """Entity identifier, or the positional placeholder "{kind}-{index}"."""
    if is_blank(entity_id):
        return f"{kind.value}-{index}"
    return str(entity_id)


def make_issue(
    issue_type: IssueType,
    severity: Severity,
    message: str,
    kind: EntityKind,
    entity_id: str,
    *,
    field: str | None = None,
    value: Any = None,
    row: int | None = None,
    suggestions: list[str] | None = None,
) -> ValidationIssue:
    """
    @brief
    Build one immutable ValidationIssue.

    @details
    Central constructor for all checks so every issue carries the same
    shape regardless of which pass produced it. List and dict values are
    deep-copied, so later edits to the source row do not reach the issue.
    """
    return ValidationIssue(
        type=issue_type,
        severity=severity,
        message=message,
        affected_entity=kind,
        entity_id=entity_id,
        field=field,
        value=copy.deepcopy(value) if isinstance(value, (list, dict)) else value,
        row=row,
        suggestions=list(suggestions or ()),
    )
