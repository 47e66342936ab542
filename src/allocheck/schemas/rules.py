# src/allocheck/schemas/rules.py
"""
@brief
Business rule variants as a pydantic discriminated union.

@details
Each rule kind has one concrete model keyed by its `type` literal, so that
required parameters are enforced per variant at deserialization time.
The validation engine consumes only two of them: co-run groupings and
phase-window constraints. The remaining variants are carried so a full rule
set round-trips through the same contract.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, Field, TypeAdapter, ValidationError, field_validator

from allocheck.errors import DataError
from allocheck.schemas.models import _StrictBaseModel

RULE_TYPES = (
    "co-run",
    "slot-restriction",
    "load-limit",
    "phase-window",
    "pattern-match",
    "precedence-override",
)


class _RuleBase(_StrictBaseModel):
    """
    @brief
    Fields shared by every rule variant.
    """

    id: str | None = Field(None, description="Rule identifier")
    name: str = Field("", description="Short human-readable name")
    description: str = ""
    enabled: bool = Field(True, description="Disabled rules are ignored by the engine")
    priority: int = Field(1, ge=0)
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")


class CoRunRule(_RuleBase):
    """Tasks that must run together; the group is treated as a clique."""

    type: Literal["co-run"] = "co-run"
    task_ids: list[str] = Field(
        ...,
        validation_alias=AliasChoices("task_ids", "taskIds", "group"),
        serialization_alias="taskIds",
    )
    must_run_together: bool = Field(True, alias="mustRunTogether")


class SlotRestrictionRule(_RuleBase):
    type: Literal["slot-restriction"] = "slot-restriction"
    client_group: list[str] = Field(..., alias="clientGroup")
    worker_group: list[str] = Field(..., alias="workerGroup")
    min_common_slots: int = Field(..., ge=0, alias="minCommonSlots")


class LoadLimitRule(_RuleBase):
    type: Literal["load-limit"] = "load-limit"
    worker_group: list[str] = Field(..., alias="workerGroup")
    max_slots_per_phase: int = Field(..., ge=1, alias="maxSlotsPerPhase")
    phase_type: Literal["morning", "afternoon", "evening", "all"] | None = Field(
        None, alias="phaseType"
    )


class PhaseRange(_StrictBaseModel):
    start: int
    end: int


class PhaseWindowRule(_RuleBase):
    """
    @brief
    Restricts a single task to a set of phases.

    @details
    The allowed set is the union of `allowedPhases` and the inclusive
    `phaseRange`, when one is given.
    """

    type: Literal["phase-window"] = "phase-window"
    task_id: str = Field(..., alias="taskId")
    allowed_phases: list[int] = Field(default_factory=list, alias="allowedPhases")
    phase_range: PhaseRange | None = Field(None, alias="phaseRange")

    def allows(self, phase: int) -> bool:
        if phase in self.allowed_phases:
            return True
        rng = self.phase_range
        return rng is not None and rng.start <= phase <= rng.end

    def describe_allowed(self) -> str:
        """Allowed phases as text, with the range written as "start..end"."""
        parts = [str(p) for p in sorted(set(self.allowed_phases))]
        if self.phase_range is not None:
            parts.append(f"{self.phase_range.start}..{self.phase_range.end}")
        return ", ".join(parts) or "none"


class PatternMatchRule(_RuleBase):
    type: Literal["pattern-match"] = "pattern-match"
    regex: str
    rule_template: str = Field("", alias="ruleTemplate")
    target_field: Literal["client", "worker", "task"] = Field(..., alias="targetField")
    action: Literal["include", "exclude", "prioritize"]

    @field_validator("regex")
    @classmethod
    def _regex_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return value


class PrecedenceCriteria(_StrictBaseModel):
    field: str
    weight: float
    direction: Literal["asc", "desc"] = "desc"


class PrecedenceOverrideRule(_RuleBase):
    type: Literal["precedence-override"] = "precedence-override"
    priority_order: list[str] = Field(..., alias="priorityOrder")
    criteria: list[PrecedenceCriteria] = Field(default_factory=list)


BusinessRule = Annotated[
    Union[
        CoRunRule,
        SlotRestrictionRule,
        LoadLimitRule,
        PhaseWindowRule,
        PatternMatchRule,
        PrecedenceOverrideRule,
    ],
    Field(discriminator="type"),
]

_RULE_ADAPTER: TypeAdapter[BusinessRule] = TypeAdapter(BusinessRule)


def parse_rule(raw: Mapping[str, Any]) -> BusinessRule:
    """
    @brief
    Deserialize one rule mapping into its concrete variant.

    @raises
        DataError
            If `type` is unknown or a variant's required fields are missing.
    """
    try:
        return _RULE_ADAPTER.validate_python(raw)
    except ValidationError as e:
        raise DataError(
            message=f"Invalid business rule {raw.get('id') or raw.get('name') or ''!r}: {e}",
            source="rules.parse_rule",
            suggested_action=f"Use one of the rule types {', '.join(RULE_TYPES)} "
            "with all parameters required by that type.",
        ) from e


def parse_rules(raw_rules: Iterable[Mapping[str, Any]]) -> list[BusinessRule]:
    """Deserialize a sequence of rule mappings, failing on the first invalid one."""
    rules: list[BusinessRule] = []
    for raw in raw_rules:
        if not isinstance(raw, Mapping):
            raise DataError(
                message=f"Business rule must be a mapping, got {type(raw).__name__}",
                source="rules.parse_rules",
                suggested_action="Provide rules as a list of JSON objects.",
            )
        rules.append(parse_rule(raw))
    return rules


__all__ = [
    "BusinessRule",
    "CoRunRule",
    "LoadLimitRule",
    "PatternMatchRule",
    "PhaseRange",
    "PhaseWindowRule",
    "PrecedenceCriteria",
    "PrecedenceOverrideRule",
    "RULE_TYPES",
    "SlotRestrictionRule",
    "parse_rule",
    "parse_rules",
]
