# src/allocheck/schemas/models.py
"""
@brief
Pydantic data models for the allocheck validation engine.

@details
Defines the canonical record types consumed and produced by the engine:
    - Client, Worker, Task: parsed import rows (plain records, no logic)
    - ValidationIssue: one consistency problem found by a validation run
    - EngineConfig: runtime configuration (from config.yaml)

Field names are snake_case; the column names of the import format
(ClientID, AvailableSlots, ...) are accepted as aliases. Entity fields are
deliberately permissive: identifiers may be absent and numeric columns may
arrive as raw strings, because reporting such defects is the engine's job.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and accepts both field names and import aliases.
    Designed as a foundation for all other allocheck models.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values
    }


# ------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------
class Severity(str, Enum):
    """Issue severity: errors block allocation, warnings are advisory."""

    ERROR = "error"
    WARNING = "warning"


class EntityKind(str, Enum):
    CLIENT = "client"
    WORKER = "worker"
    TASK = "task"
    PHASE = "phase"


class IssueType(str, Enum):
    MISSING_REQUIRED_COLUMNS = "MissingRequiredColumns"
    DUPLICATE_ID = "DuplicateID"
    OUT_OF_RANGE_VALUE = "OutOfRangeValue"
    UNKNOWN_REFERENCE = "UnknownReference"
    SKILL_COVERAGE = "SkillCoverage"
    MALFORMED_LIST = "MalformedList"
    BROKEN_JSON = "BrokenJSON"
    OVERLOADED_WORKER = "OverloadedWorker"
    CIRCULAR_CO_RUN_GROUP = "CircularCoRunGroup"
    CONFLICTING_PHASE_WINDOW = "ConflictingPhaseWindow"
    PHASE_SLOT_SATURATION = "PhaseSlotSaturation"
    MAX_CONCURRENCY_FEASIBILITY = "MaxConcurrencyFeasibility"


# ------------------------------------------------------------
# Entities
# ------------------------------------------------------------
class Client(_StrictBaseModel):
    """
    @brief
    Represents one client row.

    @params
        client_id : str | None
            Unique identifier (ClientID).
        priority_level : int | float | str | None
            Priority in 1..5; kept raw so non-numeric input can be reported.
        requested_task_ids : list[str] | None
            References into the task collection.
        attributes_json : dict | str | None
            Free-form attributes; a raw string must hold a JSON object.
    """

    client_id: str | None = Field(None, alias="ClientID", description="Unique identifier")
    client_name: str | None = Field(None, alias="ClientName", description="Display name")
    priority_level: int | float | str | None = Field(
        None, alias="PriorityLevel", description="Priority level (1..5)"
    )
    requested_task_ids: list[str] | None = Field(
        default_factory=list, alias="RequestedTaskIDs", description="Requested TaskIDs"
    )
    group_tag: str | None = Field(None, alias="GroupTag")
    attributes_json: dict[str, Any] | str | None = Field(
        default_factory=dict, alias="AttributesJSON", description="Opaque attribute mapping"
    )


class Worker(_StrictBaseModel):
    """
    @brief
    Represents one worker row.

    @details
    AvailableSlots holds phase numbers; every occurrence is one unit of
    capacity in that phase. Entries are not coerced so that malformed values
    survive until validation. Skills may arrive as a plain string, which the
    engine reports as a malformed skill set.
    """

    worker_id: str | None = Field(None, alias="WorkerID", description="Unique identifier")
    worker_name: str | None = Field(None, alias="WorkerName", description="Display name")
    skills: list[str] | str | None = Field(default_factory=list, alias="Skills")
    available_slots: list[Any] | None = Field(
        default_factory=list, alias="AvailableSlots", description="Phase numbers, duplicates allowed"
    )
    max_load_per_phase: int | None = Field(None, alias="MaxLoadPerPhase")
    worker_group: str | None = Field(None, alias="WorkerGroup")
    qualification_level: str | int | None = Field(None, alias="QualificationLevel")


class Task(_StrictBaseModel):
    """
    @brief
    Represents one task row.

    @params
        duration : int | float | str | None
            Number of phases consumed (>= 1); kept raw for range reporting.
        preferred_phases : list[int] | None
            Phases the task prefers to run in.
        max_concurrent : int | None
            Maximum simultaneous worker assignments.
    """

    task_id: str | None = Field(None, alias="TaskID", description="Unique identifier")
    task_name: str | None = Field(None, alias="TaskName", description="Display name")
    category: str | None = Field(None, alias="Category")
    duration: int | float | str | None = Field(None, alias="Duration", description="Phases consumed")
    required_skills: list[str] | None = Field(default_factory=list, alias="RequiredSkills")
    preferred_phases: list[int] | None = Field(default_factory=list, alias="PreferredPhases")
    max_concurrent: int | None = Field(None, alias="MaxConcurrent")


# ------------------------------------------------------------
# Validation output
# ------------------------------------------------------------
class ValidationIssue(_StrictBaseModel):
    """
    @brief
    One consistency problem detected by a validation run.

    @details
    Issues are immutable and produced fresh on every run; the ordered list
    returned by the orchestrator is the complete result of that run.
    Serialize with `model_dump(by_alias=True)` to obtain the camelCase
    wire names (affectedEntity, entityId).
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    type: IssueType = Field(..., description="Issue category")
    severity: Severity = Field(..., description="error | warning")
    message: str = Field(..., description="Human-readable description")
    affected_entity: EntityKind = Field(..., alias="affectedEntity")
    entity_id: str = Field(..., alias="entityId")
    field: str | None = Field(None, description="Offending field, when one applies")
    value: Any = Field(None, description="Offending value, when one applies")
    row: int | None = Field(None, description="0-based position in the input collection")
    suggestions: list[str] = Field(default_factory=list)


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class ValidationConfig(BaseModel):
    """
    @brief
    Controls report output of the validation run.

    @details
    Determines whether a report is written and whether warnings
    should be treated as failures by the CLI.
    """

    write_report: bool = True
    fail_on_warnings: bool = False
    report_filename: str = "validation_report.json"
    write_csv: bool = False


class EngineConfig(_StrictBaseModel):
    """
    @brief
    Runtime configuration loaded from config.yaml.

    @details
    Range bounds default to the import format's documented domains
    (PriorityLevel 1..5, Duration >= 1).
    """

    priority_min: int = Field(1, description="Lowest accepted PriorityLevel")
    priority_max: int = Field(5, description="Highest accepted PriorityLevel")
    min_duration: int = Field(1, ge=0, description="Lowest accepted task Duration")
    skip_disabled_rules: bool = Field(
        True, description="Ignore business rules with enabled=false"
    )

    snapshot_json: str | None = None
    output_dir: str | None = "data/output"
    validation: ValidationConfig = Field(default_factory=ValidationConfig.model_construct)


__all__ = [
    "Client",
    "EngineConfig",
    "EntityKind",
    "IssueType",
    "Severity",
    "Task",
    "ValidationConfig",
    "ValidationIssue",
    "Worker",
]
