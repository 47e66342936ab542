# src/allocheck/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from allocheck.dataloader.types import Snapshot
from allocheck.export.report_export import write_issues_csv, write_report_json
from allocheck.schemas.models import Client, EngineConfig, Task, ValidationIssue, Worker
from allocheck.schemas.rules import BusinessRule, CoRunRule, PhaseWindowRule
from allocheck.validator.corun import check_corun_cycles
from allocheck.validator.field_checks import (
    check_attributes_json,
    check_duplicate_ids,
    check_malformed_lists,
    check_overloaded_workers,
    check_ranges,
    check_required_fields,
)
from allocheck.validator.phase_checks import (
    check_max_concurrency,
    check_phase_capacity,
    check_phase_windows,
)
from allocheck.validator.reference_checks import check_skill_coverage, check_unknown_references
from allocheck.validator.summary import ValidationSummary, summarize

logger = logging.getLogger(__name__)


# ---------------------------
# VALIDATOR CLASS (instance core)
# ----------------------------
class Validator:
    """
    @brief
    Cross-entity consistency validator for one data snapshot.

    @details
    Runs every check over the snapshot in a fixed order and concatenates
    the issues. Checks never raise on dirty data: defects are collected as
    ValidationIssue records and the whole snapshot is always audited, with
    no early abort. Only report persistence can raise (ReportError).

    Instances hold no state between runs; each run_all_checks() call starts
    from an empty issue list.
    """

    # ---------- Constructor ----------
    def __init__(self, snapshot: Snapshot, cfg: EngineConfig | None = None) -> None:
        """
        @brief
        Initialize validation context.

        @params
            snapshot : Snapshot
                Clients, workers, tasks and rules forming one consistent view.
            cfg : EngineConfig | None
                Runtime configuration; defaults apply when omitted.
        """
        self.snapshot = snapshot
        self.cfg = cfg or EngineConfig()

        # (1) Accumulators for one run
        self.issues: list[ValidationIssue] = []
        self.checks: dict[str, int] = {}

    # ---------- Public lifecycle API ----------
    def run_all_checks(self) -> list[ValidationIssue]:
        """
        @brief
        Execute the full validation sequence.

        @details
        Order: presence, duplicate IDs, ranges, unknown references, skill
        coverage, malformed worker lists, attribute JSON, worker load, co-run
        cycles, phase windows, phase capacity, concurrency feasibility.

        @returns
            A new list holding every issue of this run, in check order.
        """
        s = self.snapshot
        cfg = self.cfg
        self.issues = []
        self.checks = {}

        # (1) Field-level checks
        self._record("RequiredFields", check_required_fields(s.clients, s.workers, s.tasks))
        self._record("DuplicateIDs", check_duplicate_ids(s.clients, s.workers, s.tasks))
        self._record(
            "Ranges",
            check_ranges(
                s.clients,
                s.workers,
                s.tasks,
                priority_min=cfg.priority_min,
                priority_max=cfg.priority_max,
                min_duration=cfg.min_duration,
            ),
        )

        # (2) Cross-entity references
        self._record("UnknownReferences", check_unknown_references(s.clients, s.tasks))
        self._record("SkillCoverage", check_skill_coverage(s.workers, s.tasks))

        # (3) Row shape and worker load
        self._record("MalformedLists", check_malformed_lists(s.workers))
        self._record("AttributesJSON", check_attributes_json(s.clients))
        self._record("OverloadedWorkers", check_overloaded_workers(s.workers))

        # (4) Rule-driven and capacity checks
        self._record("CoRunCycles", check_corun_cycles(self._active_rules(CoRunRule)))
        self._record(
            "PhaseWindows", check_phase_windows(self._active_rules(PhaseWindowRule), s.tasks)
        )
        self._record("PhaseCapacity", check_phase_capacity(s.workers, s.tasks))
        self._record("MaxConcurrency", check_max_concurrency(s.workers, s.tasks))

        summary = summarize(self.issues)
        logger.info(
            "Validation: %d issue(s), %d error(s), %d warning(s) over %d client(s), "
            "%d worker(s), %d task(s), %d rule(s)",
            summary.total,
            summary.errors,
            summary.warnings,
            len(s.clients),
            len(s.workers),
            len(s.tasks),
            len(s.rules),
        )
        return list(self.issues)

    def summary(self) -> ValidationSummary:
        return summarize(self.issues)

    def build_report(self) -> dict[str, Any]:
        """
        @brief
        Assemble validation results into a structured dictionary.

        @details
        The report is valid when no issue has error severity, or, with
        `validation.fail_on_warnings`, when there are no issues at all.
        No files are written at this stage.
        """
        summary = self.summary()
        valid = summary.is_valid
        if self.cfg.validation.fail_on_warnings:
            valid = valid and summary.warnings == 0

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "valid": valid,
            "summary": summary.model_dump(),
            "checks": dict(self.checks),
            "issues": [i.model_dump(mode="json", by_alias=True) for i in self.issues],
        }

    def save_report(
        self,
        report: dict[str, Any],
        out_dir: Path | None = None,
        filename: str | None = None,
    ) -> Path:
        """
        Writes the report atomically to disk.

        Args:
            report: Validation report dictionary.
            out_dir: Target directory (defaults to cfg.output_dir).
            filename: Target filename (defaults to cfg.validation.report_filename).

        Returns:
            Path to the written JSON file.
        """
        target_dir = out_dir or Path(self.cfg.output_dir or "data/output")
        final_path = write_report_json(
            report, target_dir / (filename or self.cfg.validation.report_filename)
        )
        logger.info("Validation report saved: %s", final_path)

        if self.cfg.validation.write_csv:
            csv_path = write_issues_csv(self.issues, final_path.with_suffix(".csv"))
            logger.info("Issue table saved: %s", csv_path)

        return final_path

    # ---------- Internals ----------
    def _record(self, check: str, found: list[ValidationIssue]) -> None:
        logger.debug("Check %s: %d issue(s)", check, len(found))
        self.checks[check] = len(found)
        self.issues.extend(found)

    def _active_rules(self, rule_cls: type) -> list[Any]:
        skip_disabled = self.cfg.skip_disabled_rules
        return [
            r
            for r in self.snapshot.rules
            if isinstance(r, rule_cls) and (r.enabled or not skip_disabled)
        ]


# ----------------------------
# THIN FACADES
# ----------------------------
def validate_all(
    clients: Iterable[Client],
    workers: Iterable[Worker],
    tasks: Iterable[Task],
    rules: Iterable[BusinessRule] = (),
    cfg: EngineConfig | None = None,
) -> list[ValidationIssue]:
    """
    @brief
    Audit one snapshot and return the ordered issue list.

    @details
    Pure with respect to its inputs: the same collections and rules always
    yield an equal list in the same order. The collections are copied into a
    Snapshot first, so later edits by the caller do not affect the result.
    """
    return Validator(Snapshot.of(clients, workers, tasks, rules), cfg).run_all_checks()


def validate_snapshot(
    snapshot: Snapshot,
    cfg: EngineConfig | None = None,
    *,
    write_report: bool = True,
    out_dir: Path | None = None,
    filename: str | None = None,
) -> dict[str, Any]:
    """
    @brief
    High-level convenience wrapper used by the CLI.

    @details
    Runs all checks, builds the report and optionally persists it. Always
    returns the in-memory report regardless of write mode.
    """
    # (1) Initialize validator instance with the snapshot
    validator = Validator(snapshot, cfg)

    # (2) Execute full validation workflow
    validator.run_all_checks()

    # (3) Build final structured report
    report = validator.build_report()

    # (4) Optionally persist the report to disk
    if write_report:
        validator.save_report(report, out_dir=out_dir, filename=filename)

    return report
