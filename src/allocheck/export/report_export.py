# src/allocheck/export/report_export.py
from __future__ import annotations

import csv
import io
import json
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from allocheck.errors import ReportError
from allocheck.schemas.models import ValidationIssue

ISSUE_COLUMNS = (
    "type",
    "severity",
    "affectedEntity",
    "entityId",
    "field",
    "value",
    "row",
    "message",
)


def write_report_json(report: Mapping[str, Any], out_path: Path) -> Path:
    """
    @brief
    Writes a validation report as UTF-8 JSON, atomically.

    @details
    Serializes the report with indentation (non-JSON values are rendered
    with str) and replaces the target file in one filesystem operation, so a
    reader never observes a half-written report.

    @params
        report : Mapping[str, Any]
            Report dictionary produced by Validator.build_report().
        out_path : Path
            Destination file.

    @returns
        Path to the written file.

    @raises
        ReportError
            If the report is not a mapping or the write fails.
    """
    if not isinstance(report, Mapping):
        raise ReportError("report must be a mapping", source="export.write_report_json")

    payload = json.dumps(dict(report), ensure_ascii=False, indent=2, default=str) + "\n"
    out_path = Path(out_path)
    _atomic_write_text(out_path, payload)
    return out_path


def write_issues_csv(issues: Iterable[ValidationIssue], out_path: Path) -> Path:
    """
    @brief
    Exports issues as a flat CSV table, one row per issue.

    @details
    Column order follows ISSUE_COLUMNS. Structured values are written as
    compact JSON; None becomes an empty cell.
    """
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=ISSUE_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for issue in issues:
        record = issue.model_dump(mode="json", by_alias=True)
        writer.writerow({col: _cell(record.get(col)) for col in ISSUE_COLUMNS})

    out_path = Path(out_path)
    _atomic_write_text(out_path, buffer.getvalue())
    return out_path


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    @brief
    Performs atomic text file writing using a temporary file swap.

    @details
    Writes text to a temporary file within the same directory, then replaces
    the destination in a single filesystem operation.

    @raises
        ReportError
            On write or rename failure.
    """
    # (1) Create temporary file near the target for atomicity
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
    except OSError as e:
        raise ReportError(
            f"cannot prepare output directory {path.parent}: {e}",
            source="export._atomic_write_text",
            suggested_action="Check output directory permissions.",
        ) from e

    try:
        with open(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        # (2) Clean up temp file on error
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ReportError(
            f"atomic write failed for {path}: {e}",
            source="export._atomic_write_text",
            suggested_action="Check output directory permissions and disk space.",
        ) from e
