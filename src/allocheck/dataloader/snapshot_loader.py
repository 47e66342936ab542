# src/allocheck/dataloader/snapshot_loader.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from allocheck.dataloader.types import Snapshot
from allocheck.errors import DataError
from allocheck.schemas.models import Client, Task, Worker
from allocheck.schemas.rules import parse_rules

logger = logging.getLogger(__name__)


class SnapshotLoader:
    """
    JSON → Snapshot.

    Expected file layout (UTF-8 JSON object):
        {"clients": [...], "workers": [...], "tasks": [...], "rules": [...]}
    Every key is optional; a missing key means an empty collection.

    Rows are already-parsed records using the import column names
    (ClientID, AvailableSlots, ...). Dirty values (blank IDs, non-numeric
    PriorityLevel, ...) load fine and are reported later by the validator.
    A row that does not fit the record contract at all (unknown column,
    wrong container type) or an invalid rule raises DataError.
    """

    SECTIONS = ("clients", "workers", "tasks", "rules")

    def load(self, path: Path) -> Snapshot:
        data = self._read_json(path)
        snapshot = self.from_mapping(data)
        logger.info(
            "Snapshot loaded from %s: %d client(s), %d worker(s), %d task(s), %d rule(s)",
            path,
            len(snapshot.clients),
            len(snapshot.workers),
            len(snapshot.tasks),
            len(snapshot.rules),
        )
        return snapshot

    def from_mapping(self, data: Mapping[str, Any]) -> Snapshot:
        unknown = sorted(set(data) - set(self.SECTIONS))
        if unknown:
            raise DataError(
                message=f"Unknown snapshot section(s): {', '.join(unknown)}",
                source="SnapshotLoader.from_mapping",
                suggested_action=f"Use only the sections {', '.join(self.SECTIONS)}.",
            )

        return Snapshot.of(
            clients=self._rows(data, "clients", Client),
            workers=self._rows(data, "workers", Worker),
            tasks=self._rows(data, "tasks", Task),
            rules=parse_rules(self._section(data, "rules")),
        )

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_json(self, path: Path) -> dict[str, Any]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="SnapshotLoader._read_json",
                suggested_action="Pass a pathlib.Path pointing to the snapshot JSON.",
            )
        if not path.exists():
            raise DataError(
                message=f"Snapshot file not found: {path}",
                source="SnapshotLoader._read_json",
                suggested_action="Verify file path and ensure the snapshot is present.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Snapshot is not valid JSON: {e}",
                source="SnapshotLoader._read_json",
                suggested_action="Fix the JSON syntax of the snapshot file.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read snapshot: {e}",
                source="SnapshotLoader._read_json",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

        if not isinstance(data, dict):
            raise DataError(
                message="Snapshot root must be a JSON object.",
                source="SnapshotLoader._read_json",
                suggested_action='Use {"clients": [...], "workers": [...], "tasks": [...], "rules": [...]}.',
            )
        return data

    def _section(self, data: Mapping[str, Any], key: str) -> list[Any]:
        rows = data.get(key) or []
        if not isinstance(rows, list):
            raise DataError(
                message=f"Snapshot section '{key}' must be a list, got {type(rows).__name__}",
                source="SnapshotLoader._section",
                suggested_action=f"Provide '{key}' as a JSON array.",
            )
        return rows

    def _rows(self, data: Mapping[str, Any], key: str, model: type[BaseModel]) -> list[Any]:
        parsed: list[Any] = []
        for index, row in enumerate(self._section(data, key)):
            try:
                parsed.append(model.model_validate(row))
            except ValidationError as e:
                raise DataError(
                    message=f"{key}[{index}] does not match the {model.__name__} record: {e}",
                    source="SnapshotLoader._rows",
                    suggested_action=f"Check the column names and list-valued fields of {key}[{index}].",
                ) from e
        return parsed


__all__ = ["SnapshotLoader"]
