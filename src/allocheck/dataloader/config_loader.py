# src/allocheck/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path, PurePath
from typing import Any

import yaml
from pydantic import ValidationError

from allocheck.errors import ConfigError
from allocheck.schemas.models import EngineConfig

_YAML_SUFFIXES = {".yaml", ".yml"}


class ConfigLoader:
    """
    @brief
    Turns config.yaml into a checked EngineConfig.

    @details
    Three stages, each raising ConfigError with a `source` naming the stage:
    reading the YAML document, validating it against EngineConfig, and
    cross-field checks the schema cannot express (priority window, snapshot
    and report file names).
    """

    def load(self, path: Path) -> EngineConfig:
        # (1) Document → mapping
        data = self._read_yaml(path)

        # (2) Mapping → EngineConfig
        cfg = self._validate(data)

        # (3) Cross-field consistency
        self._check_consistency(cfg)
        return cfg

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        """
        @brief
        Read the config document as a top-level mapping.

        @raises
            ConfigError
                Non-Path argument, missing file, non-YAML suffix, unreadable
                or unparsable file, empty document, non-mapping root.
        """
        # (1) Path sanity
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Call ConfigLoader().load(Path(...)).",
            )
        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass --config with an existing YAML file.",
            )
        if path.suffix.lower() not in _YAML_SUFFIXES:
            raise ConfigError(
                message=f"Configuration must be a .yaml/.yml file, got '{path.suffix}'",
                source="ConfigLoader._read_yaml",
                suggested_action="Rename the configuration file to use a YAML suffix.",
            )

        # (2) Parse
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed for {path.name}: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check quoting and indentation in the config file.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Cannot read configuration {path}: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions.",
            ) from e

        # (3) Shape of the document
        if data is None:
            raise ConfigError(
                message=f"Configuration file {path.name} is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Copy config/config.yaml as a starting point.",
            )
        if not isinstance(data, Mapping):
            raise ConfigError(
                message=f"Configuration root must be a mapping, got {type(data).__name__}.",
                source="ConfigLoader._read_yaml",
                suggested_action="Write the configuration as top-level 'key: value' pairs.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any]) -> EngineConfig:
        try:
            return EngineConfig(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Allowed keys: priority_min, priority_max, min_duration, "
                    "skip_disabled_rules, snapshot_json, output_dir, validation "
                    "(extra fields are forbidden)."
                ),
            ) from e

    def _check_consistency(self, cfg: EngineConfig) -> None:
        """
        @brief
        Reject settings that validate individually but cannot work together.

        @details
        - priority_min must not exceed priority_max.
        - snapshot_json, when set, must name a .json file.
        - validation.report_filename must be a bare .json file name; the CSV
          issue table is written next to it with a .csv suffix.
        """
        source = "ConfigLoader._check_consistency"

        if cfg.priority_min > cfg.priority_max:
            raise ConfigError(
                message=(
                    f"priority_min ({cfg.priority_min}) is greater than "
                    f"priority_max ({cfg.priority_max})"
                ),
                source=source,
                suggested_action="Swap or correct the PriorityLevel bounds.",
            )

        snapshot = cfg.snapshot_json
        if snapshot is not None and PurePath(snapshot).suffix.lower() != ".json":
            raise ConfigError(
                message=f"snapshot_json must point to a .json file, got '{snapshot}'",
                source=source,
                suggested_action="Export the snapshot as JSON or pass --input.",
            )

        report_name = cfg.validation.report_filename
        if PurePath(report_name).name != report_name or not report_name.endswith(".json"):
            raise ConfigError(
                message=(
                    f"validation.report_filename must be a bare .json name, got '{report_name}'"
                ),
                source=source,
                suggested_action="Put the directory in output_dir and only the name here.",
            )


__all__ = ["ConfigLoader"]
