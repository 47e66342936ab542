# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from allocheck.dataloader.config_loader import ConfigLoader
from allocheck.dataloader.snapshot_loader import SnapshotLoader
from allocheck.errors import AllocheckError, DataError
from allocheck.schemas.models import EngineConfig
from allocheck.validator import validate_snapshot


def _setup_logging(verbose: bool = False) -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    INFO by default, DEBUG with --verbose, one simple console format for the
    whole pipeline.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format="[%(levelname)s] %(message)s"
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the validation run.

    @details
    --input overrides `snapshot_json` from the config file; --output
    overrides `output_dir`.
    """
    parser = argparse.ArgumentParser(
        prog="allocheck-run",
        description="Audit a client/worker/task snapshot: load → validate → report",
    )

    # (1) Config path argument
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )

    # (2) Snapshot path argument
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Path to snapshot JSON (default: snapshot_json from config)",
    )

    # (3) Output directory argument
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for the report (default: output_dir from config)",
    )

    parser.add_argument("--verbose", action="store_true", help="Log every check at DEBUG level")

    return parser.parse_args(argv)


def run_pipeline(
    config_path: Path, input_path: Path | None = None, output_dir: Path | None = None
) -> dict[str, Any]:
    """
    @brief
    Executes the validation pipeline.

    @details
    (1) Load configuration (defaults when the file is absent).
    (2) Load the snapshot.
    (3) Validate and, when enabled, write the report.

    @returns
        Dictionary with validity flag, summary counts and report path.

    @raises
        AllocheckError
            On configuration, data or report-writing issues.
    """
    t0 = time.perf_counter()

    # (1) Configuration
    if config_path.exists():
        logging.info("Loading config: %s", config_path)
        cfg = ConfigLoader().load(config_path)
    else:
        logging.warning("Config %s not found, using defaults", config_path)
        cfg = EngineConfig()

    # (2) Snapshot
    snapshot_path = input_path or (Path(cfg.snapshot_json) if cfg.snapshot_json else None)
    if snapshot_path is None:
        raise DataError(
            message="No snapshot given",
            source="scripts.run",
            suggested_action="Pass --input or set snapshot_json in config.yaml.",
        )
    logging.info("Loading snapshot: %s", snapshot_path)
    snapshot = SnapshotLoader().load(snapshot_path)

    # (3) Validation and report
    out_dir = output_dir or Path(cfg.output_dir or "data/output")
    write_report = cfg.validation.write_report
    report = validate_snapshot(snapshot, cfg, write_report=write_report, out_dir=out_dir)

    summary = report["summary"]
    logging.info(
        "Validation finished in %.2f s: valid=%s, %d error(s), %d warning(s)",
        time.perf_counter() - t0,
        report["valid"],
        summary["errors"],
        summary["warnings"],
    )

    report_path = out_dir / cfg.validation.report_filename if write_report else None
    return {
        "valid": report["valid"],
        "errors": summary["errors"],
        "warnings": summary["warnings"],
        "report": report_path,
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – snapshot is valid
      1 – invalid snapshot or controlled failure (config/data/report)
      2 – unexpected crash
    """
    args = _parse_args(argv)
    _setup_logging(args.verbose)

    try:
        result = run_pipeline(
            Path(args.config),
            Path(args.input) if args.input else None,
            Path(args.output) if args.output else None,
        )
        if result["report"]:
            logging.info("Report: %s", Path(result["report"]).as_posix())
        return 0 if result["valid"] else 1

    except AllocheckError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
