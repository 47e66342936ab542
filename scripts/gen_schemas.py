# scripts/gen_schemas.py
"""
Generate JSON Schemas for allocheck data contracts.

This script exports JSON Schema files for:
    - Client, Worker, Task (snapshot rows)
    - BusinessRule (discriminated union of rule variants)
    - ValidationIssue (engine output)
    - EngineConfig (config.yaml)

Output directory: schemas/
"""

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from allocheck.schemas.models import Client, EngineConfig, Task, ValidationIssue, Worker
from allocheck.schemas.rules import BusinessRule


def export_schema(schema: dict[str, Any], name: str, out_dir: Path) -> Path:
    """
    @brief
    Writes one JSON schema as "<name>.schema.json" into out_dir.

    @returns
        Path of the written file.
    """
    # (1) Ensure output directory exists
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Serialize JSON Schema to file with indentation and final newline
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    # (3) Print confirmation with relative path for user feedback
    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"Generated {rel}")
    return schema_path


def main(out_dir: Path | None = None) -> list[Path]:
    """Export every data contract schema into `schemas/` (or out_dir)."""
    out_dir = (out_dir or Path("schemas")).resolve()

    return [
        export_schema(Client.model_json_schema(by_alias=True), "client", out_dir),
        export_schema(Worker.model_json_schema(by_alias=True), "worker", out_dir),
        export_schema(Task.model_json_schema(by_alias=True), "task", out_dir),
        export_schema(TypeAdapter(BusinessRule).json_schema(by_alias=True), "rule", out_dir),
        export_schema(ValidationIssue.model_json_schema(by_alias=True), "issue", out_dir),
        export_schema(EngineConfig.model_json_schema(), "config", out_dir),
    ]


if __name__ == "__main__":
    main()
