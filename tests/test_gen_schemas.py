import json
from pathlib import Path

from scripts.gen_schemas import main


def test_gen_schemas_writes_every_contract(tmp_path: Path):
    """
    @brief
    Every data contract is exported as a standalone JSON Schema.

    @details
    Entity schemas use the import column names; the rule schema is the
    discriminated union over all rule types.
    """
    # --- Act ---
    paths = main(tmp_path)

    # --- Assert ---
    assert sorted(p.name for p in paths) == [
        "client.schema.json",
        "config.schema.json",
        "issue.schema.json",
        "rule.schema.json",
        "task.schema.json",
        "worker.schema.json",
    ]
    for path in paths:
        assert path.read_text(encoding="utf-8").endswith("\n")

    client = json.loads((tmp_path / "client.schema.json").read_text(encoding="utf-8"))
    assert "ClientID" in client["properties"]

    issue = json.loads((tmp_path / "issue.schema.json").read_text(encoding="utf-8"))
    assert {"affectedEntity", "entityId"} <= set(issue["properties"])

    rule = json.loads((tmp_path / "rule.schema.json").read_text(encoding="utf-8"))
    assert "discriminator" in rule
