# src/allocheck/dataloader/types.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from allocheck.schemas.models import Client, Task, Worker
from allocheck.schemas.rules import BusinessRule


@dataclass(frozen=True, slots=True)
class Snapshot:
    """
    One consistent view of the data handed to a validation run.

    Fields:
        clients: Client rows in input order.
        workers: Worker rows in input order.
        tasks: Task rows in input order.
        rules: Business rules in declaration order.

    Collections are stored as tuples; build instances with `Snapshot.of(...)`
    so later edits to the caller's lists cannot leak into a running pass.
    """

    clients: tuple[Client, ...] = field(default_factory=tuple)
    workers: tuple[Worker, ...] = field(default_factory=tuple)
    tasks: tuple[Task, ...] = field(default_factory=tuple)
    rules: tuple[BusinessRule, ...] = field(default_factory=tuple)

    @classmethod
    def of(
        cls,
        clients: Iterable[Client] | None = None,
        workers: Iterable[Worker] | None = None,
        tasks: Iterable[Task] | None = None,
        rules: Iterable[BusinessRule] | None = None,
    ) -> Snapshot:
        return cls(
            clients=tuple(clients or ()),
            workers=tuple(workers or ()),
            tasks=tuple(tasks or ()),
            rules=tuple(rules or ()),
        )
