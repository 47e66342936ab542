"""allocheck: cross-entity consistency audit for client/worker/task snapshots."""

__version__ = "0.1.0"
