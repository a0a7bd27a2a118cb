from __future__ import annotations
import logging
from pathlib import Path
from typing import Protocol

import yaml

from .errors import CyclicTopologyError, RegistryError, SaveInProgressError
from .graph import GraphModel
from .ir import SaveTransaction
from .tracker import ChangeTracker
from .validator import find_cycle, has_cycle

logger = logging.getLogger(__name__)

class Registry(Protocol):
    """External system of record; accepts a transaction or raises."""

    def submit(self, transaction: SaveTransaction) -> None: ...

class FileRegistry:
    """Registry stand-in that writes each accepted transaction to a YAML file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def submit(self, transaction: SaveTransaction) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(transaction.model_dump(mode="json"), sort_keys=False))
        except OSError as e:
            raise RegistryError(f"Could not write transaction to {self.path}: {e}") from e
        logger.info("Transaction written to %s", self.path)

class SyncCoordinator:
    def __init__(self, registry: Registry):
        self.registry = registry

    def save(self, graph: GraphModel, tracker: ChangeTracker) -> SaveTransaction:
        """Send the topology and pending deletions as a single transaction.

        A cyclic graph raises CyclicTopologyError before anything is sent. If the
        registry fails, its error propagates and the deletions stay pending, so
        the same save can be issued again.
        """
        if graph.is_locked:
            raise SaveInProgressError()
        if has_cycle(graph):
            cycle = find_cycle(graph)
            logger.warning("Save aborted, topology has a cycle: %s", cycle)
            raise CyclicTopologyError(cycle)

        with graph.locked():
            transaction = SaveTransaction(
                topology=graph.to_topology(),
                deletions=tracker.pending_deletions,
            )
            logger.info("Submitting transaction: %d component(s), %d wire(s), %d deletion(s)",
                        len(transaction.topology.components), len(transaction.topology.wires),
                        len(transaction.deletions))
            self.registry.submit(transaction)

            tracker.snapshot_and_reset()
            tracker.clear_creations()
            graph.mark_committed()
        logger.info("Transaction accepted")
        return transaction
