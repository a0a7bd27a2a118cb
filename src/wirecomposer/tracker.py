from __future__ import annotations
import logging
from typing import List, Set, Union

from .ir import Component, DeletionRecord, InstanceDeletion, Wire, WireDeletion

logger = logging.getLogger(__name__)

class ChangeTracker:
    """Removals the registry must replay on the next save.

    Only entities that exist externally produce a record: a component with a
    real pid, or a wire that came back from a previous save. Components created
    in this session are kept in ``pending_creations`` until a save commits them.
    """

    def __init__(self):
        self._deletions: List[DeletionRecord] = []
        self._creations: Set[str] = set()

    @property
    def pending_deletions(self) -> List[DeletionRecord]:
        return list(self._deletions)

    @property
    def pending_creations(self) -> Set[str]:
        return set(self._creations)

    def record_creation(self, component: Component) -> None:
        if not component.is_registered:
            self._creations.add(component.id)

    def record_removal(self, entity: Union[Component, Wire]) -> None:
        if isinstance(entity, Wire):
            if not entity.is_new:
                self._deletions.append(WireDeletion(producer=entity.producer, consumer=entity.consumer))
                logger.debug("Tracked wire deletion %s->%s", entity.producer, entity.consumer)
            return
        self._creations.discard(entity.id)
        if entity.is_registered:
            self._deletions.append(InstanceDeletion(pid=entity.pid))
            logger.debug("Tracked instance deletion %s", entity.pid)

    def snapshot_and_reset(self) -> List[DeletionRecord]:
        records = self._deletions
        self._deletions = []
        return records

    def clear_creations(self) -> None:
        self._creations.clear()

    def reset(self) -> None:
        self._deletions = []
        self._creations.clear()
