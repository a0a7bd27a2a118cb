from __future__ import annotations
import logging
from typing import List, Optional

from .config import Settings
from .errors import DuplicateNameError, SessionClosedError
from .graph import GraphEvent, GraphModel
from .ir import Component, ComponentSpec, RegistrySnapshot, SaveTransaction
from .ports import classify_factory
from .sync import Registry, SyncCoordinator
from .tracker import ChangeTracker

logger = logging.getLogger(__name__)

class EditingSession:
    """Owns the graph and tracker of one editor, built from a registry snapshot."""

    def __init__(self, graph: GraphModel, snapshot: Optional[RegistrySnapshot] = None):
        self.graph = graph
        self.snapshot = snapshot or RegistrySnapshot()
        self._dirty = False
        self._closed = False

    @property
    def tracker(self) -> ChangeTracker:
        return self.graph.tracker

    @classmethod
    def from_snapshot(cls, snapshot: RegistrySnapshot,
                      settings: Optional[Settings] = None) -> "EditingSession":
        """Restore the saved graph, then add nodes for registered components it lacks."""
        settings = settings or Settings()
        graph = GraphModel.from_topology(snapshot.graph, ChangeTracker(),
                                         driver_factories=settings.driver_factories)
        for registered in snapshot.components:
            if graph.find_by_pid(registered.pid) is not None:
                continue
            spec = ComponentSpec(
                name=registered.name or registered.pid,
                factory_pid=registered.factory_pid,
                role=registered.role,
                driver_ref=registered.driver_ref,
                pid=registered.pid,
            )
            try:
                graph.add_component(spec)
            except DuplicateNameError:
                logger.warning("Registered component %s not shown: label '%s' is already in use",
                               registered.pid, spec.name)
                continue
            logger.info("Materialized registered component %s", registered.pid)
        session = cls(graph, snapshot)
        # Reconciliation is not an operator edit.
        graph.drain_events()
        return session

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError()

    def _touch(self) -> List[GraphEvent]:
        events = self.graph.drain_events()
        if events:
            self._dirty = True
        return events

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def create_component(self, factory_pid: str, name: str, driver_ref: Optional[str] = None) -> str:
        self._check_open()
        role = classify_factory(factory_pid, self.snapshot.producer_factories,
                                self.snapshot.consumer_factories)
        cid = self.graph.add_component(ComponentSpec(
            name=name, factory_pid=factory_pid, role=role, driver_ref=driver_ref))
        self._touch()
        return cid

    def connect(self, producer_id: str, consumer_id: str) -> str:
        self._check_open()
        wid = self.graph.add_wire(producer_id, consumer_id)
        self._touch()
        return wid

    def remove_component(self, component_id: str) -> None:
        self._check_open()
        self.graph.remove_component(component_id)
        self._touch()

    def remove_wire(self, wire_id: str) -> None:
        self._check_open()
        self.graph.remove_wire(wire_id)
        self._touch()

    def clear(self) -> None:
        self._check_open()
        self.graph.clear()
        self._touch()

    def save(self, registry: Registry) -> SaveTransaction:
        self._check_open()
        transaction = SyncCoordinator(registry).save(self.graph, self.tracker)
        self._dirty = False
        return transaction

    def on_status_event(self, pid: str) -> Optional[Component]:
        """Component a live-status event refers to, or None."""
        component = self.graph.find_by_pid(pid)
        if component is None:
            logger.warning("Status event for unknown component %s ignored", pid)
        return component

    def close(self) -> None:
        """Tear the session down; unsaved deletions are discarded."""
        self.tracker.reset()
        self.graph.drain_events()
        self._closed = True
