from __future__ import annotations
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

from .errors import (
    DuplicateNameError,
    DuplicateWireError,
    EmptyNameError,
    InvalidEndpointError,
    MissingDriverError,
    NotFoundError,
    SaveInProgressError,
    SelfLoopError,
)
from .ir import UNREGISTERED_PID, Component, ComponentSpec, Topology, Wire
from .ports import has_input, has_output
from .tracker import ChangeTracker

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ComponentAdded:
    component_id: str

@dataclass(frozen=True)
class ComponentRemoved:
    component_id: str
    pid: str

@dataclass(frozen=True)
class WireAdded:
    wire_id: str
    producer: str
    consumer: str

@dataclass(frozen=True)
class WireRemoved:
    wire_id: str
    producer: str
    consumer: str

GraphEvent = Union[ComponentAdded, ComponentRemoved, WireAdded, WireRemoved]

def _new_id() -> str:
    return str(uuid.uuid4())

class GraphModel:
    """Single source of truth for components and wires of one editing session."""

    def __init__(self, tracker: Optional[ChangeTracker] = None,
                 driver_factories: Iterable[str] = ()):
        self.tracker = tracker if tracker is not None else ChangeTracker()
        self._driver_factories = set(driver_factories)
        self._components: Dict[str, Component] = {}
        self._wires: Dict[str, Wire] = {}
        self._events: List[GraphEvent] = []
        self._locked = False

    # -- queries -----------------------------------------------------------

    @property
    def components(self) -> List[Component]:
        return list(self._components.values())

    @property
    def wires(self) -> List[Wire]:
        return list(self._wires.values())

    def __contains__(self, component_id: str) -> bool:
        return component_id in self._components

    def get_component(self, component_id: str) -> Component:
        try:
            return self._components[component_id]
        except KeyError:
            raise NotFoundError("component", component_id) from None

    def get_wire(self, wire_id: str) -> Wire:
        try:
            return self._wires[wire_id]
        except KeyError:
            raise NotFoundError("wire", wire_id) from None

    def successors(self, component_id: str) -> Set[str]:
        return {w.consumer for w in self._wires.values() if w.producer == component_id}

    def predecessors(self, component_id: str) -> Set[str]:
        return {w.producer for w in self._wires.values() if w.consumer == component_id}

    def adjacency(self) -> Dict[str, Set[str]]:
        adj: Dict[str, Set[str]] = {cid: set() for cid in self._components}
        for w in self._wires.values():
            adj[w.producer].add(w.consumer)
        return adj

    def find_by_pid(self, pid: str) -> Optional[Component]:
        if pid == UNREGISTERED_PID:
            return None
        return next((c for c in self._components.values() if c.pid == pid), None)

    def find_by_name(self, name: str) -> Optional[Component]:
        return next((c for c in self._components.values() if c.name == name), None)

    def driver_for(self, name: str) -> Optional[str]:
        component = self.find_by_name(name)
        return component.driver_ref if component is not None else None

    def find_wire(self, producer: str, consumer: str) -> Optional[Wire]:
        return next((w for w in self._wires.values()
                     if w.producer == producer and w.consumer == consumer), None)

    def drain_events(self) -> List[GraphEvent]:
        events, self._events = self._events, []
        return events

    # -- mutations ---------------------------------------------------------

    def add_component(self, spec: ComponentSpec) -> str:
        self._check_unlocked()
        if not spec.name:
            raise EmptyNameError()
        if self.find_by_name(spec.name) is not None:
            raise DuplicateNameError(spec.name)
        # New instances are registered under their label, so it must not shadow a live pid.
        if spec.pid == UNREGISTERED_PID and self.find_by_pid(spec.name) is not None:
            raise DuplicateNameError(spec.name)
        if (spec.pid == UNREGISTERED_PID and spec.factory_pid in self._driver_factories
                and not spec.driver_ref):
            raise MissingDriverError(spec.factory_pid)

        component = Component(
            id=_new_id(),
            pid=spec.pid,
            factory_pid=spec.factory_pid,
            name=spec.name,
            role=spec.role,
            driver_ref=spec.driver_ref,
        )
        self._components[component.id] = component
        self.tracker.record_creation(component)
        self._events.append(ComponentAdded(component.id))
        logger.debug("Added component %s (%s, pid=%s)", component.name, component.role.value, component.pid)
        return component.id

    def remove_component(self, component_id: str) -> None:
        self._check_unlocked()
        component = self.get_component(component_id)
        attached = [w for w in self._wires.values()
                    if w.producer == component_id or w.consumer == component_id]
        for wire in attached:
            self._drop_wire(wire)
        del self._components[component_id]
        self.tracker.record_removal(component)
        self._events.append(ComponentRemoved(component.id, component.pid))
        logger.debug("Removed component %s with %d attached wire(s)", component.name, len(attached))

    def add_wire(self, producer_id: str, consumer_id: str) -> str:
        self._check_unlocked()
        if producer_id == consumer_id:
            raise SelfLoopError(producer_id)
        producer = self._components.get(producer_id)
        consumer = self._components.get(consumer_id)
        if producer is None or consumer is None:
            missing = producer_id if producer is None else consumer_id
            raise InvalidEndpointError(f"Component '{missing}' is not in the graph.")
        if not has_output(producer.role):
            raise InvalidEndpointError(f"Component '{producer.name}' has no output port.")
        if not has_input(consumer.role):
            raise InvalidEndpointError(f"Component '{consumer.name}' has no input port.")
        if self.find_wire(producer_id, consumer_id) is not None:
            raise DuplicateWireError(producer_id, consumer_id)

        wire = Wire(id=_new_id(), producer=producer_id, consumer=consumer_id, is_new=True)
        self._wires[wire.id] = wire
        self._events.append(WireAdded(wire.id, wire.producer, wire.consumer))
        logger.debug("Added wire %s->%s", producer.name, consumer.name)
        return wire.id

    def remove_wire(self, wire_id: str) -> None:
        self._check_unlocked()
        self._drop_wire(self.get_wire(wire_id))

    def clear(self) -> None:
        """Remove everything. Never fails part way; only the save lock rejects it."""
        self._check_unlocked()
        for wire in list(self._wires.values()):
            self._drop_wire(wire)
        for component in list(self._components.values()):
            del self._components[component.id]
            self.tracker.record_removal(component)
            self._events.append(ComponentRemoved(component.id, component.pid))

    def _drop_wire(self, wire: Wire) -> None:
        del self._wires[wire.id]
        self.tracker.record_removal(wire)
        self._events.append(WireRemoved(wire.id, wire.producer, wire.consumer))

    # -- save support ------------------------------------------------------

    @contextmanager
    def locked(self) -> Iterator["GraphModel"]:
        """Reject mutations for the duration of a registry hand-off."""
        self._check_unlocked()
        self._locked = True
        try:
            yield self
        finally:
            self._locked = False

    @property
    def is_locked(self) -> bool:
        return self._locked

    def _check_unlocked(self) -> None:
        if self._locked:
            raise SaveInProgressError()

    def mark_committed(self) -> None:
        # The registry creates new instances under their label.
        for component in self._components.values():
            if not component.is_registered:
                component.pid = component.name
        for wire in self._wires.values():
            wire.is_new = False

    def to_topology(self) -> Topology:
        return Topology(
            components=[c.model_copy() for c in self._components.values()],
            wires=[w.model_copy() for w in self._wires.values()],
        )

    @classmethod
    def from_topology(cls, topology: Topology, tracker: Optional[ChangeTracker] = None,
                      driver_factories: Iterable[str] = ()) -> "GraphModel":
        """Restore a saved graph, keeping ids, pids and wire flags as stored."""
        graph = cls(tracker=tracker, driver_factories=driver_factories)
        for component in topology.components:
            graph._components[component.id] = component.model_copy()
        for wire in topology.wires:
            if wire.producer not in graph._components or wire.consumer not in graph._components:
                logger.warning("Dropping stale wire %s: %s->%s references a missing component",
                               wire.id, wire.producer, wire.consumer)
                continue
            graph._wires[wire.id] = wire.model_copy()
        return graph
