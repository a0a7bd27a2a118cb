from __future__ import annotations
from typing import List, Optional

class CompositionError(Exception):
    """Base class for every recoverable wire composer error."""

class DuplicateNameError(CompositionError):
    def __init__(self, name: str):
        super().__init__(f"A component named '{name}' already exists.")
        self.name = name

class EmptyNameError(DuplicateNameError):
    """Raised for a blank component name; caught together with duplicates."""

    def __init__(self):
        CompositionError.__init__(self, "Component name must not be empty.")
        self.name = ""

class NotFoundError(CompositionError, KeyError):
    def __init__(self, kind: str, ident: str):
        CompositionError.__init__(self, f"No {kind} with id '{ident}'.")
        self.kind = kind
        self.ident = ident

    def __str__(self) -> str:
        return self.args[0]

class SelfLoopError(CompositionError):
    def __init__(self, component_id: str):
        super().__init__(f"Cannot wire component '{component_id}' to itself.")
        self.component_id = component_id

class InvalidEndpointError(CompositionError):
    pass

class DuplicateWireError(CompositionError):
    def __init__(self, producer: str, consumer: str):
        super().__init__(f"Wire {producer}->{consumer} already exists.")
        self.producer = producer
        self.consumer = consumer

class MissingDriverError(CompositionError):
    def __init__(self, factory_pid: str):
        super().__init__(f"Factory '{factory_pid}' requires a driver reference.")
        self.factory_pid = factory_pid

class CyclicTopologyError(CompositionError):
    """The graph has a directed cycle; the save was aborted."""

    def __init__(self, cycle: Optional[List[str]] = None):
        detail = f": {' -> '.join(cycle)}" if cycle else ""
        super().__init__(f"Topology contains a cycle{detail}")
        self.cycle = cycle or []

class SaveInProgressError(CompositionError):
    def __init__(self):
        super().__init__("Graph is locked while a save is in flight.")

class SessionClosedError(CompositionError):
    def __init__(self):
        super().__init__("Editing session has been closed.")

class RegistryError(CompositionError):
    """The registry rejected or failed to receive a save transaction."""
