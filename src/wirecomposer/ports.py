from __future__ import annotations
from typing import Iterable, List, NamedTuple

from .ir import Role

# Ports are unnamed; a component exposes at most one of each direction.
UNNAMED_PORT = ""

class PortSet(NamedTuple):
    inputs: List[str]
    outputs: List[str]

def ports_for(role: Role) -> PortSet:
    """Port layout a component of the given role exposes."""
    if role == Role.BOTH:
        return PortSet(inputs=[UNNAMED_PORT], outputs=[UNNAMED_PORT])
    if role == Role.PRODUCER:
        return PortSet(inputs=[], outputs=[UNNAMED_PORT])
    return PortSet(inputs=[UNNAMED_PORT], outputs=[])

def has_input(role: Role) -> bool:
    return bool(ports_for(role).inputs)

def has_output(role: Role) -> bool:
    return bool(ports_for(role).outputs)

def classify_factory(factory_pid: str, producer_factories: Iterable[str],
                     consumer_factories: Iterable[str]) -> Role:
    """Role of a new component, from the factory sets the registry advertises.

    Anything not advertised as a producer is treated as a consumer.
    """
    is_producer = factory_pid in set(producer_factories)
    is_consumer = factory_pid in set(consumer_factories)
    if is_producer and is_consumer:
        return Role.BOTH
    if is_producer:
        return Role.PRODUCER
    return Role.CONSUMER
