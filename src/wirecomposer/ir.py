from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union

UNREGISTERED_PID = "none"

class Role(str, Enum):
    PRODUCER = "producer"
    CONSUMER = "consumer"
    BOTH = "both"

class ComponentSpec(BaseModel):
    name: str
    factory_pid: str
    role: Role
    driver_ref: Optional[str] = None
    pid: str = UNREGISTERED_PID

class Component(BaseModel):
    id: str
    pid: str = UNREGISTERED_PID
    factory_pid: str
    name: str
    role: Role
    driver_ref: Optional[str] = None

    @property
    def is_registered(self) -> bool:
        return self.pid != UNREGISTERED_PID

class Wire(BaseModel):
    id: str
    producer: str   # component id
    consumer: str   # component id
    is_new: bool = True

class WireDeletion(BaseModel):
    kind: Literal["wire"] = "wire"
    producer: str
    consumer: str

class InstanceDeletion(BaseModel):
    kind: Literal["instance"] = "instance"
    pid: str

DeletionRecord = Annotated[Union[WireDeletion, InstanceDeletion], Field(discriminator="kind")]

class Topology(BaseModel):
    components: List[Component] = Field(default_factory=list)
    wires: List[Wire] = Field(default_factory=list)

class SaveTransaction(BaseModel):
    topology: Topology
    deletions: List[DeletionRecord] = Field(default_factory=list)

class RegisteredComponent(BaseModel):
    pid: str
    factory_pid: str
    name: str = ""
    role: Role
    driver_ref: Optional[str] = None

class RegistrySnapshot(BaseModel):
    graph: Topology = Field(default_factory=Topology)
    components: List[RegisteredComponent] = Field(default_factory=list)
    producer_factories: List[str] = Field(default_factory=list)
    consumer_factories: List[str] = Field(default_factory=list)
    drivers: List[str] = Field(default_factory=list)
