import pytest
from wirecomposer.config import Settings
from wirecomposer.errors import CyclicTopologyError, MissingDriverError, SessionClosedError
from wirecomposer.session import EditingSession
from wirecomposer.ir import InstanceDeletion, RegisteredComponent, RegistrySnapshot, Role, SaveTransaction, Topology

class RecordingRegistry:
    def __init__(self):
        self.transactions = []

    def submit(self, transaction: SaveTransaction) -> None:
        self.transactions.append(transaction)

def _snapshot(**kwargs) -> RegistrySnapshot:
    base = dict(
        producer_factories=["timer", "asset"],
        consumer_factories=["logger", "asset"],
    )
    base.update(kwargs)
    return RegistrySnapshot(**base)

def test_registered_component_is_materialized_and_deleted_on_save():
    snapshot = _snapshot(components=[RegisteredComponent(pid="X1", factory_pid="timer", name="X", role=Role.PRODUCER)])
    session = EditingSession.from_snapshot(snapshot)
    x = session.graph.find_by_pid("X1")
    assert x is not None and x.name == "X"
    assert not session.is_dirty

    session.remove_component(x.id)
    registry = RecordingRegistry()
    txn = session.save(registry)

    assert txn.deletions == [InstanceDeletion(pid="X1")]
    assert txn.topology.components == []

def test_components_already_in_graph_are_not_duplicated():
    graph = Topology(components=[{"id": "c1", "pid": "X1", "factory_pid": "timer", "name": "X", "role": "producer"}])
    snapshot = _snapshot(graph=graph, components=[
        RegisteredComponent(pid="X1", factory_pid="timer", name="X", role=Role.PRODUCER),
        RegisteredComponent(pid="Y1", factory_pid="logger", role=Role.CONSUMER),
    ])
    session = EditingSession.from_snapshot(snapshot)
    assert sorted(c.name for c in session.graph.components) == ["X", "Y1"]
    assert session.graph.get_component("c1").pid == "X1"

def test_registered_component_with_taken_label_is_skipped():
    graph = Topology(components=[{"id": "c1", "pid": "X1", "factory_pid": "timer", "name": "X", "role": "producer"}])
    snapshot = _snapshot(graph=graph, components=[
        RegisteredComponent(pid="X2", factory_pid="timer", name="X", role=Role.PRODUCER),
    ])
    session = EditingSession.from_snapshot(snapshot)
    assert [c.pid for c in session.graph.components] == ["X1"]

def test_create_component_classifies_role_and_requires_driver():
    session = EditingSession.from_snapshot(_snapshot(), Settings(driver_factories=["asset"]))
    t = session.create_component("timer", "t")
    l = session.create_component("logger", "l")
    assert session.graph.get_component(t).role == Role.PRODUCER
    assert session.graph.get_component(l).role == Role.CONSUMER
    with pytest.raises(MissingDriverError):
        session.create_component("asset", "a")
    a = session.create_component("asset", "a", driver_ref="modbus")
    assert session.graph.get_component(a).role == Role.BOTH
    assert session.is_dirty

def test_scenario_cycle_aborts_and_leaves_state():
    session = EditingSession.from_snapshot(_snapshot())
    a = session.create_component("timer", "A")
    b = session.create_component("asset", "B", driver_ref="drv")
    c = session.create_component("asset", "C", driver_ref="drv")
    session.connect(a, b)
    session.connect(b, c)
    session.connect(c, b)
    registry = RecordingRegistry()
    with pytest.raises(CyclicTopologyError):
        session.save(registry)
    assert registry.transactions == []
    assert session.is_dirty
    assert session.tracker.pending_creations == {a, b, c}

def test_save_clears_dirty_flag():
    session = EditingSession.from_snapshot(_snapshot())
    a = session.create_component("timer", "A")
    b = session.create_component("logger", "B")
    session.connect(a, b)
    session.save(RecordingRegistry())
    assert not session.is_dirty
    assert session.graph.get_component(a).pid == "A"

def test_status_event_lookup():
    snapshot = _snapshot(components=[RegisteredComponent(pid="X1", factory_pid="timer", role=Role.PRODUCER)])
    session = EditingSession.from_snapshot(snapshot)
    assert session.on_status_event("X1").name == "X1"
    assert session.on_status_event("other") is None

def test_close_discards_pending_state():
    snapshot = _snapshot(components=[RegisteredComponent(pid="X1", factory_pid="timer", role=Role.PRODUCER)])
    session = EditingSession.from_snapshot(snapshot)
    session.clear()
    assert session.tracker.pending_deletions == [InstanceDeletion(pid="X1")]
    session.close()
    assert session.tracker.pending_deletions == []
    with pytest.raises(SessionClosedError):
        session.create_component("timer", "T")
