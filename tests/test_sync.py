from pathlib import Path
import pytest
from wirecomposer.errors import CyclicTopologyError, RegistryError, SaveInProgressError
from wirecomposer.generator import load_transaction_yaml
from wirecomposer.graph import GraphModel
from wirecomposer.ir import ComponentSpec, InstanceDeletion, Role, SaveTransaction
from wirecomposer.sync import FileRegistry, SyncCoordinator

class RecordingRegistry:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.transactions = []

    def submit(self, transaction: SaveTransaction) -> None:
        if self.fail:
            raise RegistryError("registry unavailable")
        self.transactions.append(transaction)

def _add(g: GraphModel, name: str, role: Role, pid: str = "none") -> str:
    return g.add_component(ComponentSpec(name=name, factory_pid="f", role=role, pid=pid))

def test_save_producer_consumer():
    g = GraphModel()
    a = _add(g, "A", Role.PRODUCER)
    b = _add(g, "B", Role.CONSUMER)
    wid = g.add_wire(a, b)
    registry = RecordingRegistry()

    txn = SyncCoordinator(registry).save(g, g.tracker)

    assert registry.transactions == [txn]
    assert {c.name for c in txn.topology.components} == {"A", "B"}
    assert [(w.id, w.producer, w.consumer) for w in txn.topology.wires] == [(wid, a, b)]
    assert txn.deletions == []
    # committed: the registry names new instances after their label
    assert g.get_component(a).pid == "A"
    assert g.get_wire(wid).is_new is False
    assert g.tracker.pending_creations == set()

def test_cyclic_save_is_aborted_without_touching_tracker():
    g = GraphModel()
    x = _add(g, "X", Role.PRODUCER, pid="X1")
    a = _add(g, "A", Role.PRODUCER)
    b = _add(g, "B", Role.BOTH)
    c = _add(g, "C", Role.BOTH)
    g.remove_component(x)
    g.add_wire(a, b)
    g.add_wire(b, c)
    g.add_wire(c, b)
    registry = RecordingRegistry()

    with pytest.raises(CyclicTopologyError) as exc:
        SyncCoordinator(registry).save(g, g.tracker)

    assert set(exc.value.cycle) == {b, c}
    assert registry.transactions == []
    assert g.tracker.pending_deletions == [InstanceDeletion(pid="X1")]
    assert g.get_component(a).pid == "none"
    assert not g.is_locked

def test_registry_failure_keeps_deletions_for_retry():
    g = GraphModel()
    x = _add(g, "X", Role.PRODUCER, pid="X1")
    g.remove_component(x)
    failing = RecordingRegistry(fail=True)

    with pytest.raises(RegistryError):
        SyncCoordinator(failing).save(g, g.tracker)
    assert g.tracker.pending_deletions == [InstanceDeletion(pid="X1")]
    assert not g.is_locked

    ok = RecordingRegistry()
    txn = SyncCoordinator(ok).save(g, g.tracker)
    assert txn.deletions == [InstanceDeletion(pid="X1")]
    assert g.tracker.pending_deletions == []

def test_graph_locked_during_submit():
    g = GraphModel()
    _add(g, "A", Role.PRODUCER)

    class MutatingRegistry:
        def submit(self, transaction):
            _add(g, "B", Role.CONSUMER)

    with pytest.raises(SaveInProgressError):
        SyncCoordinator(MutatingRegistry()).save(g, g.tracker)
    assert [c.name for c in g.components] == ["A"]

def test_file_registry_writes_yaml(tmp_path: Path):
    g = GraphModel()
    x = _add(g, "X", Role.PRODUCER, pid="X1")
    c = _add(g, "C", Role.CONSUMER)
    g.add_wire(x, c)
    out = tmp_path / "out" / "transaction.yaml"

    txn = SyncCoordinator(FileRegistry(out)).save(g, g.tracker)

    assert load_transaction_yaml(out) == txn

def test_file_registry_error(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(RegistryError):
        FileRegistry(blocker / "transaction.yaml").submit(SaveTransaction(topology=GraphModel().to_topology()))

def test_nested_save_rejected_and_outer_lock_held():
    g = GraphModel()
    x = _add(g, "X", Role.PRODUCER, pid="X1")
    g.remove_component(x)
    inner = RecordingRegistry()
    seen = {}

    class ReentrantRegistry:
        def __init__(self):
            self.transactions = []

        def submit(self, transaction):
            with pytest.raises(SaveInProgressError):
                SyncCoordinator(inner).save(g, g.tracker)
            seen["locked"] = g.is_locked
            self.transactions.append(transaction)

    outer = ReentrantRegistry()
    txn = SyncCoordinator(outer).save(g, g.tracker)

    assert seen["locked"] is True
    assert inner.transactions == []
    assert txn.deletions == [InstanceDeletion(pid="X1")]
    assert g.tracker.pending_deletions == []
    assert not g.is_locked
