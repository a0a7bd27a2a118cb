from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import networkx as nx

from .graph import GraphModel
from .ir import Component
from .ports import has_input, has_output

def _reaches_path_again(adj: Dict[str, Set[str]], start: str,
                        on_path: Set[str], finished: Set[str]) -> bool:
    # Explicit stack of (node, remaining successors); no recursion limit on long chains.
    on_path.add(start)
    stack = [(start, iter(adj.get(start, ())))]
    while stack:
        node, succs = stack[-1]
        succ = next(succs, None)
        if succ is None:
            stack.pop()
            on_path.discard(node)
            finished.add(node)
        elif succ in on_path:
            return True
        elif succ not in finished:
            on_path.add(succ)
            stack.append((succ, iter(adj.get(succ, ()))))
    return False

def has_cycle(graph: GraphModel) -> bool:
    """True if any directed cycle exists in the wire topology.

    Each start node (a component with at least one inbound wire) gets its own
    depth-first search with its own path and finished sets. Sharing them across
    start nodes would report a cycle whenever two branches reach a common
    successor.
    """
    adj = graph.adjacency()
    has_inbound = {succ for succs in adj.values() for succ in succs}
    for start in adj:
        if start not in has_inbound:
            continue
        if _reaches_path_again(adj, start, on_path=set(), finished=set()):
            return True
    return False

def to_digraph(graph: GraphModel) -> nx.DiGraph:
    nxg = nx.DiGraph()
    nxg.add_nodes_from(c.id for c in graph.components)
    for w in graph.wires:
        nxg.add_edge(w.producer, w.consumer)
    return nxg

def find_cycle(graph: GraphModel) -> Optional[List[str]]:
    """Component ids along one cycle, first id repeated at the end; None if acyclic."""
    try:
        edges = nx.find_cycle(to_digraph(graph), orientation="original")
    except nx.NetworkXNoCycle:
        return None
    return [u for u, _v, _d in edges] + [edges[0][0]]

def _name(by_id: Dict[str, Component], cid: str) -> str:
    return by_id[cid].name if cid in by_id else cid

def validate_graph(graph: GraphModel) -> Tuple[bool, List[str]]:
    messages: List[str] = []
    ok = True
    components = graph.components
    by_id = {c.id: c for c in components}

    # 1) Unique component names
    names = [c.name for c in components]
    if len(set(names)) != len(names):
        ok = False
        messages.append("ERR: Duplicate component names detected.")
    else:
        messages.append("OK: Component names are unique.")

    # 2) Wires refer to existing components
    dangling = False
    for w in graph.wires:
        if w.producer not in by_id or w.consumer not in by_id:
            ok = False
            dangling = True
            messages.append(f"ERR: Wire {w.producer}->{w.consumer} references missing component(s).")
    if not dangling:
        messages.append("OK: All wires reference existing components.")

    # 3) Endpoints expose the right ports
    bad_port = False
    for w in graph.wires:
        producer, consumer = by_id.get(w.producer), by_id.get(w.consumer)
        if producer is None or consumer is None:
            continue
        if not has_output(producer.role):
            bad_port = True
            messages.append(f"ERR: Wire from {producer.name} but it has no output port.")
        if not has_input(consumer.role):
            bad_port = True
            messages.append(f"ERR: Wire to {consumer.name} but it has no input port.")
    if bad_port:
        ok = False
    else:
        messages.append("OK: All wire endpoints correspond to exposed ports.")

    # 4) No self-loops or parallel wires
    seen = set()
    bad_pair = False
    for w in graph.wires:
        label = _name(by_id, w.producer)
        if w.producer == w.consumer:
            bad_pair = True
            messages.append(f"ERR: Wire {w.id} loops {label} back to itself.")
        elif (w.producer, w.consumer) in seen:
            bad_pair = True
            messages.append(f"ERR: Duplicate wire {label}->{_name(by_id, w.consumer)}.")
        seen.add((w.producer, w.consumer))
    if bad_pair:
        ok = False
    else:
        messages.append("OK: No self-loops or duplicate wires.")

    # 5) Acyclic check
    if has_cycle(graph):
        ok = False
        cycle = find_cycle(graph) or []
        labels = " -> ".join(by_id[cid].name for cid in cycle if cid in by_id)
        messages.append(f"ERR: Cycle detected in the graph: {labels}" if labels
                        else "ERR: Cycle detected in the graph.")
    else:
        messages.append("OK: Graph is acyclic.")

    return ok, messages

def validate_snapshot_file(path: Path) -> Tuple[bool, List[str]]:
    from .config import load_snapshot
    from .session import EditingSession

    session = EditingSession.from_snapshot(load_snapshot(path))
    return validate_graph(session.graph)
