from pathlib import Path
import networkx as nx
from .graph import GraphModel
from .validator import to_digraph

def ascii_plan(graph: GraphModel) -> str:
    nxg = to_digraph(graph)
    by_id = {c.id: c for c in graph.components}
    try:
        order = list(nx.topological_sort(nxg))
    except nx.NetworkXUnfeasible:
        return "# ASCII Plan unavailable: the wire graph contains a cycle."

    lines = ["# ASCII Plan (topological order)"]
    for i, cid in enumerate(order, 1):
        comp = by_id[cid]
        status = comp.pid if comp.is_registered else "unregistered"
        lines.append(f"{i:02d}. {comp.name} [{comp.factory_pid}] ({comp.role.value}, {status})")
        for succ in sorted(nxg.successors(cid), key=lambda s: by_id[s].name):
            lines.append(f"    └─▶ {by_id[succ].name}")
    return "\n".join(lines)

def ascii_plan_from_file(path: Path) -> str:
    from .config import load_snapshot
    from .session import EditingSession

    session = EditingSession.from_snapshot(load_snapshot(path))
    return ascii_plan(session.graph)
