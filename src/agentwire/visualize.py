from typing import List
import networkx as nx

from .classifier import Category, classify
from .ir import Graph, PortKind
from .reverse_index import build_reverse_index


def _plan_order(g: Graph) -> List[str]:
    nxg = nx.DiGraph()
    nxg.add_nodes_from([n.name for n in g.nodes])
    index = build_reverse_index(g)
    for target, edges in index.items():
        for e in edges:
            if nxg.has_node(e.source_name) and nxg.has_node(target):
                nxg.add_edge(e.source_name, target)
    if nx.is_directed_acyclic_graph(nxg):
        # stable: ties keep declaration order
        position = {n.name: i for i, n in enumerate(g.nodes)}
        return list(nx.lexicographical_topological_sort(nxg, key=lambda name: position[name]))
    return [n.name for n in g.nodes]


def capability_plan(g: Graph) -> str:
    """Text plan: each node with the capabilities wired into it and its main outputs."""
    index = build_reverse_index(g)
    node_map = g.node_map()
    lines = ["# Capability Plan"]
    for i, name in enumerate(_plan_order(g), 1):
        node = node_map[name]
        category = classify(node.type).category
        flags = " (disabled)" if node.disabled else ""
        lines.append(f"{i:02d}. {name} [{category.value}]{flags}")
        for e in index.get(name, []):
            if e.port_kind != PortKind.MAIN.value:
                lines.append(f"    ◀── {e.source_name}  ({e.port_kind})")
        for t in g.outbound(name):
            lines.append(f"    └─▶ {t.node}  (main)")
        if category is Category.AGENT and not any(e.port_kind == PortKind.LANGUAGE_MODEL.value
                                                  for e in index.get(name, [])):
            lines.append("    !   no language model")
    return "\n".join(lines)
