"""Inbound edge index.

Capability edges are stored provider -> consumer (a chat model "outputs" to
the agent on ``ai_languageModel``), so every rule that asks "what is wired
into this node" needs the transpose of the forward connection table. It is
built once per validation run and shared read-only by all rule sets.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional

from .ir import Graph


class ReverseEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_name: str
    port_kind: str
    # output slot index on the source
    index: int


ReverseIndex = Dict[str, List[ReverseEdge]]


def build_reverse_index(graph: Graph) -> ReverseIndex:
    index: ReverseIndex = {}
    for source in graph.connections:
        if not isinstance(source, str):
            continue
        for port in graph.ports_of(source):
            if not isinstance(port, str):
                continue
            for slot_index, targets in graph.iter_slots(source, port):
                for target in targets:
                    index.setdefault(target.node, []).append(
                        ReverseEdge(source_name=source, port_kind=port, index=slot_index)
                    )
    return index


def inbound(index: ReverseIndex, node_name: str, port_kind: Optional[str] = None) -> List[ReverseEdge]:
    edges = index.get(node_name, [])
    if port_kind is None:
        return list(edges)
    return [e for e in edges if e.port_kind == port_kind]


def count_inbound(index: ReverseIndex, node_name: str, port_kind: Optional[str] = None) -> int:
    return len(inbound(index, node_name, port_kind))
