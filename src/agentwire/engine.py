"""Runs the per-category rule sets over a workflow graph."""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional

from .agent_rules import validate_agent
from .chain_rules import validate_basic_chain
from .classifier import Category, classify
from .diagnostics import Diagnostic
from .ir import Graph, Node
from .reverse_index import ReverseIndex, build_reverse_index
from .settings import DEFAULT_SETTINGS, ValidationSettings
from .tool_rules import validate_tool_subnode
from .trigger_rules import validate_chat_trigger

logger = logging.getLogger(__name__)

RuleSet = Callable[[Node, ReverseIndex, Graph, ValidationSettings], List[Diagnostic]]

RULE_SETS: Mapping[Category, RuleSet] = MappingProxyType({
    Category.AGENT: validate_agent,
    Category.CHAT_TRIGGER: validate_chat_trigger,
    Category.BASIC_CHAIN: validate_basic_chain,
    Category.TOOL_SUBNODE: validate_tool_subnode,
})


def validate_node(node: Node, index: ReverseIndex, graph: Graph,
                  settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    if node.disabled:
        return []
    rules = RULE_SETS.get(classify(node.type).category)
    if rules is None:
        return []
    return rules(node, index, graph, settings)


def validate_ai_nodes(graph: Graph, settings: Optional[ValidationSettings] = None,
                      max_workers: int = 1) -> List[Diagnostic]:
    """Semantic diagnostics for every AI node, in node order then rule order.

    With `max_workers` > 1 nodes are evaluated on a thread pool; the result is
    the same list the sequential run produces.
    """
    settings = settings or DEFAULT_SETTINGS
    index = build_reverse_index(graph)
    logger.debug("reverse index built: %d targets, %d nodes",
                 len(index), len(graph.nodes))

    if max_workers > 1 and len(graph.nodes) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            per_node = list(pool.map(lambda n: validate_node(n, index, graph, settings), graph.nodes))
    else:
        per_node = [validate_node(n, index, graph, settings) for n in graph.nodes]

    diagnostics: List[Diagnostic] = []
    for node, found in zip(graph.nodes, per_node):
        if found:
            logger.debug("node %r: %d diagnostic(s)", node.name, len(found))
        diagnostics.extend(found)
    return diagnostics
