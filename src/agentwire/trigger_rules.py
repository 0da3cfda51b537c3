from __future__ import annotations
from typing import List

from .classifier import Category, classify
from .diagnostics import Code, Diagnostic, error, info
from .ir import Graph, Node
from .params import get_option
from .reverse_index import ReverseIndex
from .settings import DEFAULT_SETTINGS, ValidationSettings

STREAMING = "streaming"
LAST_NODE = "lastNode"


def response_mode(node: Node) -> str:
    mode = get_option(node.parameters, "responseMode")
    return mode if isinstance(mode, str) else LAST_NODE


def validate_chat_trigger(node: Node, index: ReverseIndex, graph: Graph,
                          settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    name = node.name
    targets = graph.outbound(name)
    if not targets:
        return [error(node, Code.MISSING_CONNECTIONS,
                      f'Chat Trigger "{name}" has no outgoing connections. Connect it to an AI Agent.')]

    # unresolved target names belong to the structural validator
    target = graph.get_node(targets[0].node)
    if target is None:
        return []

    out: List[Diagnostic] = []
    mode = response_mode(node)
    target_is_agent = classify(target.type).category is Category.AGENT
    if mode == STREAMING:
        if not target_is_agent:
            out.append(error(node, Code.STREAMING_WRONG_TARGET,
                             f'Chat Trigger "{name}" uses streaming mode but connects to "{target.name}" '
                             f"({target.type}). Streaming only works with an AI Agent."))
        elif graph.outbound(target.name):
            out.append(error(node, Code.STREAMING_AGENT_HAS_OUTPUT,
                             f'Chat Trigger "{name}" streams to AI Agent "{target.name}", which has outgoing '
                             "main connections. The streamed response never reaches them."))
    elif mode == LAST_NODE and target_is_agent:
        out.append(info(node, Code.STREAMING_RECOMMENDED,
                        f'Chat Trigger "{name}" uses responseMode="lastNode" with an AI Agent. '
                        'Consider responseMode="streaming" for a more interactive chat.'))
    return out
