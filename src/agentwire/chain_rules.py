from __future__ import annotations
from typing import List

from .agent_rules import check_prompt_text
from .diagnostics import Code, Diagnostic, error
from .ir import Graph, Node, PortKind
from .reverse_index import ReverseIndex, count_inbound
from .settings import DEFAULT_SETTINGS, ValidationSettings


def validate_basic_chain(node: Node, index: ReverseIndex, graph: Graph,
                         settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    """Basic LLM Chain: exactly one language model, no fallback."""
    out: List[Diagnostic] = []
    models = count_inbound(index, node.name, PortKind.LANGUAGE_MODEL.value)
    if models == 0:
        out.append(error(node, Code.MISSING_LANGUAGE_MODEL,
                         f'Basic LLM Chain "{node.name}" requires an ai_languageModel connection.'))
    elif models > 1:
        out.append(error(node, Code.MULTIPLE_LANGUAGE_MODELS,
                         f'Basic LLM Chain "{node.name}" has {models} ai_languageModel connections. '
                         "Only 1 is supported; use an AI Agent for fallback models."))
    out.extend(check_prompt_text(node, "Basic LLM Chain"))
    return out
