"""Node type normalization and AI category classification.

Workflow files carry node types in several spellings depending on the
platform version that wrote them (``n8n-nodes-base.x``,
``@n8n/n8n-nodes-langchain.x``, ``nodes-langchain.x``). Everything here works
on the short canonical form produced by :func:`normalize`.
"""
from __future__ import annotations
from enum import Enum
from typing import NamedTuple, Optional, Any

from .ir import Graph

_PREFIXES = (
    ("n8n-nodes-base.", "nodes-base."),
    ("@n8n/n8n-nodes-langchain.", "nodes-langchain."),
    ("n8n-nodes-langchain.", "nodes-langchain."),
)

AGENT_TYPE = "nodes-langchain.agent"
CHAT_TRIGGER_TYPE = "nodes-langchain.chatTrigger"
BASIC_CHAIN_TYPE = "nodes-langchain.chainLlm"

TOOL_SUBNODE_TYPES = frozenset({
    "nodes-langchain.toolHttpRequest",
    "nodes-langchain.toolCode",
    "nodes-langchain.toolVectorStore",
    "nodes-langchain.toolWorkflow",
    "nodes-langchain.agentTool",
    "nodes-langchain.mcpClientTool",
    "nodes-langchain.toolCalculator",
    "nodes-langchain.toolThink",
    "nodes-langchain.toolSerpApi",
    "nodes-langchain.toolWikipedia",
    "nodes-langchain.toolSearXng",
    "nodes-langchain.toolWolframAlpha",
})


class Category(str, Enum):
    AGENT = "agent"
    CHAT_TRIGGER = "chatTrigger"
    BASIC_CHAIN = "basicChain"
    TOOL_SUBNODE = "toolSubnode"
    OTHER = "other"


class Classification(NamedTuple):
    category: Category
    subtype: Optional[str] = None


_OTHER = Classification(Category.OTHER)
_FIXED = {
    AGENT_TYPE: Classification(Category.AGENT),
    CHAT_TRIGGER_TYPE: Classification(Category.CHAT_TRIGGER),
    BASIC_CHAIN_TYPE: Classification(Category.BASIC_CHAIN),
}


def normalize(raw_type: Any) -> str:
    if not isinstance(raw_type, str) or not raw_type:
        return ""
    for full, short in _PREFIXES:
        if raw_type.startswith(full):
            return short + raw_type[len(full):]
    return raw_type


def classify(canonical_type: str) -> Classification:
    """Map a canonical type to its category; raw types are normalized first."""
    t = normalize(canonical_type)
    if t in _FIXED:
        return _FIXED[t]
    if t in TOOL_SUBNODE_TYPES:
        return Classification(Category.TOOL_SUBNODE, t)
    return _OTHER


def is_ai_graph(graph: Graph) -> bool:
    return any(classify(n.type).category is not Category.OTHER for n in graph.nodes)


def package_of(raw_type: Any) -> str:
    t = normalize(raw_type)
    if t.startswith("nodes-base."):
        return "base"
    if t.startswith("nodes-langchain."):
        return "langchain"
    if "." in t:
        return "community"
    return "unknown"


def short_name(raw_type: Any) -> str:
    t = normalize(raw_type)
    return t.rsplit(".", 1)[-1]
