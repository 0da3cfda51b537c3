from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing import Dict, List, Optional, Any, Iterator, Tuple


class InvalidGraphError(ValueError):
    """The workflow does not satisfy the input contract (nodes/connections shape)."""


class PortKind(str, Enum):
    MAIN = "main"
    LANGUAGE_MODEL = "ai_languageModel"
    MEMORY = "ai_memory"
    TOOL = "ai_tool"
    EMBEDDING = "ai_embedding"
    VECTOR_STORE = "ai_vectorStore"
    DOCUMENT = "ai_document"
    TEXT_SPLITTER = "ai_textSplitter"
    OUTPUT_PARSER = "ai_outputParser"


class Node(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: Optional[str] = None
    name: str = ""
    type: str = ""
    typeVersion: Any = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    credentials: Dict[str, Any] = Field(default_factory=dict)
    disabled: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _scalar_id(cls, v):
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("name", "type", mode="before")
    @classmethod
    def _text_or_empty(cls, v):
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return ""

    @field_validator("parameters", "credentials", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return v if isinstance(v, dict) else {}

    @field_validator("disabled", mode="before")
    @classmethod
    def _only_true_disables(cls, v):
        return v is True


class EdgeTarget(BaseModel):
    """One well-formed entry of an output slot: `{node, index}`."""
    model_config = ConfigDict(frozen=True)

    node: str
    index: int = 0


class Graph(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    nodes: List[Node]
    # kept raw: malformed entries are tolerated and skipped on read
    connections: Dict[Any, Any] = Field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Graph":
        if not isinstance(data, dict):
            raise InvalidGraphError("Workflow must be a mapping with 'nodes' and 'connections'.")
        if not isinstance(data.get("nodes"), list):
            raise InvalidGraphError("Property 'nodes' must be a list.")
        connections = data.get("connections", {})
        if connections is None:
            connections = {}
        if not isinstance(connections, dict):
            raise InvalidGraphError("Property 'connections' must be a mapping.")
        for position, entry in enumerate(data["nodes"]):
            if not isinstance(entry, dict):
                raise InvalidGraphError(f"Node entry {position} must be a mapping, got {type(entry).__name__}.")
        name = data.get("name")
        try:
            return cls.model_validate({**data, "name": name if isinstance(name, str) else None,
                                       "connections": connections})
        except ValidationError as e:
            raise InvalidGraphError(f"Workflow does not match the graph model: {e}") from e

    def node_map(self) -> Dict[str, Node]:
        return {n.name: n for n in self.nodes}

    def get_node(self, name: str) -> Optional[Node]:
        for n in self.nodes:
            if n.name == name:
                return n
        return None

    def iter_slots(self, source: str, port: str) -> Iterator[Tuple[int, List[EdgeTarget]]]:
        """Yield `(slot_index, targets)` for one source port, dropping malformed slots and targets."""
        outputs = self.connections.get(source)
        if not isinstance(outputs, dict):
            return
        slots = outputs.get(port)
        if not isinstance(slots, list):
            return
        for slot_index, slot in enumerate(slots):
            if not isinstance(slot, list):
                continue
            yield slot_index, [t for t in (_edge_target(raw) for raw in slot) if t is not None]

    def outbound(self, source: str, port: str = PortKind.MAIN.value) -> List[EdgeTarget]:
        """Flattened well-formed targets of `source` on `port`, in slot order."""
        out: List[EdgeTarget] = []
        for _, targets in self.iter_slots(source, port):
            out.extend(targets)
        return out

    def ports_of(self, source: str) -> List[str]:
        outputs = self.connections.get(source)
        if not isinstance(outputs, dict):
            return []
        return list(outputs.keys())


def _edge_target(raw: Any) -> Optional[EdgeTarget]:
    if not isinstance(raw, dict):
        return None
    name = raw.get("node")
    if not isinstance(name, str) or not name:
        return None
    index = raw.get("index", 0)
    if isinstance(index, bool) or not isinstance(index, int):
        index = 0
    return EdgeTarget(node=name, index=index)
