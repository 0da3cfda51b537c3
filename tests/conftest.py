import json
from pathlib import Path

import pytest

from agentwire.ir import Graph

LANGCHAIN = "@n8n/n8n-nodes-langchain."


class WorkflowBuilder:
    def __init__(self):
        self.nodes = []
        self.connections = {}

    def node(self, name, type_, parameters=None, **extra):
        self.nodes.append({"id": f"id-{len(self.nodes) + 1}", "name": name, "type": type_,
                           "typeVersion": 1, "position": [0, 0],
                           "parameters": parameters if parameters is not None else {}, **extra})
        return self

    def agent(self, name="Agent", **params):
        return self.node(name, LANGCHAIN + "agent", params)

    def chat_trigger(self, name="Chat", **params):
        return self.node(name, LANGCHAIN + "chatTrigger", params)

    def chain(self, name="Chain", **params):
        return self.node(name, LANGCHAIN + "chainLlm", params)

    def tool(self, short, name=None, credentials=None, **params):
        extra = {"credentials": credentials} if credentials is not None else {}
        return self.node(name or short, LANGCHAIN + short, params, **extra)

    def model(self, name="Model"):
        return self.node(name, LANGCHAIN + "lmChatOpenAi")

    def plain(self, name, short="set"):
        return self.node(name, "n8n-nodes-base." + short)

    def connect(self, source, target, port="main", slot=0, index=0):
        slots = self.connections.setdefault(source, {}).setdefault(port, [])
        while len(slots) <= slot:
            slots.append([])
        slots[slot].append({"node": target, "type": port, "index": index})
        return self

    def as_dict(self):
        return {"name": "test", "nodes": self.nodes, "connections": self.connections}

    def build(self):
        return Graph.from_dict(self.as_dict())


@pytest.fixture
def wf():
    return WorkflowBuilder


@pytest.fixture
def write_workflow(tmp_path: Path):
    def _write(data, name="workflow.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path
    return _write
