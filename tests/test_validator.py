from pathlib import Path

import pytest
import yaml

from agentwire.ir import InvalidGraphError
from agentwire.validator import load_graph, validate_files, validate_graph, validate_graph_from_file


def test_generate_and_validate(tmp_path: Path, wf):
    data = (wf().chat_trigger(responseMode="streaming").agent(systemMessage="Answer billing questions politely.")
            .model("GPT").tool("toolWorkflow", "Lookup", workflowId="42")
            .connect("Chat", "Agent")
            .connect("GPT", "Agent", "ai_languageModel")
            .connect("Lookup", "Agent", "ai_tool")
            .as_dict())
    path = tmp_path / "chat.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    ok, diagnostics = validate_graph_from_file(path)
    assert ok, diagnostics
    assert diagnostics == []


def test_report_totals(wf):
    g = (wf().agent(systemMessage="short").model("A").model("B")
         .connect("A", "Agent", "ai_languageModel").connect("B", "Agent", "ai_languageModel")
         .tool("toolWorkflow", "Sub").build())
    report = validate_graph(g)
    assert report.ai_checked
    assert not report.valid
    assert len(report.errors) == 1 and "workflowId" in report.errors[0]
    assert len(report.warnings) == 1 and "needsFallback" in report.warnings[0]
    assert [d.code for d in report.diagnostics] == [
        "FALLBACK_NOT_ENABLED", "SYSTEM_MESSAGE_TOO_SHORT", "NO_TOOLS_CONNECTED", "MISSING_WORKFLOW_ID",
    ]


def test_warnings_alone_keep_the_graph_valid(wf):
    g = wf().agent().model("GPT").connect("GPT", "Agent", "ai_languageModel").build()
    report = validate_graph(g)
    assert report.valid
    assert report.errors == []


def test_non_ai_graph_skips_the_semantic_pass(wf):
    report = validate_graph(wf().plain("A").build())
    assert report.valid
    assert not report.ai_checked


def test_load_graph_errors(tmp_path: Path, write_workflow):
    with pytest.raises(InvalidGraphError):
        load_graph(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(InvalidGraphError):
        load_graph(bad)
    with pytest.raises(InvalidGraphError):
        load_graph(write_workflow({"nodes": {}, "connections": {}}))


def test_batch_keeps_going_after_a_bad_file(tmp_path: Path, write_workflow, wf):
    good = write_workflow(wf().tool("toolWorkflow", "Sub", workflowId="1").as_dict(), "good.json")
    invalid = write_workflow(wf().tool("toolWorkflow", "Sub").as_dict(), "invalid.json")
    broken = write_workflow({"nodes": "nope", "connections": {}}, "broken.json")

    results = validate_files([good, broken, invalid], max_workers=3)
    assert [Path(r.path).name for r in results] == ["good.json", "broken.json", "invalid.json"]
    assert results[0].ok
    assert results[1].report is None and "nodes" in results[1].failure
    assert not results[2].ok
    assert [d.code for d in results[2].report.diagnostics] == ["MISSING_WORKFLOW_ID"]
