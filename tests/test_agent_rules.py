import pytest

from agentwire.agent_rules import is_streaming_target, validate_agent
from agentwire.diagnostics import Severity
from agentwire.reverse_index import build_reverse_index
from agentwire.settings import ValidationSettings

GOOD_SYSTEM = "You are a helpful support agent for ACME."


def _run(builder, name="Agent", settings=None):
    g = builder.build()
    args = (g.get_node(name), build_reverse_index(g), g)
    return validate_agent(*args, settings) if settings else validate_agent(*args)


def _codes(diagnostics):
    return [d.code for d in diagnostics]


def _well_wired(wf, **params):
    params.setdefault("systemMessage", GOOD_SYSTEM)
    return (wf().agent(**params).model("GPT").tool("toolCalculator", "Calc")
            .connect("GPT", "Agent", "ai_languageModel")
            .connect("Calc", "Agent", "ai_tool"))


def test_well_configured_agent_is_clean(wf):
    assert _run(_well_wired(wf)) == []


def test_missing_language_model_regardless_of_other_parameters(wf):
    b = wf().agent(needsFallback=True, hasOutputParser=True, maxIterations=10, systemMessage=GOOD_SYSTEM)
    out = _run(b)
    lm_errors = [d for d in out if d.code == "MISSING_LANGUAGE_MODEL"]
    assert len(lm_errors) == 1
    assert lm_errors[0].severity is Severity.ERROR
    assert lm_errors[0].node_name == "Agent"
    assert lm_errors[0].node_id == "id-1"


def test_three_language_models_is_too_many(wf):
    b = _well_wired(wf).model("M2").model("M3")
    b.connect("M2", "Agent", "ai_languageModel").connect("M3", "Agent", "ai_languageModel")
    assert _codes(_run(b)) == ["TOO_MANY_LANGUAGE_MODELS"]


def test_two_models_without_fallback_only_warns(wf):
    b = _well_wired(wf).model("Backup").connect("Backup", "Agent", "ai_languageModel")
    out = _run(b)
    assert [(d.severity, d.code) for d in out] == [(Severity.WARNING, "FALLBACK_NOT_ENABLED")]
    assert not any(d.severity is Severity.ERROR for d in out)


def test_two_models_with_fallback_is_clean(wf):
    b = _well_wired(wf, needsFallback=True).model("Backup").connect("Backup", "Agent", "ai_languageModel")
    assert _run(b) == []


def test_fallback_without_second_model(wf):
    assert _codes(_run(_well_wired(wf, needsFallback=True))) == ["FALLBACK_MISSING_SECOND_MODEL"]


def test_needs_fallback_must_be_literal_true(wf):
    assert _run(_well_wired(wf, needsFallback="true")) == []


def test_output_parser_required_when_enabled(wf):
    assert _codes(_run(_well_wired(wf, hasOutputParser=True))) == ["MISSING_OUTPUT_PARSER"]


def test_multiple_output_parsers(wf):
    b = _well_wired(wf, hasOutputParser=True)
    for p in ("P1", "P2"):
        b.node(p, "@n8n/n8n-nodes-langchain.outputParserStructured").connect(p, "Agent", "ai_outputParser")
    assert _codes(_run(b)) == ["MULTIPLE_OUTPUT_PARSERS"]


def test_multiple_output_parsers_without_has_output_parser(wf):
    b = _well_wired(wf)
    for p in ("P1", "P2"):
        b.node(p, "@n8n/n8n-nodes-langchain.outputParserStructured").connect(p, "Agent", "ai_outputParser")
    assert _codes(_run(b)) == ["MULTIPLE_OUTPUT_PARSERS"]


@pytest.mark.parametrize("text", [None, "", "   "])
def test_define_prompt_requires_text(wf, text):
    params = {"promptType": "define"}
    if text is not None:
        params["text"] = text
    assert _codes(_run(_well_wired(wf, **params))) == ["MISSING_PROMPT_TEXT"]


def test_define_prompt_with_text_is_clean(wf):
    assert _run(_well_wired(wf, promptType="define", text="={{ $json.chatInput }}")) == []


def test_system_message_missing_and_short(wf):
    b = _well_wired(wf)
    b.nodes[0]["parameters"].pop("systemMessage")
    out = _run(b)
    assert [(d.severity, d.code) for d in out] == [(Severity.INFO, "MISSING_SYSTEM_MESSAGE")]

    assert _codes(_run(_well_wired(wf, systemMessage="  Be nice.   "))) == ["SYSTEM_MESSAGE_TOO_SHORT"]


def test_system_message_read_from_options(wf):
    b = _well_wired(wf, options={"systemMessage": GOOD_SYSTEM})
    b.nodes[0]["parameters"].pop("systemMessage")
    assert _run(b) == []


def test_multiple_memories(wf):
    b = _well_wired(wf)
    for m in ("Mem1", "Mem2"):
        b.node(m, "@n8n/n8n-nodes-langchain.memoryBufferWindow").connect(m, "Agent", "ai_memory")
    assert _codes(_run(b)) == ["MULTIPLE_MEMORY_CONNECTIONS"]


def test_no_tools_is_informational(wf):
    b = wf().agent(systemMessage=GOOD_SYSTEM).model("GPT").connect("GPT", "Agent", "ai_languageModel")
    out = _run(b)
    assert [(d.severity, d.code) for d in out] == [(Severity.INFO, "NO_TOOLS_CONNECTED")]


@pytest.mark.parametrize("value, expected", [
    ("10", ["INVALID_MAX_ITERATIONS_TYPE"]),
    (True, ["INVALID_MAX_ITERATIONS_TYPE"]),
    (0, ["MAX_ITERATIONS_TOO_LOW"]),
    (-3, ["MAX_ITERATIONS_TOO_LOW"]),
    (1, []),
    (50, []),
    (51, ["MAX_ITERATIONS_HIGH"]),
])
def test_max_iterations(wf, value, expected):
    assert _codes(_run(_well_wired(wf, maxIterations=value))) == expected


def test_max_iterations_threshold_comes_from_settings(wf):
    settings = ValidationSettings(max_iterations_warning=10)
    assert _codes(_run(_well_wired(wf, maxIterations=11), settings=settings)) == ["MAX_ITERATIONS_HIGH"]


def test_all_applicable_checks_fire_in_order(wf):
    b = wf().agent(hasOutputParser=True, promptType="define", maxIterations=0)
    assert _codes(_run(b)) == [
        "MISSING_LANGUAGE_MODEL",
        "MISSING_OUTPUT_PARSER",
        "MISSING_PROMPT_TEXT",
        "MISSING_SYSTEM_MESSAGE",
        "NO_TOOLS_CONNECTED",
        "MAX_ITERATIONS_TOO_LOW",
    ]


def test_streaming_agent_with_main_output(wf):
    b = (_well_wired(wf).chat_trigger("Chat", responseMode="streaming").plain("Sheet", "googleSheets")
         .connect("Chat", "Agent").connect("Agent", "Sheet"))
    assert _codes(_run(b)) == ["STREAMING_WITH_MAIN_OUTPUT"]


def test_streaming_agent_without_output_is_clean(wf):
    b = _well_wired(wf).chat_trigger("Chat", options={"responseMode": "streaming"}).connect("Chat", "Agent")
    g = b.build()
    assert is_streaming_target(g.get_node("Agent"), build_reverse_index(g), g)
    assert _run(b) == []


def test_non_streaming_trigger_allows_main_output(wf):
    b = (_well_wired(wf).chat_trigger("Chat", responseMode="lastNode").plain("Sheet")
         .connect("Chat", "Agent").connect("Agent", "Sheet"))
    assert _run(b) == []


def test_streaming_is_single_hop(wf):
    b = (_well_wired(wf).chat_trigger("Chat", responseMode="streaming").plain("Pass").plain("Sheet")
         .connect("Chat", "Pass").connect("Pass", "Agent").connect("Agent", "Sheet"))
    assert _run(b) == []


def test_disabled_streaming_trigger_does_not_count(wf):
    b = (_well_wired(wf).chat_trigger("Chat", responseMode="streaming").plain("Sheet", "googleSheets")
         .connect("Chat", "Agent").connect("Agent", "Sheet"))
    b.nodes[-2]["disabled"] = True
    g = b.build()
    assert not is_streaming_target(g.get_node("Agent"), build_reverse_index(g), g)
    assert _run(b) == []
