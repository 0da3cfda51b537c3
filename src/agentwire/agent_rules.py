"""Rule set for AI Agent nodes.

Every check is independent and all applicable ones are reported, in this
order: language models, fallback, output parser, prompt, system message,
streaming, memory, tools, max iterations.
"""
from __future__ import annotations
from typing import List

from .classifier import Category, classify
from .diagnostics import Code, Diagnostic, error, info, warning
from .ir import Graph, Node, PortKind
from .params import MISSING, get_option, get_param, is_blank, is_number, is_true, text_of
from .reverse_index import ReverseIndex, count_inbound, inbound
from .settings import DEFAULT_SETTINGS, ValidationSettings
from .trigger_rules import STREAMING, response_mode


def validate_agent(node: Node, index: ReverseIndex, graph: Graph,
                   settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    out: List[Diagnostic] = []
    params = node.parameters
    name = node.name
    limit = settings.max_language_models

    models = count_inbound(index, name, PortKind.LANGUAGE_MODEL.value)
    needs_fallback = is_true(get_param(params, "needsFallback"))
    if models == 0:
        out.append(error(node, Code.MISSING_LANGUAGE_MODEL,
                         f'AI Agent "{name}" requires an ai_languageModel connection. '
                         "Connect a chat model node (e.g. OpenAI Chat Model)."))
    elif models > limit:
        out.append(error(node, Code.TOO_MANY_LANGUAGE_MODELS,
                         f'AI Agent "{name}" has {models} ai_languageModel connections. '
                         f"Maximum is {limit} (primary plus fallback)."))
    if models == 2 <= limit and not needs_fallback:
        out.append(warning(node, Code.FALLBACK_NOT_ENABLED,
                           f'AI Agent "{name}" has 2 language models but needsFallback is not enabled. '
                           "Set needsFallback=true or remove the second model."))
    if models == 1 and needs_fallback:
        out.append(error(node, Code.FALLBACK_MISSING_SECOND_MODEL,
                         f'AI Agent "{name}" has needsFallback=true but only 1 language model. '
                         "Connect a second model for fallback or disable needsFallback."))

    parsers = count_inbound(index, name, PortKind.OUTPUT_PARSER.value)
    if is_true(get_param(params, "hasOutputParser")) and parsers == 0:
        out.append(error(node, Code.MISSING_OUTPUT_PARSER,
                         f'AI Agent "{name}" has hasOutputParser=true but no ai_outputParser connection.'))
    if parsers > 1:
        out.append(error(node, Code.MULTIPLE_OUTPUT_PARSERS,
                         f'AI Agent "{name}" has {parsers} output parsers. Only 1 is allowed.'))

    out.extend(check_prompt_text(node, "AI Agent"))

    system_message = get_option(params, "systemMessage")
    if system_message is MISSING:
        out.append(info(node, Code.MISSING_SYSTEM_MESSAGE,
                        f'AI Agent "{name}" has no systemMessage. '
                        "Add one to define the agent's role and constraints."))
    elif len(text_of(system_message)) < settings.min_system_message_length:
        out.append(info(node, Code.SYSTEM_MESSAGE_TOO_SHORT,
                        f'AI Agent "{name}" systemMessage is very short '
                        f"(minimum {settings.min_system_message_length} characters recommended)."))

    if is_streaming_target(node, index, graph) and graph.outbound(name):
        out.append(error(node, Code.STREAMING_WITH_MAIN_OUTPUT,
                         f'AI Agent "{name}" receives a streaming Chat Trigger but has outgoing main connections. '
                         "Streaming responses end at the agent; remove the outgoing connections."))

    memories = count_inbound(index, name, PortKind.MEMORY.value)
    if memories > 1:
        out.append(error(node, Code.MULTIPLE_MEMORY_CONNECTIONS,
                         f'AI Agent "{name}" has {memories} ai_memory connections. Only 1 is allowed.'))

    if count_inbound(index, name, PortKind.TOOL.value) == 0:
        out.append(info(node, Code.NO_TOOLS_CONNECTED,
                        f'AI Agent "{name}" has no ai_tool connections. '
                        "Connect tools if the agent should act beyond text generation."))

    out.extend(check_max_iterations(node, "AI Agent", settings))
    return out


def check_prompt_text(node: Node, label: str) -> List[Diagnostic]:
    params = node.parameters
    if get_param(params, "promptType") == "define" and is_blank(get_param(params, "text")):
        return [error(node, Code.MISSING_PROMPT_TEXT,
                      f'{label} "{node.name}" has promptType="define" but the text field is empty.')]
    return []


def check_max_iterations(node: Node, label: str,
                         settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    value = get_param(node.parameters, "maxIterations")
    if value is MISSING:
        return []
    if not is_number(value):
        return [error(node, Code.INVALID_MAX_ITERATIONS_TYPE,
                      f'{label} "{node.name}" has a non-numeric maxIterations ({value!r}).')]
    if value < 1:
        return [error(node, Code.MAX_ITERATIONS_TOO_LOW,
                      f'{label} "{node.name}" has maxIterations={value}. Must be at least 1.')]
    if value > settings.max_iterations_warning:
        return [warning(node, Code.MAX_ITERATIONS_HIGH,
                        f'{label} "{node.name}" has maxIterations={value}. '
                        f"Values above {settings.max_iterations_warning} usually indicate a misconfiguration.")]
    return []


def is_streaming_target(node: Node, index: ReverseIndex, graph: Graph) -> bool:
    """True when a streaming Chat Trigger feeds this node directly on `main`."""
    for edge in inbound(index, node.name, PortKind.MAIN.value):
        source = graph.get_node(edge.source_name)
        if source is None or source.disabled:
            continue
        if classify(source.type).category is Category.CHAT_TRIGGER and response_mode(source) == STREAMING:
            return True
    return False
