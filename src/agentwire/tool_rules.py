"""Validators for AI tool sub-nodes.

Tool sub-nodes are wired into an agent on ``ai_tool``. Each known subtype
has a validator with the same signature as the other rule sets; subtypes
without an entry in `TOOL_VALIDATORS` are accepted as-is.
"""
from __future__ import annotations
import json
import re
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Set
from urllib.parse import urlparse

from .agent_rules import check_max_iterations
from .classifier import normalize
from .diagnostics import Code, Diagnostic, error, warning
from .ir import Graph, Node
from .params import MISSING, get_param, is_blank, is_number, is_true, text_of
from .reverse_index import ReverseIndex
from .settings import DEFAULT_SETTINGS, ValidationSettings

ToolValidator = Callable[[Node, ReverseIndex, Graph, ValidationSettings], List[Diagnostic]]

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
_BODY_METHODS = {"POST", "PUT", "PATCH"}

# `{name}` placeholders; `{{ ... }}` expressions are stripped before matching
_EXPRESSION_RE = re.compile(r"\{\{.*?\}\}", re.S)
_PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][\w.-]*)\}")
_LANGUAGE_RE = re.compile(r"^(?:[a-z]{2,3}(?:-[a-z0-9]{2,8})*|simple)$")


def check_tool_description(node: Node, label: str,
                           settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    """Only manual descriptions are checked; automatic ones are generated by the platform."""
    params = node.parameters
    if get_param(params, "descriptionType") != "manual":
        return []
    description = get_param(params, "toolDescription")
    if is_blank(description):
        return [error(node, Code.MISSING_TOOL_DESCRIPTION,
                      f'{label} "{node.name}" has no toolDescription. '
                      "Describe when the model should use this tool.")]
    if len(text_of(description)) < settings.min_tool_description_length:
        return [warning(node, Code.TOOL_DESCRIPTION_TOO_SHORT,
                        f'{label} "{node.name}" toolDescription is too short '
                        f"(minimum {settings.min_tool_description_length} characters).")]
    return []


def _has_credential(node: Node, *keys: str) -> bool:
    return any(not is_blank(get_param(node.credentials, k)) for k in keys)


def _placeholders(*texts) -> Set[str]:
    found: Set[str] = set()
    for text in texts:
        if isinstance(text, str):
            found.update(m.strip() for m in _PLACEHOLDER_RE.findall(_EXPRESSION_RE.sub("", text)))
    return found


def _defined_placeholders(definitions) -> Optional[List[str]]:
    if definitions is MISSING:
        return None
    values = definitions.get("values") if isinstance(definitions, Mapping) else None
    if not isinstance(values, list):
        return []
    return [v["name"] for v in values if isinstance(v, Mapping) and isinstance(v.get("name"), str)]


def validate_http_request_tool(node: Node, index: ReverseIndex, graph: Graph,
                               settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "HTTP Request Tool"
    params = node.parameters
    out = check_tool_description(node, label, settings)

    url = get_param(params, "url")
    if is_blank(url):
        out.append(error(node, Code.MISSING_URL, f'{label} "{node.name}" has no URL. Add the API endpoint URL.'))
    elif isinstance(url, str) and "{{" not in url:
        parsed = urlparse(url.strip())
        if parsed.scheme and parsed.scheme not in ("http", "https"):
            out.append(error(node, Code.INVALID_URL_PROTOCOL,
                             f'{label} "{node.name}" uses unsupported URL protocol "{parsed.scheme}:". '
                             "Use http:// or https://."))
        elif not parsed.scheme or not parsed.netloc:
            out.append(warning(node, Code.INVALID_URL_FORMAT,
                               f'{label} "{node.name}" has a URL that does not look valid: "{url}".'))

    headers = get_param(params, "headers")
    headers_text = json.dumps(headers, default=str) if headers is not MISSING else None
    used = _placeholders(url, get_param(params, "body"), headers_text)
    if used:
        defined = _defined_placeholders(get_param(params, "placeholderDefinitions"))
        if defined is None:
            out.append(warning(node, Code.MISSING_PLACEHOLDER_DEFINITIONS,
                               f'{label} "{node.name}" uses placeholders but has no placeholderDefinitions.'))
        else:
            for name in sorted(used - set(defined)):
                out.append(error(node, Code.UNDEFINED_PLACEHOLDER,
                                 f'{label} "{node.name}" uses placeholder "{name}" '
                                 "that is not defined in placeholderDefinitions."))
            for name in dict.fromkeys(defined):
                if name not in used:
                    out.append(warning(node, Code.UNUSED_PLACEHOLDER,
                                       f'{label} "{node.name}" defines placeholder "{name}" but never uses it.'))

    if get_param(params, "authentication") == "predefinedCredentialType" and not node.credentials:
        out.append(error(node, Code.MISSING_CREDENTIALS,
                         f'{label} "{node.name}" requires credentials but none are configured.'))

    method = get_param(params, "method")
    method = method.upper() if isinstance(method, str) else ""
    if method and method not in HTTP_METHODS:
        out.append(error(node, Code.INVALID_HTTP_METHOD,
                         f'{label} "{node.name}" has invalid HTTP method "{method}". '
                         f"Use one of: {', '.join(HTTP_METHODS)}."))
    if method in _BODY_METHODS and is_blank(get_param(params, "body")) and is_blank(get_param(params, "jsonBody")):
        out.append(warning(node, Code.MISSING_REQUEST_BODY,
                           f'{label} "{node.name}" uses {method} but has no body.'))
    return out


def validate_code_tool(node: Node, index: ReverseIndex, graph: Graph,
                       settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "Code Tool"
    params = node.parameters
    out = check_tool_description(node, label, settings)
    if is_blank(get_param(params, "jsCode")):
        out.append(error(node, Code.MISSING_CODE,
                         f'{label} "{node.name}" code is empty. Add the JavaScript code to run.'))

    schema = get_param(params, "inputSchema")
    specified = is_true(get_param(params, "specifyInputSchema"))
    if specified and is_blank(schema):
        out.append(error(node, Code.MISSING_INPUT_SCHEMA,
                         f'{label} "{node.name}" has specifyInputSchema=true but no inputSchema.'))
    elif isinstance(schema, str) and schema.strip() and not _is_json_object(schema):
        out.append(error(node, Code.INVALID_INPUT_SCHEMA,
                         f'{label} "{node.name}" inputSchema is not a JSON object.'))
    elif not specified and is_blank(schema):
        out.append(warning(node, Code.NO_INPUT_SCHEMA,
                           f'{label} "{node.name}" has no input schema. '
                           "Consider adding one to validate the model's inputs."))
    return out


def _is_json_object(text: str) -> bool:
    try:
        return isinstance(json.loads(text), dict)
    except ValueError:
        return False


def validate_vector_store_tool(node: Node, index: ReverseIndex, graph: Graph,
                               settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "Vector Store Tool"
    out = check_tool_description(node, label, settings)
    top_k = get_param(node.parameters, "topK")
    if top_k is MISSING:
        return out
    if not is_number(top_k) or top_k < 1:
        out.append(error(node, Code.INVALID_TOPK,
                         f'{label} "{node.name}" has invalid topK ({top_k!r}). Must be a positive number.'))
    elif top_k > settings.max_topk_warning:
        out.append(warning(node, Code.TOPK_HIGH,
                           f'{label} "{node.name}" has topK={top_k}. Values above '
                           f"{settings.max_topk_warning} may overwhelm the model's context."))
    return out


def validate_workflow_tool(node: Node, index: ReverseIndex, graph: Graph,
                           settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "Workflow Tool"
    out = check_tool_description(node, label, settings)
    if is_blank(get_param(node.parameters, "workflowId")):
        out.append(error(node, Code.MISSING_WORKFLOW_ID,
                         f'{label} "{node.name}" has no workflowId. Select a workflow to execute.'))
    return out


def validate_agent_tool(node: Node, index: ReverseIndex, graph: Graph,
                        settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "AI Agent Tool"
    out = check_tool_description(node, label, settings)
    out.extend(check_max_iterations(node, label, settings))
    return out


def validate_mcp_client_tool(node: Node, index: ReverseIndex, graph: Graph,
                             settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "MCP Client Tool"
    params = node.parameters
    out = check_tool_description(node, label, settings)
    if is_blank(get_param(params, "serverUrl")) and is_blank(get_param(params, "sseEndpoint")):
        out.append(error(node, Code.MISSING_SERVER_URL,
                         f'{label} "{node.name}" has no serverUrl. Configure the MCP server URL.'))
    return out


def validate_self_contained_tool(node: Node, index: ReverseIndex, graph: Graph,
                                 settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    # Calculator and Think ship their own description and need no configuration
    return []


def validate_serpapi_tool(node: Node, index: ReverseIndex, graph: Graph,
                          settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "SerpApi Tool"
    out = check_tool_description(node, label, settings)
    if not _has_credential(node, "serpApi", "serpApiApi"):
        out.append(error(node, Code.MISSING_CREDENTIALS,
                         f'{label} "{node.name}" requires SerpApi credentials. Configure your API key.'))
    return out


def validate_wolfram_alpha_tool(node: Node, index: ReverseIndex, graph: Graph,
                                settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "WolframAlpha Tool"
    out = check_tool_description(node, label, settings)
    if not _has_credential(node, "wolframAlpha", "wolframAlphaApi"):
        out.append(error(node, Code.MISSING_CREDENTIALS,
                         f'{label} "{node.name}" requires Wolfram|Alpha API credentials. Configure your App ID.'))
    return out


def validate_wikipedia_tool(node: Node, index: ReverseIndex, graph: Graph,
                            settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "Wikipedia Tool"
    out = check_tool_description(node, label, settings)
    language = get_param(node.parameters, "language")
    if not is_blank(language) and not (isinstance(language, str) and _LANGUAGE_RE.match(language)):
        out.append(error(node, Code.INVALID_LANGUAGE_CODE,
                         f'{label} "{node.name}" has unrecognized language code {language!r}. '
                         'Use a Wikipedia language code such as "en", "es" or "zh-yue".'))
    return out


def validate_searxng_tool(node: Node, index: ReverseIndex, graph: Graph,
                          settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    label = "SearXNG Tool"
    out = check_tool_description(node, label, settings)
    if is_blank(get_param(node.parameters, "baseUrl")):
        out.append(error(node, Code.MISSING_BASE_URL,
                         f'{label} "{node.name}" has no baseUrl. Configure your SearXNG instance URL.'))
    return out


TOOL_VALIDATORS: Mapping[str, ToolValidator] = MappingProxyType({
    "nodes-langchain.toolHttpRequest": validate_http_request_tool,
    "nodes-langchain.toolCode": validate_code_tool,
    "nodes-langchain.toolVectorStore": validate_vector_store_tool,
    "nodes-langchain.toolWorkflow": validate_workflow_tool,
    "nodes-langchain.agentTool": validate_agent_tool,
    "nodes-langchain.mcpClientTool": validate_mcp_client_tool,
    "nodes-langchain.toolCalculator": validate_self_contained_tool,
    "nodes-langchain.toolThink": validate_self_contained_tool,
    "nodes-langchain.toolSerpApi": validate_serpapi_tool,
    "nodes-langchain.toolWikipedia": validate_wikipedia_tool,
    "nodes-langchain.toolSearXng": validate_searxng_tool,
    "nodes-langchain.toolWolframAlpha": validate_wolfram_alpha_tool,
})


def validate_tool_subnode(node: Node, index: ReverseIndex, graph: Graph,
                          settings: ValidationSettings = DEFAULT_SETTINGS) -> List[Diagnostic]:
    validator = TOOL_VALIDATORS.get(normalize(node.type))
    if validator is None:
        return []
    return validator(node, index, graph, settings)
