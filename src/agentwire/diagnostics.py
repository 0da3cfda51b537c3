from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Optional

from .ir import Node


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Code:
    """Diagnostic codes emitted by the rule sets."""
    # language models
    MISSING_LANGUAGE_MODEL = "MISSING_LANGUAGE_MODEL"
    TOO_MANY_LANGUAGE_MODELS = "TOO_MANY_LANGUAGE_MODELS"
    MULTIPLE_LANGUAGE_MODELS = "MULTIPLE_LANGUAGE_MODELS"
    FALLBACK_NOT_ENABLED = "FALLBACK_NOT_ENABLED"
    FALLBACK_MISSING_SECOND_MODEL = "FALLBACK_MISSING_SECOND_MODEL"
    # agent configuration
    MISSING_OUTPUT_PARSER = "MISSING_OUTPUT_PARSER"
    MULTIPLE_OUTPUT_PARSERS = "MULTIPLE_OUTPUT_PARSERS"
    MISSING_PROMPT_TEXT = "MISSING_PROMPT_TEXT"
    MISSING_SYSTEM_MESSAGE = "MISSING_SYSTEM_MESSAGE"
    SYSTEM_MESSAGE_TOO_SHORT = "SYSTEM_MESSAGE_TOO_SHORT"
    MULTIPLE_MEMORY_CONNECTIONS = "MULTIPLE_MEMORY_CONNECTIONS"
    NO_TOOLS_CONNECTED = "NO_TOOLS_CONNECTED"
    INVALID_MAX_ITERATIONS_TYPE = "INVALID_MAX_ITERATIONS_TYPE"
    MAX_ITERATIONS_TOO_LOW = "MAX_ITERATIONS_TOO_LOW"
    MAX_ITERATIONS_HIGH = "MAX_ITERATIONS_HIGH"
    # streaming
    STREAMING_WITH_MAIN_OUTPUT = "STREAMING_WITH_MAIN_OUTPUT"
    MISSING_CONNECTIONS = "MISSING_CONNECTIONS"
    STREAMING_WRONG_TARGET = "STREAMING_WRONG_TARGET"
    STREAMING_AGENT_HAS_OUTPUT = "STREAMING_AGENT_HAS_OUTPUT"
    STREAMING_RECOMMENDED = "STREAMING_RECOMMENDED"
    # tools
    MISSING_TOOL_DESCRIPTION = "MISSING_TOOL_DESCRIPTION"
    TOOL_DESCRIPTION_TOO_SHORT = "TOOL_DESCRIPTION_TOO_SHORT"
    MISSING_URL = "MISSING_URL"
    INVALID_URL_PROTOCOL = "INVALID_URL_PROTOCOL"
    INVALID_URL_FORMAT = "INVALID_URL_FORMAT"
    MISSING_PLACEHOLDER_DEFINITIONS = "MISSING_PLACEHOLDER_DEFINITIONS"
    UNDEFINED_PLACEHOLDER = "UNDEFINED_PLACEHOLDER"
    UNUSED_PLACEHOLDER = "UNUSED_PLACEHOLDER"
    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    INVALID_HTTP_METHOD = "INVALID_HTTP_METHOD"
    MISSING_REQUEST_BODY = "MISSING_REQUEST_BODY"
    MISSING_CODE = "MISSING_CODE"
    MISSING_INPUT_SCHEMA = "MISSING_INPUT_SCHEMA"
    INVALID_INPUT_SCHEMA = "INVALID_INPUT_SCHEMA"
    NO_INPUT_SCHEMA = "NO_INPUT_SCHEMA"
    INVALID_TOPK = "INVALID_TOPK"
    TOPK_HIGH = "TOPK_HIGH"
    MISSING_WORKFLOW_ID = "MISSING_WORKFLOW_ID"
    MISSING_SERVER_URL = "MISSING_SERVER_URL"
    INVALID_LANGUAGE_CODE = "INVALID_LANGUAGE_CODE"
    MISSING_BASE_URL = "MISSING_BASE_URL"


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    code: str
    message: str
    node_id: Optional[str] = None
    node_name: Optional[str] = None


def _make(severity: Severity, node: Node, code: str, message: str) -> Diagnostic:
    return Diagnostic(severity=severity, code=code, message=message, node_id=node.id, node_name=node.name)


def error(node: Node, code: str, message: str) -> Diagnostic:
    return _make(Severity.ERROR, node, code, message)


def warning(node: Node, code: str, message: str) -> Diagnostic:
    return _make(Severity.WARNING, node, code, message)


def info(node: Node, code: str, message: str) -> Diagnostic:
    return _make(Severity.INFO, node, code, message)
