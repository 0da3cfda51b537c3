"""Defensive access to a node's untyped parameter bag.

`0`, `False` and `""` are real values in workflow parameters, so absence is
reported with the `MISSING` sentinel instead of relying on falsiness.
"""
from __future__ import annotations
from typing import Any, Mapping


class _Missing:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def get_param(params: Mapping[str, Any], key: str) -> Any:
    """Value of `key`, or `MISSING` when absent or explicitly null."""
    if not isinstance(params, Mapping):
        return MISSING
    value = params.get(key, MISSING)
    return MISSING if value is None else value


def get_option(params: Mapping[str, Any], key: str) -> Any:
    """Top-level `key`, falling back to `options.<key>` where newer node versions keep it."""
    value = get_param(params, key)
    if value is MISSING:
        value = get_param(get_param(params, "options"), key)
    return value


def is_true(value: Any) -> bool:
    return value is True


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resource_value(value: Any) -> Any:
    # resource locator: {"__rl": true, "mode": "list", "value": "abc"}
    if isinstance(value, Mapping) and "value" in value:
        inner = value.get("value")
        return MISSING if inner is None else inner
    return value


def is_blank(value: Any) -> bool:
    """True for missing values, empty/whitespace strings and empty containers."""
    value = resource_value(value)
    if value is MISSING:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple)):
        return len(value) == 0
    return False


def text_of(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""
