"""Shopify search syntax for collection queries."""

from __future__ import annotations

from numbers import Number
from typing import Any, Mapping

RANGE_OPERATORS = {
    "gt": ">",
    ">": ">",
    "gte": ">=",
    ">=": ">=",
    "lt": "<",
    "<": "<",
    "lte": "<=",
    "<=": "<=",
}


def sanitize(value: str) -> str:
    """Escape a value for use inside a single-quoted search term.

    Example:
        sanitize("O'Reilly") -> "O\\\\'Reilly"
    """
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("'", "\\\\'")


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_value(key: str, value: Any) -> str:
    if isinstance(value, str):
        return f"{key}:'{sanitize(value)}'"
    return f"{key}:{_scalar(value)}"


def _format_range(key: str, ranges: Mapping[Any, Any]) -> str:
    parts = []
    for operator, value in ranges.items():
        symbol = RANGE_OPERATORS.get(str(operator))
        if symbol is None:
            raise ValueError(f"Unsupported range operator: {operator}")
        parts.append(f"{key}:{symbol}{_scalar(value)}")
    return " ".join(parts)


def format_condition(key: str, value: Any) -> str:
    if isinstance(value, (list, tuple)):
        if not value:
            return ""
        if len(value) == 1:
            return format_condition(key, value[0])
        return f"({' OR '.join(_format_value(key, item) for item in value)})"
    if isinstance(value, dict):
        return _format_range(key, value)
    if isinstance(value, (str, bool, Number)):
        return _format_value(key, value)
    return f"{key}:{value}"


def format_conditions(conditions: Mapping[Any, Any]) -> str:
    """Format ``{key: value}`` conditions, joining them with `` AND ``.

    Conditions that format to nothing, such as empty lists, are left out.
    """
    parts = [format_condition(str(key), value) for key, value in conditions.items()]
    return " AND ".join(part for part in parts if part)


def _bind_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, (bool, Number)):
        return _scalar(value)
    return f"'{sanitize(str(value))}'"


def bind_parameters(query: str, *args: Any) -> str:
    """Substitute ``?`` placeholders in order, or ``:name`` ones from a dict."""
    if not args:
        return query
    if isinstance(args[0], dict):
        for key, value in args[0].items():
            query = query.replace(f":{key}", _bind_value(value))
        return query
    for value in args:
        query = query.replace("?", _bind_value(value), 1)
    return query


class SearchQuery:
    """A search string built from conditions.

    ``conditions`` is a dict (escaped per value), a raw string used as-is
    unless binding arguments follow, or a ``[query, *args]`` list.
    """

    def __init__(self, conditions: Any = None, *args: Any) -> None:
        self.conditions = {} if conditions is None else conditions
        self.args = args

    def __str__(self) -> str:
        if isinstance(self.conditions, dict):
            return format_conditions(self.conditions)
        if isinstance(self.conditions, str):
            return bind_parameters(self.conditions, *self.args)
        if isinstance(self.conditions, (list, tuple)) and self.conditions:
            return bind_parameters(self.conditions[0], *self.conditions[1:])
        return ""

    def __bool__(self) -> bool:
        return bool(str(self))

    def __repr__(self) -> str:
        return f"SearchQuery({str(self)!r})"
