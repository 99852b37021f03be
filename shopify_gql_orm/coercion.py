"""Type coercion of raw GraphQL scalars to declared attribute types."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from shopify_gql_orm.exceptions import TypeCoercionError

ATTRIBUTE_TYPES = ("string", "integer", "float", "boolean", "datetime", "json")

TRUE_VALUES = {True, 1, "true", "1"}
FALSE_VALUES = {False, 0, "false", "0"}


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_integer(value: Any) -> Optional[int]:
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(Decimal(text))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"invalid value {value!r}") from exc


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, (bool, int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    return float(text)


def _to_boolean(value: Any) -> bool:
    key = value.strip().lower() if isinstance(value, str) else value
    if key in TRUE_VALUES:
        return True
    if key in FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean {value!r}")


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


TYPE_CASTERS: Dict[str, Callable[[Any], Any]] = {
    "string": _to_string,
    "integer": _to_integer,
    "float": _to_float,
    "boolean": _to_boolean,
    "datetime": _to_datetime,
}


def coerce(value: Any, declared_type: Optional[str], attribute=None, path=None) -> Any:
    """Cast value to declared_type.

    None and lists are returned untouched. ``json`` and unknown types are
    the identity. Cast failures raise TypeCoercionError naming the attribute
    and its GraphQL path.
    """
    if value is None or isinstance(value, list):
        return value
    caster = TYPE_CASTERS.get(declared_type)
    if caster is None:
        return value
    try:
        return caster(value)
    except (TypeError, ValueError) as exc:
        raise TypeCoercionError(attribute, path, declared_type, str(exc)) from exc
