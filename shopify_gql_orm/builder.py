"""Instantiate models from mapped attribute dicts."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

CONNECTION_CACHE_KEY = "_connection_cache"


def populate_inverse(definition, child, parent) -> None:
    """Point ``child``'s inverse connection back at ``parent``.

    Plural inverses hold a one-element list, singular ones the parent itself.
    """
    if not definition.inverse_of or child is None:
        return
    inverse = child.connection_definitions.get(definition.inverse_of)
    value = [parent] if inverse is not None and not inverse.singular else parent
    child.cache_connection(definition.inverse_of, value)


class ModelBuilder:
    """Build model instances from mapper output."""

    @staticmethod
    def build(
        model_class,
        attributes: Optional[Mapping[str, Any]],
        connection_cache: Optional[Dict[str, Any]] = None,
    ):
        if attributes is None:
            return None
        attributes = dict(attributes)
        cache = attributes.pop(CONNECTION_CACHE_KEY, None) or {}
        if connection_cache:
            cache.update(connection_cache)
        return model_class(_connection_cache=cache, **attributes)

    @classmethod
    def build_many(cls, model_class, rows: Iterable[Optional[Mapping[str, Any]]]) -> List:
        return [cls.build(model_class, row) for row in rows if row is not None]
