"""Shared context for query building, response mapping and connection loading."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

import inflection

from shopify_gql_orm.attributes import AttributeDefinition, ConnectionDefinition


def normalize_includes(includes) -> Dict[str, List[Any]]:
    """Normalize an includes argument to ``{connection_name: [nested includes]}``.

    Accepts a name, a list of names, dicts such as ``{"orders": "line_items"}``
    or ``{"orders": ["line_items", {"customer": "addresses"}]}`` and any mix
    of those.
    """
    if includes is None:
        return {}
    if isinstance(includes, (str, dict)):
        includes = [includes]
    normalized: Dict[str, List[Any]] = {}
    for include in includes:
        if isinstance(include, dict):
            for key, value in include.items():
                nested = normalized.setdefault(str(key), [])
                if isinstance(value, (list, tuple)):
                    nested.extend(value)
                elif value is not None:
                    nested.append(value)
        elif isinstance(include, (list, tuple)):
            for key, value in normalize_includes(include).items():
                normalized.setdefault(key, []).extend(value)
        elif include is not None:
            normalized.setdefault(str(include), [])
    return normalized


class LoaderContext:
    """Immutable bundle of what a single query/response cycle needs.

    Args:
        gql_type: The GraphQL type name, e.g. "Customer".
        loader_class: The loader class; used to resolve per-loader overrides.
        attributes: Resolved attribute definitions keyed by attribute name.
        model_class: The model class instances are built from.
        included_connections: Connection names (optionally nested) to eager load.
    """

    __slots__ = (
        "_gql_type",
        "_loader_class",
        "_attributes",
        "_model_class",
        "_included_connections",
    )

    def __init__(
        self,
        gql_type: str,
        loader_class,
        attributes: Mapping[str, AttributeDefinition],
        model_class=None,
        included_connections: Iterable[Any] = (),
    ) -> None:
        self._gql_type = gql_type
        self._loader_class = loader_class
        self._attributes = MappingProxyType(dict(attributes))
        self._model_class = model_class
        if included_connections is None:
            included_connections = ()
        elif isinstance(included_connections, (str, dict)):
            included_connections = (included_connections,)
        self._included_connections = tuple(included_connections)

    @property
    def gql_type(self) -> str:
        return self._gql_type

    @property
    def loader_class(self):
        return self._loader_class

    @property
    def attributes(self) -> Mapping[str, AttributeDefinition]:
        return self._attributes

    @property
    def model_class(self):
        return self._model_class

    @property
    def included_connections(self) -> tuple:
        return self._included_connections

    @property
    def query_name(self) -> str:
        return inflection.camelize(self._gql_type, False)

    @property
    def fragment_name(self) -> str:
        return f"{self._gql_type}Fragment"

    @property
    def connections(self) -> Mapping[str, ConnectionDefinition]:
        if self._model_class is None:
            return {}
        return getattr(self._model_class, "connection_definitions", None) or {}

    @property
    def normalized_includes(self) -> Dict[str, List[Any]]:
        return normalize_includes(self._included_connections)

    def for_model(
        self,
        model_class,
        included_connections=(),
        gql_type: Optional[str] = None,
        attributes: Optional[Mapping[str, AttributeDefinition]] = None,
    ) -> "LoaderContext":
        """Derive a context scoped to a connection target."""
        if gql_type is None:
            gql_type = model_class.gql_type_for_loader(self._loader_class)
        if attributes is None:
            attributes = model_class.attributes_for_loader(self._loader_class)
        return LoaderContext(
            gql_type,
            self._loader_class,
            attributes,
            model_class,
            included_connections,
        )

    def __repr__(self) -> str:
        return (
            f"LoaderContext(gql_type={self._gql_type!r}, "
            f"attributes={list(self._attributes)}, "
            f"included_connections={list(self._included_connections)})"
        )
