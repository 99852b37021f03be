"""Attribute and connection metadata declared by models."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

import inflection

from shopify_gql_orm.coercion import ATTRIBUTE_TYPES

SINGULAR = "singular"
PLURAL = "plural"


def infer_path(name: str) -> str:
    """Infer a GraphQL field name from a Python attribute name."""
    return inflection.camelize(name, False)


@dataclass(frozen=True)
class AttributeDefinition:
    """How a model attribute is selected from and read back out of GraphQL.

    Exactly one of a plain ``path``, the metafield triple or ``raw_graphql``
    drives query generation; metafield attributes still carry a derived path
    (``<alias>.value``) for diagnostics.
    """

    name: str
    path: str
    type: str = "string"
    nullable: bool = True
    default: Any = None
    transform: Optional[Callable[[Any], Any]] = None
    is_metafield: bool = False
    metafield_alias: Optional[str] = None
    metafield_namespace: Optional[str] = None
    metafield_key: Optional[str] = None
    raw_graphql: Optional[str] = None
    metaobject_key: Optional[str] = None

    def __post_init__(self):
        if self.type not in ATTRIBUTE_TYPES:
            raise ValueError(f"Unknown attribute type '{self.type}' for {self.name}")
        if self.is_metafield and not (self.metafield_namespace and self.metafield_key):
            raise ValueError(f"Metafield attribute {self.name} needs namespace and key")
        if self.is_metafield and self.raw_graphql:
            raise ValueError(f"Attribute {self.name} cannot be both metafield and raw")
        if self.metaobject_key and (self.is_metafield or self.raw_graphql):
            raise ValueError(f"Metaobject field {self.name} cannot be a metafield or raw")

    @property
    def is_nested(self) -> bool:
        return "." in self.path

    @property
    def value_field(self) -> str:
        """The metafield selection holding the value."""
        return "jsonValue" if self.type == "json" else "value"

    @property
    def metaobject_alias(self) -> Optional[str]:
        """Response alias of a metaobject field: the key with non-word characters replaced."""
        if self.metaobject_key is None:
            return None
        return re.sub(r"[^a-zA-Z0-9_]", "_", self.metaobject_key)


def Attribute(
    name: str,
    path: Optional[str] = None,
    type: str = "string",
    null: bool = True,
    default: Any = None,
    transform: Optional[Callable[[Any], Any]] = None,
    raw_graphql: Optional[str] = None,
) -> AttributeDefinition:
    """Declare a plain attribute; the path defaults to the camelCased name."""
    return AttributeDefinition(
        name=name,
        path=path or infer_path(name),
        type=type,
        nullable=null,
        default=default,
        transform=transform,
        raw_graphql=raw_graphql,
    )


def MetafieldAttribute(
    name: str,
    namespace: str,
    key: str,
    type: str = "string",
    null: bool = True,
    default: Any = None,
    transform: Optional[Callable[[Any], Any]] = None,
) -> AttributeDefinition:
    """Declare an attribute read from ``metafield(namespace:, key:)``."""
    alias = f"{infer_path(name)}Metafield"
    value_field = "jsonValue" if type == "json" else "value"
    return AttributeDefinition(
        name=name,
        path=f"{alias}.{value_field}",
        type=type,
        nullable=null,
        default=default,
        transform=transform,
        is_metafield=True,
        metafield_alias=alias,
        metafield_namespace=namespace,
        metafield_key=key,
    )


def MetaobjectField(
    name: str,
    key: Optional[str] = None,
    type: str = "string",
    null: bool = True,
    default: Any = None,
    transform: Optional[Callable[[Any], Any]] = None,
) -> AttributeDefinition:
    """Declare a metaobject attribute read from ``field(key: "...")``; key defaults to name."""
    key = key or name
    alias = re.sub(r"[^a-zA-Z0-9_]", "_", key)
    value_field = "jsonValue" if type == "json" else "value"
    return AttributeDefinition(
        name=name,
        path=f"{alias}.{value_field}",
        type=type,
        nullable=null,
        default=default,
        transform=transform,
        metaobject_key=key,
    )


@dataclass(frozen=True)
class ConnectionDefinition:
    """An association to another GraphQL-backed model."""

    name: str
    class_name: Any
    query_name: str
    cardinality: str = PLURAL
    default_arguments: Mapping[str, Any] = field(default_factory=dict)
    eager_load: bool = False
    inverse_of: Optional[str] = None
    loader_class: Any = None
    metafield_namespace: Optional[str] = None
    metafield_key: Optional[str] = None

    @property
    def singular(self) -> bool:
        return self.cardinality == SINGULAR

    @property
    def alias(self) -> Optional[str]:
        """Response key alias, only needed when it differs from the field."""
        return None if self.name == self.query_name else self.name

    @property
    def response_key(self) -> str:
        return self.alias or self.query_name

    @property
    def is_metaobject_reference(self) -> bool:
        return self.metafield_key is not None


def Connection(
    name: str,
    class_name=None,
    query_name: Optional[str] = None,
    default_arguments: Optional[Dict[str, Any]] = None,
    eager_load: bool = False,
    inverse_of: Optional[str] = None,
    loader_class=None,
    singular: bool = False,
) -> ConnectionDefinition:
    """Declare a connection; plural unless ``singular`` is set."""
    if class_name is None:
        class_name = inflection.camelize(inflection.singularize(name))
    return ConnectionDefinition(
        name=name,
        class_name=class_name,
        query_name=query_name or infer_path(name),
        cardinality=SINGULAR if singular else PLURAL,
        default_arguments=dict(default_arguments or {}),
        eager_load=eager_load,
        inverse_of=inverse_of,
        loader_class=loader_class,
    )


def SingularConnection(name: str, **options) -> ConnectionDefinition:
    """Declare a has-one style connection."""
    return Connection(name, singular=True, **options)


def MetaobjectConnection(
    name: str,
    class_name=None,
    namespace: str = "custom",
    key: Optional[str] = None,
    eager_load: bool = False,
    inverse_of: Optional[str] = None,
) -> ConnectionDefinition:
    """Declare a metaobject referenced by ``metafield(namespace:, key:)``.

    The selection is ``<name>: metafield(...) { reference { ... on Metaobject { ... } } }``.
    """
    if class_name is None:
        class_name = inflection.camelize(inflection.singularize(name))
    return ConnectionDefinition(
        name=name,
        class_name=class_name,
        query_name="metafield",
        cardinality=SINGULAR,
        eager_load=eager_load,
        inverse_of=inverse_of,
        metafield_namespace=namespace,
        metafield_key=key or name,
    )


def attribute_table(definitions: Iterable[AttributeDefinition]) -> Dict[str, AttributeDefinition]:
    """Key definitions by attribute name, later declarations winning."""
    return {definition.name: definition for definition in definitions}


_OVERRIDE_ALIASES = {"null": "nullable"}


def merge_overrides(
    base: Mapping[str, AttributeDefinition], overrides: Mapping[str, Any]
) -> Mapping[str, AttributeDefinition]:
    """Merge loader-specific overrides over a base attribute table.

    An override is either a full AttributeDefinition, which replaces the base
    entry, or a dict of fields shallow-merged over the base entry. A dict for
    an attribute the base does not declare becomes a new plain attribute.
    """
    allowed = {f.name for f in fields(AttributeDefinition)}
    merged = dict(base)
    for name, override in overrides.items():
        if isinstance(override, AttributeDefinition):
            merged[name] = override
            continue
        changes = {_OVERRIDE_ALIASES.get(key, key): value for key, value in override.items()}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown override fields for {name}: {', '.join(sorted(unknown))}")
        if name in merged:
            merged[name] = replace(merged[name], **changes)
        else:
            changes.setdefault("path", infer_path(name))
            merged[name] = AttributeDefinition(name=name, **changes)
    return MappingProxyType(merged)
