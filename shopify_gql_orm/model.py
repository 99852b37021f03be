"""Base class for GraphQL-backed models."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from memoization import cached
from singer_sdk import typing as th

from shopify_gql_orm.attributes import (
    AttributeDefinition,
    ConnectionDefinition,
    attribute_table,
    merge_overrides,
)
from shopify_gql_orm.builder import populate_inverse
from shopify_gql_orm.config import get_configuration
from shopify_gql_orm.gid import normalize_gid
from shopify_gql_orm.loaders import AdminApiLoader, CustomerAccountApiLoader
from shopify_gql_orm.registry import register_model, resolve_model
from shopify_gql_orm.relation import Relation

type_mapping = {
    "string": th.StringType,
    "integer": th.IntegerType,
    "float": th.NumberType,
    "boolean": th.BooleanType,
    "datetime": th.DateTimeType,
}


def load_connection(owner, definition: ConnectionDefinition, **arguments):
    """Fetch a connection of owner through owner's loader."""
    target = resolve_model(definition.class_name)
    loader = owner.loader
    if definition.loader_class is not None and not isinstance(loader, definition.loader_class):
        loader = definition.loader_class(target)
    else:
        loader = loader.for_model(target)
    variables = dict(definition.default_arguments)
    variables.update(arguments)
    if not definition.singular and "first" not in variables and "last" not in variables:
        variables["first"] = get_configuration().max_objects_per_paginated_query
    return loader.load_connection_records(definition.query_name, variables, owner, definition)


class ConnectionProxy:
    """Lazy list of a plural connection's records.

    Records are loaded on first access unless they were eager loaded.
    Calling the proxy with connection arguments returns a fresh proxy
    loading with those arguments, e.g. ``customer.orders(first=5)``.
    """

    def __init__(self, owner, definition: ConnectionDefinition, records=None, arguments=None) -> None:
        self.owner = owner
        self.definition = definition
        self.arguments = dict(arguments or {})
        self._records = records

    @property
    def loaded(self) -> bool:
        return self._records is not None

    def load(self) -> List[Any]:
        if self._records is None:
            self._records = load_connection(self.owner, self.definition, **self.arguments)
            if not self.arguments:
                self.owner.cache_connection(self.definition.name, self._records)
        return self._records

    def reload(self) -> List[Any]:
        self._records = None
        return self.load()

    def to_list(self) -> List[Any]:
        return list(self.load())

    def __call__(self, **arguments) -> "ConnectionProxy":
        return ConnectionProxy(self.owner, self.definition, arguments=arguments)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.load())

    def __len__(self) -> int:
        return len(self.load())

    def __getitem__(self, index):
        return self.load()[index]

    def __bool__(self) -> bool:
        return bool(self.load())

    def __eq__(self, other) -> bool:
        if isinstance(other, ConnectionProxy):
            other = other.load()
        return self.load() == other

    def __repr__(self) -> str:
        state = f"{len(self._records)} records" if self.loaded else "not loaded"
        return f"<ConnectionProxy {self.definition.name}: {state}>"


class ConnectionDescriptor:
    """Accessor installed on the model class for each declared connection."""

    def __init__(self, definition: ConnectionDefinition) -> None:
        self.definition = definition

    def __get__(self, instance, owner):
        if instance is None:
            return self.definition
        name = self.definition.name
        cache = instance._connection_cache
        if self.definition.singular:
            if name not in cache:
                cache[name] = load_connection(instance, self.definition)
            return cache[name]
        return ConnectionProxy(instance, self.definition, records=cache.get(name))

    def __set__(self, instance, value):
        instance.cache_connection(self.definition.name, value)


class ShopifyModel:
    """A model backed by a Shopify GraphQL type.

    Subclasses declare ``fields`` and ``connections``; both are resolved into
    read-only tables once, when the class is created.

    Example:
        class Customer(ShopifyModel):
            gql_type = "Customer"
            fields = [
                Attribute("id"),
                Attribute("email", path="defaultEmailAddress.emailAddress"),
            ]
            connections = [Connection("orders", default_arguments={"first": 10})]
    """

    gql_type: Optional[str] = None
    fields: Sequence[AttributeDefinition] = ()
    connections: Sequence[ConnectionDefinition] = ()
    # {LoaderClass: {attribute name: AttributeDefinition or dict of overrides}}
    loader_overrides: Mapping[type, Mapping[str, Any]] = {}
    # {LoaderClass: GraphQL type name}
    loader_gql_types: Mapping[type, str] = {}
    default_loader_class = AdminApiLoader

    attribute_definitions: Mapping[str, AttributeDefinition] = MappingProxyType({})
    connection_definitions: Mapping[str, ConnectionDefinition] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("gql_type"):
            cls.gql_type = cls.__name__
        cls.attribute_definitions = MappingProxyType(attribute_table(cls.fields))
        cls.connection_definitions = MappingProxyType(
            {definition.name: definition for definition in cls.connections}
        )
        collisions = set(cls.attribute_definitions) & set(cls.connection_definitions)
        if collisions:
            raise ValueError(
                f"{cls.__name__} declares {', '.join(sorted(collisions))} "
                "as both an attribute and a connection"
            )
        for name, definition in cls.connection_definitions.items():
            setattr(cls, name, ConnectionDescriptor(definition))
        register_model(cls)

    def __init__(self, _connection_cache: Optional[Dict[str, Any]] = None, **attributes: Any) -> None:
        for name in self.attribute_names():
            self.__dict__[name] = None
        self.__dict__.update(attributes)
        self._attribute_keys = list(dict.fromkeys([*self.attribute_names(), *attributes]))
        self._connection_cache: Dict[str, Any] = {}
        self._loader = None
        for name, value in (_connection_cache or {}).items():
            self.cache_connection(name, value)
            definition = self.connection_definitions.get(name)
            if definition is not None and definition.inverse_of:
                children = value if isinstance(value, list) else [value]
                for child in children:
                    populate_inverse(definition, child, self)

    @classmethod
    @cached
    def attributes_for_loader(cls, loader_class=None) -> Mapping[str, AttributeDefinition]:
        """Base attributes merged with the overrides declared for loader_class."""
        overrides: Dict[str, Any] = {}
        for klass, table in cls.loader_overrides.items():
            if loader_class is not None and issubclass(loader_class, klass):
                overrides.update(table)
        return merge_overrides(cls.attribute_definitions, overrides)

    @classmethod
    def gql_type_for_loader(cls, loader_class=None) -> str:
        for klass, gql_type in cls.loader_gql_types.items():
            if loader_class is not None and issubclass(loader_class, klass):
                return gql_type
        return cls.gql_type

    @classmethod
    def collection_arguments(cls) -> Dict[str, Any]:
        """Extra arguments for the collection query, ahead of the search ones."""
        return {}

    @classmethod
    def attribute_names(cls) -> List[str]:
        names = list(cls.attribute_definitions)
        for table in cls.loader_overrides.values():
            names.extend(name for name in table if name not in names)
        return names

    @classmethod
    def json_schema(cls, loader_class=None) -> dict:
        """JSON schema of the attributes as seen through loader_class."""
        properties = []
        for name, definition in cls.attributes_for_loader(loader_class or cls.default_loader_class).items():
            property_type = type_mapping.get(definition.type)
            if property_type is None:
                property_type = th.CustomType({"type": ["object", "array", "string", "number", "boolean", "null"]})
            properties.append(th.Property(name, property_type, required=not definition.nullable))
        return th.PropertiesList(*properties).to_dict()

    @property
    def gid(self) -> Optional[str]:
        record_id = getattr(self, "id", None)
        if record_id is None:
            return None
        return normalize_gid(record_id, self.gql_type_for_loader(type(self.loader)))

    @property
    def loader(self):
        if self._loader is None:
            self._loader = self.default_loader_class(type(self))
        return self._loader

    def use_loader(self, loader) -> "ShopifyModel":
        self._loader = loader
        return self

    def cache_connection(self, name: str, value: Any) -> None:
        self._connection_cache[name] = value

    def connection_loaded(self, name: str) -> bool:
        return name in self._connection_cache

    def to_dict(self) -> Dict[str, Any]:
        return {name: self.__dict__.get(name) for name in self._attribute_keys}

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        record_id = getattr(self, "id", None)
        if record_id is None:
            return self is other
        return record_id == getattr(other, "id", None)

    def __hash__(self) -> int:
        record_id = getattr(self, "id", None)
        return hash((type(self), record_id)) if record_id is not None else id(self)

    def __repr__(self) -> str:
        attributes = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"<{type(self).__name__} {attributes}>"

    # Finders

    @classmethod
    def relation(cls, loader=None) -> Relation:
        return Relation(cls, loader=loader)

    @classmethod
    def all(cls) -> Relation:
        return cls.relation()

    @classmethod
    def find(cls, id=None):
        return cls.relation().find(id)

    @classmethod
    def find_by(cls, conditions: Any = None, **kwargs):
        return cls.relation().find_by(conditions, **kwargs)

    @classmethod
    def where(cls, conditions: Any = None, *args, **kwargs) -> Relation:
        return cls.relation().where(conditions, *args, **kwargs)

    @classmethod
    def select(cls, *attributes: str) -> Relation:
        return cls.relation().select(*attributes)

    @classmethod
    def includes(cls, *connections) -> Relation:
        return cls.relation().includes(*connections)

    @classmethod
    def first(cls, count: Optional[int] = None):
        return cls.relation().first(count)

    @classmethod
    def with_admin_api(cls) -> Relation:
        return cls.relation(AdminApiLoader(cls))

    @classmethod
    def with_customer_account_api(cls, token: str) -> Relation:
        return cls.relation(CustomerAccountApiLoader(cls, token=token))
