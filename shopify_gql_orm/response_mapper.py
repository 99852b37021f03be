"""Decode GraphQL responses back into attribute dicts and model instances."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from singer_sdk.helpers.jsonpath import extract_jsonpath

from shopify_gql_orm.attributes import AttributeDefinition, ConnectionDefinition
from shopify_gql_orm.builder import CONNECTION_CACHE_KEY, ModelBuilder, populate_inverse
from shopify_gql_orm.coercion import coerce
from shopify_gql_orm.context import LoaderContext
from shopify_gql_orm.exceptions import NullConstraintError
from shopify_gql_orm.paginator import PageInfo
from shopify_gql_orm.registry import resolve_model


def first_match(json_path: str, document) -> Any:
    if not isinstance(document, dict):
        return None
    return next(extract_jsonpath(json_path, document), None)


def dig(value, segments: Iterable[str]) -> Any:
    """Walk nested dicts, returning None at the first missing or non-dict step."""
    for segment in segments:
        if not isinstance(value, dict):
            return None
        value = value.get(segment)
    return value


def connection_nodes(value) -> List[dict]:
    """Return the records of a plural connection, from edges/node or nodes."""
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    if not isinstance(value, dict):
        return []
    if "edges" in value:
        records = [edge.get("node") for edge in value["edges"] or [] if isinstance(edge, dict)]
    else:
        records = value.get("nodes") or []
    return [record for record in records if isinstance(record, dict)]


class ResponseMapper:
    """Read responses using the same naming rules the QueryBuilder emits.

    Args:
        context: The LoaderContext the query was built from.
    """

    def __init__(self, context: LoaderContext) -> None:
        self.context = context

    def map_response(self, response, query_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Map ``data.<query_name>`` of a single-record response."""
        node = first_match(f"$.data.{query_name or self.context.query_name}", response)
        if not isinstance(node, dict):
            return None
        return self.map_record(node)

    def map_record(self, node: Mapping[str, Any]) -> Dict[str, Any]:
        """Attributes of node, plus the eager-loaded connections when any were included."""
        attributes = self.map_node_to_attributes(node)
        if self.context.included_connections:
            attributes[CONNECTION_CACHE_KEY] = self.extract_connections_from_node(node)
        return attributes

    def read_value(self, node: Mapping[str, Any], definition: AttributeDefinition) -> Any:
        if definition.raw_graphql:
            value = node.get(definition.name)
            if definition.is_nested:
                value = dig(value, definition.path.split(".")[1:])
            return value
        if definition.metaobject_key:
            return self.read_metaobject_field(node, definition)
        if definition.is_metafield:
            return dig(node, (definition.metafield_alias, definition.value_field))
        if definition.is_nested:
            return dig(node, definition.path.split("."))
        return node.get(definition.name)

    def read_metaobject_field(self, node: Mapping[str, Any], definition: AttributeDefinition) -> Any:
        """Read an aliased ``field(key:)`` selection, falling back to a ``fields`` list."""
        field_data = node.get(definition.metaobject_alias)
        if not isinstance(field_data, dict):
            fields = node.get("fields")
            if not isinstance(fields, list):
                return None
            field_data = next(
                (f for f in fields if isinstance(f, dict) and f.get("key") == definition.metaobject_key),
                None,
            )
        return dig(field_data, (definition.value_field,))

    def map_node_to_attributes(
        self,
        node: Mapping[str, Any],
        attributes: Optional[Mapping[str, AttributeDefinition]] = None,
    ) -> Dict[str, Any]:
        if attributes is None:
            attributes = self.context.attributes
        result: Dict[str, Any] = {}
        for name, definition in attributes.items():
            value = self.read_value(node, definition)
            if value is None and definition.default is not None:
                value = definition.default
            elif definition.transform is not None:
                value = definition.transform(value)

            if value is None and not definition.nullable:
                raise NullConstraintError(name, definition.path)
            result[name] = coerce(value, definition.type, name, definition.path)
        return result

    def _child_mapper(self, definition: ConnectionDefinition, nested_includes) -> "ResponseMapper":
        target = resolve_model(definition.class_name)
        return ResponseMapper(self.context.for_model(target, nested_includes))

    def build_instance(self, node: Optional[Mapping[str, Any]], parent=None, definition=None):
        """Build a model from node, wiring the inverse of definition to parent."""
        if not isinstance(node, dict):
            return None
        instance = ModelBuilder.build(self.context.model_class, self.map_record(node))
        if parent is not None and definition is not None:
            populate_inverse(definition, instance, parent)
        return instance

    def extract_connections_from_node(self, node: Mapping[str, Any], parent=None) -> Dict[str, Any]:
        """Decode the included connections of node.

        Singular connections map to an instance or None, plural ones to a
        list. When parent is given each child gets its inverse pointed at it.
        """
        connections = self.context.connections
        extracted: Dict[str, Any] = {}
        for name, nested_includes in self.context.normalized_includes.items():
            definition = connections.get(name)
            if definition is None:
                continue
            child_mapper = self._child_mapper(definition, nested_includes)
            value = node.get(definition.response_key) if isinstance(node, dict) else None
            if definition.is_metaobject_reference:
                value = dig(value, ("reference",))
            if definition.singular:
                extracted[name] = child_mapper.build_instance(value, parent, definition)
            else:
                extracted[name] = [
                    child_mapper.build_instance(record, parent, definition)
                    for record in connection_nodes(value)
                ]
        return extracted

    def _map_connection_value(self, value, singular: bool, parent, definition):
        if singular:
            return self.build_instance(value, parent, definition)
        return [self.build_instance(record, parent, definition) for record in connection_nodes(value)]

    def map_connection_response(
        self,
        response,
        query_name: str,
        singular: bool = False,
        parent=None,
        definition: Optional[ConnectionDefinition] = None,
    ):
        """Decode a root connection read from ``data.<query_name>``."""
        value = first_match(f"$.data.{query_name}", response)
        return self._map_connection_value(value, singular, parent, definition)

    def map_nested_connection_response(
        self,
        response,
        parent_query: str,
        query_name: str,
        singular: bool = False,
        parent=None,
        definition: Optional[ConnectionDefinition] = None,
    ):
        """Decode a connection read from ``data.<parent_query>.<query_name>``."""
        value = first_match(f"$.data.{parent_query}.{query_name}", response)
        return self._map_connection_value(value, singular, parent, definition)

    def map_metaobject_reference_response(
        self,
        response,
        parent_query: str,
        definition: ConnectionDefinition,
        parent=None,
    ):
        """Decode ``data.<parent_query>.<name>.reference`` into a metaobject instance."""
        value = first_match(f"$.data.{parent_query}.{definition.name}.reference", response)
        return self.build_instance(value, parent, definition)

    def map_collection_response(self, response, query_name: str) -> List[Dict[str, Any]]:
        collection = first_match(f"$.data.{query_name}", response)
        return [self.map_record(node) for node in connection_nodes(collection)]

    @staticmethod
    def page_info_from(response, query_name: str) -> PageInfo:
        return PageInfo.from_dict(first_match(f"$.data.{query_name}.pageInfo", response))

    @staticmethod
    def search_warnings(response) -> List[dict]:
        """Collect ``extensions.search[].warnings[]`` from a search response."""
        if not isinstance(response, dict):
            return []
        matches = extract_jsonpath("$.extensions.search[*].warnings[*]", response)
        return [warning for warning in matches if warning]
