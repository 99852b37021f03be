"""Build GraphQL documents from a LoaderContext."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import inflection

from shopify_gql_orm.attributes import AttributeDefinition, ConnectionDefinition
from shopify_gql_orm.context import LoaderContext
from shopify_gql_orm.exceptions import ConfigurationError
from shopify_gql_orm.nodes import (
    Connection,
    Document,
    Field,
    Fragment,
    InlineFragment,
    Node,
    Operation,
    PageInfo,
    Raw,
    Singular,
    Variable,
)
from shopify_gql_orm.registry import resolve_model

ID_VARIABLE = {"id": "ID!"}


def merge_path(tree: Dict[str, Any], path: str) -> None:
    """Merge a dotted path into a nested selection map.

    A leaf is marked with ``True``. When a path descends through a segment
    previously recorded as a leaf, the object selection wins.
    """
    segments = path.split(".")
    current = tree
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = current[segment] = {}
        current = child
    current.setdefault(segments[-1], True)


def tree_to_nodes(tree: Mapping[str, Any]) -> List[Node]:
    nodes: List[Node] = []
    for segment, subtree in tree.items():
        if isinstance(subtree, dict):
            nodes.append(Field(segment, children=tree_to_nodes(subtree)))
        else:
            nodes.append(Field(segment))
    return nodes


class QueryBuilder:
    """Turn a context's attributes and connections into selection nodes.

    Args:
        context: The LoaderContext describing the type being selected.
    """

    def __init__(self, context: LoaderContext) -> None:
        self.context = context

    def build_fragment(self) -> Fragment:
        """Build ``fragment <Type>Fragment on <Type> { ... }``."""
        if not self.context.attributes:
            raise ConfigurationError(
                f"No attributes defined for {self.context.gql_type}; "
                "declare fields on the model before querying it"
            )
        children = self.build_field_nodes() + self.build_connection_nodes()
        return Fragment(self.context.fragment_name, self.context.gql_type, children)

    def build_field_nodes(self) -> List[Node]:
        raw: List[AttributeDefinition] = []
        metafields: List[AttributeDefinition] = []
        nested: List[AttributeDefinition] = []
        metaobject_fields: List[AttributeDefinition] = []
        simple: List[AttributeDefinition] = []
        for definition in self.context.attributes.values():
            if definition.raw_graphql:
                raw.append(definition)
            elif definition.metaobject_key:
                metaobject_fields.append(definition)
            elif definition.is_metafield:
                metafields.append(definition)
            elif definition.is_nested:
                nested.append(definition)
            else:
                simple.append(definition)

        tree: Dict[str, Any] = {}
        for definition in nested:
            merge_path(tree, definition.path)
        nodes = tree_to_nodes(tree)

        for definition in simple:
            alias = None if definition.name == definition.path else definition.name
            nodes.append(Field(definition.path, alias=alias))

        seen_keys = set()
        for definition in metaobject_fields:
            if definition.metaobject_alias in seen_keys:
                continue
            seen_keys.add(definition.metaobject_alias)
            nodes.append(
                Field(
                    "field",
                    alias=definition.metaobject_alias,
                    arguments={"key": definition.metaobject_key},
                    children=[Field("key"), Field("value"), Field("jsonValue")],
                )
            )

        seen_aliases = set()
        for definition in metafields:
            if definition.metafield_alias in seen_aliases:
                continue
            seen_aliases.add(definition.metafield_alias)
            nodes.append(
                Field(
                    "metafield",
                    alias=definition.metafield_alias,
                    arguments={
                        "namespace": definition.metafield_namespace,
                        "key": definition.metafield_key,
                    },
                    children=[Field(definition.value_field)],
                )
            )

        for definition in raw:
            nodes.append(Raw(f"{definition.name}: {definition.raw_graphql}"))
        return nodes

    def build_connection_nodes(self) -> List[Node]:
        """Build selections for the included connections, recursively.

        Names the model does not declare are skipped.
        """
        connections = self.context.connections
        nodes: List[Node] = []
        for name, nested_includes in self.context.normalized_includes.items():
            definition = connections.get(name)
            if definition is None:
                continue
            target = resolve_model(definition.class_name)
            child_builder = QueryBuilder(self.context.for_model(target, nested_includes))
            if definition.is_metaobject_reference:
                nodes.append(child_builder.metaobject_reference_node(definition))
                continue
            children = child_builder.build_field_nodes() or [Field("id")]
            children.extend(child_builder.build_connection_nodes())
            node_class = Singular if definition.singular else Connection
            nodes.append(
                node_class(
                    definition.query_name,
                    alias=definition.alias,
                    arguments=definition.default_arguments,
                    children=children,
                )
            )
        return nodes

    def metaobject_reference_node(self, definition: ConnectionDefinition) -> Node:
        """``<name>: metafield(namespace:, key:) { reference { ... on Metaobject { ... } } }``

        Called on the builder of the referenced metaobject's context.
        """
        children = self.build_field_nodes() or [Field("id")]
        reference = Field("reference", children=[InlineFragment(self.context.gql_type, children)])
        return Field(
            "metafield",
            alias=definition.name,
            arguments={
                "namespace": definition.metafield_namespace,
                "key": definition.metafield_key,
            },
            children=[reference],
        )

    @staticmethod
    def _document(operation: Operation, fragment: Fragment, compact: Optional[bool]) -> str:
        return Document(operation, [fragment]).render(compact)

    @classmethod
    def single_record_query(cls, context: LoaderContext, compact: Optional[bool] = None) -> str:
        """``query Get<Type>($id: ID!) { <query>(id: $id) { ...<Type>Fragment } }``"""
        fragment = cls(context).build_fragment()
        root = Field(context.query_name, arguments={"id": Variable("id")}, children=[fragment.spread])
        operation = Operation(f"Get{context.gql_type}", ID_VARIABLE, [root])
        return cls._document(operation, fragment, compact)

    @classmethod
    def current_viewer_query(
        cls,
        context: LoaderContext,
        query_name: Optional[str] = None,
        compact: Optional[bool] = None,
    ) -> str:
        """Query the authenticated viewer, e.g. ``customer`` on the Customer Account API."""
        fragment = cls(context).build_fragment()
        root = Field(query_name or context.query_name, children=[fragment.spread])
        operation = Operation(f"GetCurrent{context.gql_type}", children=[root])
        return cls._document(operation, fragment, compact)

    @classmethod
    def collection_query(
        cls,
        context: LoaderContext,
        query_name: str,
        variables: Mapping[str, Any],
        compact: Optional[bool] = None,
    ) -> str:
        fragment = cls(context).build_fragment()
        nodes = Field("nodes", children=[fragment.spread])
        root = Field(query_name, arguments=variables, children=[nodes])
        operation = Operation(f"Get{inflection.pluralize(context.gql_type)}", children=[root])
        return cls._document(operation, fragment, compact)

    @classmethod
    def paginated_collection_query(
        cls,
        context: LoaderContext,
        query_name: str,
        variables: Mapping[str, Any],
        compact: Optional[bool] = None,
    ) -> str:
        fragment = cls(context).build_fragment()
        nodes = Field("nodes", children=[fragment.spread])
        root = Field(query_name, arguments=variables, children=[PageInfo(), nodes])
        operation = Operation(f"Get{inflection.pluralize(context.gql_type)}", children=[root])
        return cls._document(operation, fragment, compact)

    @classmethod
    def connection_query(
        cls,
        context: LoaderContext,
        query_name: str,
        variables: Optional[Mapping[str, Any]] = None,
        parent_query: Optional[str] = None,
        singular: bool = False,
        compact: Optional[bool] = None,
    ) -> str:
        """Query a connection, either at the root or under ``parent_query(id: $id)``.

        Connection arguments are inlined; a nested query only declares ``$id``.
        """
        fragment = cls(context).build_fragment()
        if singular:
            selection = Field(query_name, arguments=variables, children=[fragment.spread])
        else:
            edges = Field("edges", children=[Field("node", children=[fragment.spread])])
            selection = Field(query_name, arguments=variables, children=[PageInfo(), edges])

        if parent_query:
            parent = Field(parent_query, arguments={"id": Variable("id")}, children=[selection])
            operation = Operation(variable_definitions=ID_VARIABLE, children=[parent])
        else:
            operation = Operation(children=[selection])
        return cls._document(operation, fragment, compact)

    @classmethod
    def metaobject_reference_query(
        cls,
        context: LoaderContext,
        definition: ConnectionDefinition,
        parent_query: str,
        compact: Optional[bool] = None,
    ) -> str:
        """Query the metaobject a parent record references through a metafield.

        ``query($id: ID!) { <parent>(id: $id) { <name>: metafield(...) { reference { ... } } } }``
        """
        reference = cls(context).metaobject_reference_node(definition)
        parent = Field(parent_query, arguments={"id": Variable("id")}, children=[reference])
        operation = Operation(variable_definitions=ID_VARIABLE, children=[parent])
        return Document(operation).render(compact)
