"""Load a single connection, nested under a parent record or at the root."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import inflection

from shopify_gql_orm.attributes import ConnectionDefinition
from shopify_gql_orm.context import LoaderContext
from shopify_gql_orm.gid import normalize_gid
from shopify_gql_orm.query_builder import QueryBuilder
from shopify_gql_orm.response_mapper import ResponseMapper


class ConnectionLoader:
    """Build, execute and decode a connection query.

    Args:
        context: Context of the connection's target model.
        loader: The Loader whose transport executes the query.
    """

    def __init__(self, context: LoaderContext, loader) -> None:
        self.context = context
        self.loader = loader

    def load_records(
        self,
        query_name: str,
        variables: Optional[Mapping[str, Any]] = None,
        parent=None,
        connection: Optional[ConnectionDefinition] = None,
    ):
        """Return the records of the connection.

        With a parent the query is nested under ``<parent>(id: $id)`` and the
        parent's GID is sent as ``$id``; without one it runs at the root with
        no variables. Missing data gives None for singular connections and an
        empty list for plural ones.
        """
        singular = connection.singular if connection is not None else False
        mapper = ResponseMapper(self.context)

        if parent is None and connection is not None and connection.is_metaobject_reference:
            raise ValueError(f"Metaobject reference {connection.name} can only be loaded through its parent")
        if parent is None:
            query = QueryBuilder.connection_query(
                self.context, query_name, variables, singular=singular
            )
            response = self.loader.execute(query)
            return mapper.map_connection_response(
                response, query_name, singular=singular, definition=connection
            )

        parent_type = type(parent).gql_type_for_loader(self.context.loader_class)
        parent_query = inflection.camelize(parent_type, False)
        variables_for_parent = {"id": normalize_gid(parent.id, parent_type)}

        if connection is not None and connection.is_metaobject_reference:
            query = QueryBuilder.metaobject_reference_query(self.context, connection, parent_query)
            response = self.loader.execute(query, variables_for_parent)
            return mapper.map_metaobject_reference_response(
                response, parent_query, connection, parent=parent
            )

        query = QueryBuilder.connection_query(
            self.context,
            query_name,
            variables,
            parent_query=parent_query,
            singular=singular,
        )
        response = self.loader.execute(query, variables_for_parent)
        return mapper.map_nested_connection_response(
            response,
            parent_query,
            query_name,
            singular=singular,
            parent=parent,
            definition=connection,
        )
