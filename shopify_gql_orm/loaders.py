"""Loaders: per-API strategies owning the transport and attribute resolution."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import inflection
import simplejson

from shopify_gql_orm.builder import ModelBuilder
from shopify_gql_orm.config import get_configuration
from shopify_gql_orm.connection_loader import ConnectionLoader
from shopify_gql_orm.context import LoaderContext
from shopify_gql_orm.exceptions import ConfigurationError, SchemaMismatchError
from shopify_gql_orm.gid import normalize_gid
from shopify_gql_orm.paginator import PaginatedResult
from shopify_gql_orm.query_builder import QueryBuilder
from shopify_gql_orm.response_mapper import ResponseMapper
from shopify_gql_orm.search_query import SearchQuery


class Loader:
    """Base loader.

    Args:
        model_class: The model records are built from.
        selected_attributes: Restrict the query to these attributes; ``id``
            is always selected.
        included_connections: Connections to eager load.
    """

    def __init__(
        self,
        model_class,
        selected_attributes: Optional[Iterable[str]] = None,
        included_connections: Any = (),
    ) -> None:
        self.model_class = model_class
        self.selected_attributes = list(selected_attributes) if selected_attributes else None
        self.included_connections = included_connections or ()

    @property
    def logger(self) -> logging.Logger:
        return get_configuration().logger

    @property
    def graphql_type(self) -> str:
        return self.model_class.gql_type_for_loader(type(self))

    @property
    def attributes(self) -> Mapping[str, Any]:
        attributes = self.model_class.attributes_for_loader(type(self))
        if not self.selected_attributes:
            return attributes
        selected = set(self.selected_attributes) | {"id"}
        return {name: d for name, d in attributes.items() if name in selected}

    @property
    def context(self) -> LoaderContext:
        return LoaderContext(
            self.graphql_type,
            type(self),
            self.attributes,
            self.model_class,
            self.included_connections,
        )

    def transport(self) -> Callable[[str, Dict[str, Any]], dict]:
        raise NotImplementedError

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> dict:
        """Send query through the transport and return its JSON response."""
        variables = variables or {}
        if get_configuration().log_queries:
            self.logger.info(f"GraphQL query:\n{query}")
            self.logger.info(f"GraphQL variables: {simplejson.dumps(variables)}")
        client = self.transport()
        self.logger.debug(f"Attempting query:\n{query}")
        return client(query, variables)

    def load_attributes(self, id=None) -> Optional[Dict[str, Any]]:
        """Attributes of the record with id, or None when there is no data."""
        context = self.context
        if id is None:
            raise ValueError(f"An id is required to load a {context.gql_type}")
        query = QueryBuilder.single_record_query(context)
        response = self.execute(query, {"id": normalize_gid(id, context.gql_type)})
        return ResponseMapper(context).map_response(response)

    def collection_query_name(self, context: LoaderContext) -> str:
        return inflection.pluralize(context.query_name)

    def page_size(self, requested: Optional[int]) -> int:
        maximum = int(get_configuration().max_objects_per_paginated_query)
        if not requested:
            return maximum
        return min(int(requested), maximum)

    def _search_variables(self, conditions, size: int) -> Dict[str, Any]:
        search = conditions if isinstance(conditions, SearchQuery) else SearchQuery(conditions)
        variables = dict(self.model_class.collection_arguments())
        variables.update(query=str(search) or None, first=size)
        return variables

    def _check_search_warnings(self, response) -> None:
        warnings = ResponseMapper.search_warnings(response)
        if warnings:
            raise SchemaMismatchError(warnings)

    def load_collection(
        self,
        conditions: Any = None,
        limit: Optional[int] = None,
        query_name: Optional[str] = None,
    ) -> List[Any]:
        """Run a search query and build one model per returned node.

        Raises SchemaMismatchError when the API reports search warnings.
        """
        context = self.context
        query_name = query_name or self.collection_query_name(context)
        variables = self._search_variables(conditions, self.page_size(limit))
        query = QueryBuilder.collection_query(context, query_name, variables)
        response = self.execute(query)
        self._check_search_warnings(response)
        rows = ResponseMapper(context).map_collection_response(response, query_name)
        return ModelBuilder.build_many(self.model_class, rows)

    def load_paginated_collection(
        self,
        conditions: Any = None,
        per_page: Optional[int] = None,
        after: Optional[str] = None,
        before: Optional[str] = None,
        query_name: Optional[str] = None,
    ) -> PaginatedResult:
        """Load one page; ``before`` pages backwards using ``last``."""
        context = self.context
        query_name = query_name or self.collection_query_name(context)
        size = self.page_size(per_page)
        variables = self._search_variables(conditions, size)
        if before:
            variables.pop("first")
            variables.update(last=size, before=before)
        elif after:
            variables["after"] = after
        query = QueryBuilder.paginated_collection_query(context, query_name, variables)
        response = self.execute(query)
        self._check_search_warnings(response)

        mapper = ResponseMapper(context)
        records = ModelBuilder.build_many(
            self.model_class, mapper.map_collection_response(response, query_name)
        )

        def fetch_page(after=None, before=None) -> PaginatedResult:
            return self.load_paginated_collection(conditions, per_page, after, before, query_name)

        return PaginatedResult(records, mapper.page_info_from(response, query_name), fetch_page)

    def load_connection_records(
        self,
        query_name: str,
        variables: Optional[Mapping[str, Any]] = None,
        parent=None,
        connection=None,
    ):
        return ConnectionLoader(self.context, self).load_records(
            query_name, variables, parent, connection
        )

    def credentials(self) -> Dict[str, Any]:
        """Constructor arguments a derived loader must carry over."""
        return {}

    def for_model(
        self,
        model_class,
        selected_attributes: Optional[Iterable[str]] = None,
        included_connections: Any = (),
    ) -> "Loader":
        """A loader of the same kind, with the same credentials, for model_class."""
        return type(self)(
            model_class,
            selected_attributes=selected_attributes,
            included_connections=included_connections,
            **self.credentials(),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model_class.__name__})"


class AdminApiLoader(Loader):
    """Loads through the configured ``admin_api_client``."""

    def transport(self):
        client = get_configuration().admin_api_client
        if client is None:
            raise ConfigurationError(
                "Admin API client not configured. "
                "Call configure(admin_api_client=...) first."
            )
        return client


class CustomerAccountApiLoader(Loader):
    """Loads as a single customer through the Customer Account API.

    Args:
        model_class: The model records are built from.
        token: The customer access token.
    """

    current_viewer_type = "Customer"

    def __init__(self, model_class, token: Optional[str] = None, **kwargs) -> None:
        super().__init__(model_class, **kwargs)
        self.token = token

    def credentials(self) -> Dict[str, Any]:
        return {"token": self.token}

    def transport(self):
        factory = get_configuration().customer_account_client_factory
        if factory is None:
            raise ConfigurationError(
                "Customer Account API client factory not configured. "
                "Call configure(customer_account_client_factory=...) first."
            )
        if not self.token:
            raise ConfigurationError("A customer access token is required")
        return factory(self.token)

    def load_attributes(self, id=None) -> Optional[Dict[str, Any]]:
        """Without an id, load the authenticated customer."""
        context = self.context
        if id is None and context.gql_type == self.current_viewer_type:
            query = QueryBuilder.current_viewer_query(context)
            return ResponseMapper(context).map_response(self.execute(query))
        return super().load_attributes(id)
