"""Chainable, lazily evaluated queries over a model."""

from __future__ import annotations

from typing import Any, Iterator, List, Optional

from shopify_gql_orm.builder import ModelBuilder
from shopify_gql_orm.config import get_configuration
from shopify_gql_orm.context import normalize_includes
from shopify_gql_orm.exceptions import (
    InvalidAttributeError,
    RecordNotFound,
    UnknownConnectionError,
)
from shopify_gql_orm.paginator import PageInfoPaginator
from shopify_gql_orm.search_query import SearchQuery

DEFAULT_PER_PAGE = 250


class Relation:
    """A query over ``model_class`` built up by chaining.

    Nothing is loaded until the relation is iterated or a terminal method
    such as ``to_list``, ``first`` or ``find`` is called.

    Example:
        Order.where(status="open").includes("line_items").limit(10).to_list()
    """

    def __init__(
        self,
        model_class,
        loader=None,
        conditions: Any = None,
        included_connections: Any = (),
        selected_attributes: Optional[List[str]] = None,
        total_limit: Optional[int] = None,
        per_page: Optional[int] = None,
        query_name: Optional[str] = None,
    ) -> None:
        self.model_class = model_class
        self._loader_prototype = loader or model_class.default_loader_class(model_class)
        self.conditions = conditions
        self.included_connections = included_connections or ()
        self.selected_attributes = selected_attributes
        self.total_limit = total_limit
        self.per_page = per_page or DEFAULT_PER_PAGE
        self.query_name = query_name
        self._records: Optional[List[Any]] = None

    def _spawn(self, **changes) -> "Relation":
        options = dict(
            loader=self._loader_prototype,
            conditions=self.conditions,
            included_connections=self.included_connections,
            selected_attributes=self.selected_attributes,
            total_limit=self.total_limit,
            per_page=self.per_page,
            query_name=self.query_name,
        )
        options.update(changes)
        return Relation(self.model_class, **options)

    @property
    def loader_class(self):
        return type(self._loader_prototype)

    @property
    def loader(self):
        eager = [
            name
            for name, definition in self.model_class.connection_definitions.items()
            if definition.eager_load
        ]
        includes = list(eager)
        includes.extend(self._include_list())
        return self._loader_prototype.for_model(
            self.model_class,
            selected_attributes=self.selected_attributes,
            included_connections=includes,
        )

    def _include_list(self) -> List[Any]:
        if isinstance(self.included_connections, (str, dict)):
            return [self.included_connections]
        return list(self.included_connections)

    @property
    def search_query(self) -> SearchQuery:
        if isinstance(self.conditions, (list, tuple)):
            return SearchQuery(list(self.conditions))
        return SearchQuery(self.conditions)

    def _has_conditions(self) -> bool:
        return bool(self.conditions)

    def where(self, conditions: Any = None, *args, **kwargs) -> "Relation":
        """Add search conditions.

        Accepts a dict or keyword conditions (escaped per value), a raw
        search string, or a string with ``?`` / ``:name`` placeholders
        followed by the values to bind. Only one non-empty where is allowed.
        """
        if conditions is not None and kwargs:
            raise ValueError("Pass conditions either positionally or as keywords, not both")
        if conditions is None:
            new_conditions = kwargs
        elif isinstance(conditions, str) and args:
            new_conditions = [conditions, *args]
        else:
            new_conditions = conditions
        if not new_conditions:
            return self
        if self._has_conditions():
            raise ValueError("Chaining multiple where clauses is not supported")
        return self._spawn(conditions=new_conditions)

    def includes(self, *connections) -> "Relation":
        """Eager load connections; unknown names raise UnknownConnectionError."""
        declared = self.model_class.connection_definitions
        for name in normalize_includes(list(connections)):
            if name not in declared:
                raise UnknownConnectionError(
                    f"Invalid connection for {self.model_class.__name__}: {name}. "
                    f"Available connections: {', '.join(declared) or 'none'}"
                )
        return self._spawn(included_connections=self._include_list() + list(connections))

    def select(self, *attributes: str) -> "Relation":
        available = self.model_class.attributes_for_loader(self.loader_class)
        invalid = [name for name in attributes if name not in available]
        if invalid:
            raise InvalidAttributeError(
                f"Invalid attributes for {self.model_class.__name__}: {', '.join(invalid)}. "
                f"Available attributes: {', '.join(available)}"
            )
        return self._spawn(selected_attributes=list(attributes))

    def limit(self, count: int) -> "Relation":
        return self._spawn(total_limit=count)

    def in_pages(self, of: int) -> "Relation":
        maximum = int(get_configuration().max_objects_per_paginated_query)
        return self._spawn(per_page=min(int(of), maximum))

    def _attach(self, records: List[Any], loader) -> List[Any]:
        for record in records:
            record.use_loader(loader)
        return records

    def each_page(self) -> Iterator[List[Any]]:
        """Yield one list of records per page, fetching pages on demand."""
        loader = self.loader
        paginator = PageInfoPaginator()
        remaining = self.total_limit
        while not paginator.finished:
            if remaining is not None and remaining <= 0:
                return
            size = self.per_page if remaining is None else min(self.per_page, remaining)
            page = loader.load_paginated_collection(
                self.search_query,
                size,
                after=paginator.current_value,
                query_name=self.query_name,
            )
            records = page.records if remaining is None else page.records[:remaining]
            if records:
                yield self._attach(records, loader)
            if remaining is not None:
                remaining -= len(records)
                if remaining <= 0:
                    return
            paginator.advance(page)

    def to_list(self) -> List[Any]:
        if self._records is None:
            records: List[Any] = []
            for page in self.each_page():
                records.extend(page)
            self._records = records
        return list(self._records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())

    def __len__(self) -> int:
        return len(self.to_list())

    def __getitem__(self, index):
        return self.to_list()[index]

    def first(self, count: Optional[int] = None):
        """The first record (or None), or a list of the first ``count``."""
        if count == 0:
            return []
        size = 1 if count is None else count
        records = self._spawn(total_limit=size, per_page=size).to_list()
        if count is None:
            return records[0] if records else None
        return records

    def exists(self) -> bool:
        return self.first() is not None

    def count(self) -> int:
        return len(self.to_list())

    def find(self, id=None):
        """Load one record by id or GID.

        Raises:
            RecordNotFound: when the API returns no data.
        """
        loader = self.loader
        attributes = loader.load_attributes(id)
        if attributes is None:
            raise RecordNotFound(f"Couldn't find {self.model_class.__name__} with id={id}")
        record = ModelBuilder.build(self.model_class, attributes)
        record.use_loader(loader)
        return record

    def find_by(self, conditions: Any = None, **kwargs):
        """The first record matching the conditions, or None."""
        return self.where(conditions, **kwargs).first()

    def __repr__(self) -> str:
        return (
            f"Relation({self.model_class.__name__}, conditions={self.conditions!r}, "
            f"includes={self._include_list()!r}, limit={self.total_limit})"
        )
