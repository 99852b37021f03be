"""GraphQL selection nodes and their compact / pretty rendering."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import inflection
from memoization import cached

from shopify_gql_orm.config import get_configuration

INDENT = "  "
PAGE_INFO_FIELDS = ("hasNextPage", "hasPreviousPage", "startCursor", "endCursor")
# Everything else is emitted bare, which is how GraphQL enum literals are written.
QUOTED_ARGUMENT_KEYS = frozenset({"namespace", "key", "query", "after", "before", "type"})


class Variable:
    """Reference to an operation variable, rendered as ``$name``."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return f"${self.name}"

    def __eq__(self, other) -> bool:
        return isinstance(other, Variable) and other.name == self.name

    def __hash__(self) -> int:
        return hash(("Variable", self.name))


@cached(max_size=512)
def graphql_key(key) -> str:
    """Convert an argument key such as ``sort_key`` to ``sortKey``."""
    return inflection.camelize(str(key), False)


def format_argument_value(key, value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Variable)):
        return str(value)
    if isinstance(value, str):
        if str(key) in QUOTED_ARGUMENT_KEYS:
            return f'"{value}"'
        return value
    return str(value)


def format_arguments(arguments: Optional[Mapping[str, Any]]) -> str:
    """Render inline arguments, dropping None values."""
    if not arguments:
        return ""
    rendered = [
        f"{graphql_key(key)}: {format_argument_value(key, value)}"
        for key, value in arguments.items()
        if value is not None
    ]
    return f"({', '.join(rendered)})" if rendered else ""


def _compact_default(compact: Optional[bool]) -> bool:
    if compact is None:
        return bool(get_configuration().compact_queries)
    return compact


class Node:
    """A node of the query tree.

    Args:
        name: The GraphQL field name.
        alias: Optional response alias.
        arguments: Inline arguments, rendered in insertion order.
        children: Child selections.
    """

    def __init__(
        self,
        name: str,
        alias: Optional[str] = None,
        arguments: Optional[Mapping[str, Any]] = None,
        children: Optional[Sequence["Node"]] = None,
    ) -> None:
        self.name = name
        self.alias = alias
        self.arguments: Dict[str, Any] = dict(arguments or {})
        self.children: List[Node] = list(children or [])

    def add_child(self, node: "Node") -> "Node":
        self.children.append(node)
        return node

    @property
    def head(self) -> str:
        name = f"{self.alias}: {self.name}" if self.alias else self.name
        return f"{name}{format_arguments(self.arguments)}"

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        raise NotImplementedError(f"{type(self).__name__} must implement render")

    def _block(self, head: str, children: Sequence["Node"], compact: bool, level: int) -> str:
        body = [child.render(compact, level + 1) for child in children]
        if compact:
            return f"{head} {{ {' '.join(body)} }}"
        inner = "\n".join(f"{INDENT * (level + 1)}{line}" for line in body)
        return f"{head} {{\n{inner}\n{INDENT * level}}}"

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.head!r}, children={len(self.children)})"


class Field(Node):
    """A scalar field, or an object field with nested selections."""

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        compact = _compact_default(compact)
        if not self.children:
            return self.head
        return self._block(self.head, self.children, compact, level)


class Singular(Node):
    """A has-one association selecting its target's fields directly."""

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        compact = _compact_default(compact)
        return self._block(self.head, self.children, compact, level)


class Connection(Node):
    """A plural association rendered as ``field(args) { edges { node { ... } } }``."""

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        compact = _compact_default(compact)
        edges = Field("edges", children=[Field("node", children=self.children)])
        return self._block(self.head, [edges], compact, level)


class Raw(Node):
    """A literal GraphQL selection emitted verbatim."""

    def __init__(self, graphql: str) -> None:
        super().__init__("raw")
        self.graphql = graphql

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        return self.graphql


class FragmentSpread(Node):
    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        return f"...{self.name}"


class InlineFragment(Node):
    """A type condition inside a selection: ``... on Type { ... }``."""

    def __init__(self, on: str, children: Optional[Sequence[Node]] = None) -> None:
        super().__init__(on, children=children)
        self.on = on

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        compact = _compact_default(compact)
        return self._block(f"... on {self.on}", self.children, compact, level)


class Fragment(Node):
    """A named fragment definition: ``fragment Name on Type { ... }``."""

    def __init__(self, name: str, on: str, children: Optional[Sequence[Node]] = None) -> None:
        super().__init__(name, children=children)
        self.on = on

    @property
    def spread(self) -> FragmentSpread:
        return FragmentSpread(self.name)

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        compact = _compact_default(compact)
        return self._block(f"fragment {self.name} on {self.on}", self.children, compact, level)


class PageInfo(Field):
    """The `pageInfo { ... }` selection of a cursor connection."""

    def __init__(self) -> None:
        super().__init__("pageInfo", children=[Field(name) for name in PAGE_INFO_FIELDS])


class Operation(Node):
    """A query operation with optional name and variable definitions."""

    def __init__(
        self,
        name: Optional[str] = None,
        variable_definitions: Optional[Mapping[str, str]] = None,
        children: Optional[Sequence[Node]] = None,
    ) -> None:
        super().__init__(name or "", children=children)
        self.variable_definitions = dict(variable_definitions or {})

    @property
    def head(self) -> str:
        head = f"query {self.name}" if self.name else "query"
        if self.variable_definitions:
            definitions = ", ".join(
                f"${name}: {gql_type}" for name, gql_type in self.variable_definitions.items()
            )
            head = f"{head}({definitions})"
        return head

    def render(self, compact: Optional[bool] = None, level: int = 0) -> str:
        compact = _compact_default(compact)
        return self._block(self.head, self.children, compact, level)


class Document:
    """Fragment definitions followed by the operation that spreads them."""

    def __init__(self, operation: Operation, fragments: Sequence[Fragment] = ()) -> None:
        self.operation = operation
        self.fragments = list(fragments)

    def render(self, compact: Optional[bool] = None) -> str:
        compact = _compact_default(compact)
        parts = [fragment.render(compact) for fragment in self.fragments]
        parts.append(self.operation.render(compact))
        return " ".join(parts) if compact else "\n\n".join(parts) + "\n"

    def __str__(self) -> str:
        return self.render()
