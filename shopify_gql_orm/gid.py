"""Shopify global id (GID) helpers."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional
from urllib.parse import parse_qsl, quote, unquote, urlsplit

from memoization import cached

from shopify_gql_orm.config import get_configuration


class GlobalId(NamedTuple):
    app: str
    model_name: str
    model_id: str
    params: Mapping[str, str]


@cached(max_size=1024)
def parse_gid(value) -> Optional[GlobalId]:
    """Parse a ``gid://app/Model/id`` string, returning None if it is not one."""
    if not isinstance(value, str):
        return None
    try:
        parts = urlsplit(value)
    except ValueError:
        return None
    if parts.scheme != "gid" or not parts.netloc:
        return None
    segments = parts.path.split("/")
    # A leading slash leaves an empty first segment.
    if len(segments) != 3 or segments[0] or not segments[1] or not segments[2]:
        return None
    return GlobalId(
        app=parts.netloc,
        model_name=segments[1],
        model_id=unquote(segments[2]),
        params=MappingProxyType(dict(parse_qsl(parts.query))),
    )


def is_valid_gid(value) -> bool:
    """Return whether value parses as a global id."""
    return parse_gid(value) is not None


def build_gid(model_id, model_name: str, app: Optional[str] = None) -> str:
    """Build a global id for the given GraphQL type and id."""
    app = app or get_configuration().gid_app
    return f"gid://{app}/{model_name}/{quote(str(model_id), safe='')}"


def normalize_gid(id_or_gid, model_name: str, app: Optional[str] = None) -> str:
    """Return id_or_gid unchanged if it already is a GID, else build one.

    Examples:
        normalize_gid(123, "Customer") -> "gid://shopify/Customer/123"
        normalize_gid("gid://shopify/Customer/123", "Customer") -> unchanged
    """
    if is_valid_gid(id_or_gid):
        return id_or_gid
    return build_gid(id_or_gid, model_name, app=app)


def numeric_id(value) -> str:
    """Return the trailing id segment of a GID, without query params."""
    return str(value).split("/")[-1].split("?")[0]
