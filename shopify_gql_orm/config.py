"""Process-wide configuration for shopify-gql-orm."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from singer_sdk import typing as th

from shopify_gql_orm.exceptions import ConfigurationError

LOGGER_NAME = "shopify_gql_orm"

config_jsonschema = th.PropertiesList(
    th.Property(
        "compact_queries",
        th.BooleanType,
        default=True,
        description="Render queries on a single line instead of indented.",
    ),
    th.Property(
        "log_queries",
        th.BooleanType,
        default=False,
        description="Log every query and its variables before execution.",
    ),
    th.Property(
        "max_objects_per_paginated_query",
        th.IntegerType,
        default=250,
        description="Upper bound for first/last on paginated collection queries.",
    ),
    th.Property(
        "gid_app",
        th.StringType,
        default="shopify",
        description="The app segment used when building global ids.",
    ),
).to_dict()


class Configuration:
    """Settings read by loaders, query builders and transports.

    Treat an instance as immutable once the application has started; it is
    shared by every query cycle in the process.
    """

    def __init__(self, **settings: Any) -> None:
        defaults = {
            name: prop.get("default")
            for name, prop in config_jsonschema["properties"].items()
        }
        self.compact_queries: bool = defaults["compact_queries"]
        self.log_queries: bool = defaults["log_queries"]
        self.max_objects_per_paginated_query: int = defaults[
            "max_objects_per_paginated_query"
        ]
        self.gid_app: str = defaults["gid_app"]
        self.admin_api_client: Optional[Callable] = None
        self.customer_account_client_factory: Optional[Callable] = None
        self.logger: logging.Logger = logging.getLogger(LOGGER_NAME)
        self.update(**settings)

    def update(self, **settings: Any) -> "Configuration":
        """Apply settings, rejecting names this configuration does not know."""
        for name, value in settings.items():
            if not hasattr(self, name):
                raise ConfigurationError(f"Unknown configuration setting: {name}")
            setattr(self, name, value)
        if int(self.max_objects_per_paginated_query) < 1:
            raise ConfigurationError("max_objects_per_paginated_query must be positive")
        return self

    def __repr__(self) -> str:
        return (
            f"Configuration(compact_queries={self.compact_queries}, "
            f"log_queries={self.log_queries}, "
            f"max_objects_per_paginated_query={self.max_objects_per_paginated_query})"
        )


_configuration: Optional[Configuration] = None


def get_configuration() -> Configuration:
    """Return the process configuration, creating it on first use."""
    global _configuration
    if _configuration is None:
        _configuration = Configuration()
    return _configuration


def configure(**settings: Any) -> Configuration:
    """Update the process configuration.

    Example:
        configure(admin_api_client=AdminApiClient("my-store", token))
    """
    return get_configuration().update(**settings)


def reset_configuration() -> Configuration:
    """Drop all settings back to their defaults."""
    global _configuration
    _configuration = Configuration()
    return _configuration
