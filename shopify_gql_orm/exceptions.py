"""Exceptions for shopify-gql-orm."""


class ShopifyGraphQLError(Exception):
    """Base error for the mapping layer."""


class ConfigurationError(ShopifyGraphQLError):
    """A required client or setting is missing."""


class SchemaMismatchError(ShopifyGraphQLError, ValueError):
    """The search API rejected one or more query fields."""

    def __init__(self, warnings):
        self.warnings = list(warnings)
        messages = [f"{w.get('field')}: {w.get('message')}" for w in self.warnings]
        super().__init__(f"Shopify query validation failed: {', '.join(messages)}")


class NullConstraintError(ShopifyGraphQLError, ValueError):
    """A non-nullable attribute resolved to None."""

    def __init__(self, attribute, path):
        self.attribute = attribute
        self.path = path
        super().__init__(
            f"Attribute '{attribute}' (GraphQL path: '{path}') "
            "cannot be null but received nil"
        )


class TypeCoercionError(ShopifyGraphQLError, ValueError):
    """A raw value could not be cast to the declared attribute type."""

    def __init__(self, attribute, path, target_type, reason):
        self.attribute = attribute
        self.path = path
        self.target_type = target_type
        self.reason = reason
        super().__init__(
            f"Type conversion failed for attribute '{attribute}' "
            f"(GraphQL path: '{path}') to {target_type}: {reason}"
        )


class UnknownConnectionError(ShopifyGraphQLError, ValueError):
    """An include names a connection the model does not declare."""


class InvalidAttributeError(ShopifyGraphQLError, ValueError):
    """A select names an attribute the model does not declare."""


class RecordNotFound(ShopifyGraphQLError, LookupError):
    """Find by id returned no data."""
