"""Models shared by the test-suite."""

from shopify_gql_orm.attributes import (
    Attribute,
    Connection,
    MetafieldAttribute,
    MetaobjectConnection,
    MetaobjectField,
    SingularConnection,
)
from shopify_gql_orm.loaders import CustomerAccountApiLoader
from shopify_gql_orm.metaobject import MetaobjectModel
from shopify_gql_orm.model import ShopifyModel


class Customer(ShopifyModel):
    gql_type = "Customer"
    fields = [
        Attribute("id"),
        Attribute("email", path="defaultEmailAddress.emailAddress"),
        Attribute("first_name"),
        Attribute("created_at", type="datetime"),
        MetafieldAttribute("loyalty_points", namespace="loyalty", key="points", type="integer"),
    ]
    connections = [
        Connection(
            "orders",
            default_arguments={"first": 5, "sort_key": "CREATED_AT"},
            inverse_of="customer",
        ),
        SingularConnection("default_address", class_name="MailingAddress"),
    ]
    loader_overrides = {
        CustomerAccountApiLoader: {
            "email": {"path": "emailAddress.emailAddress"},
            "created_at": {"nullable": True, "type": "string"},
        },
    }


class Order(ShopifyModel):
    gql_type = "Order"
    fields = [
        Attribute("id"),
        Attribute("name"),
        Attribute("total", path="totalPriceSet.shopMoney.amount", type="float"),
        Attribute("currency", path="totalPriceSet.shopMoney.currencyCode"),
    ]
    connections = [
        Connection("line_items", inverse_of="order", default_arguments={"first": 10}),
        SingularConnection("customer", inverse_of="orders"),
    ]


class LineItem(ShopifyModel):
    gql_type = "LineItem"
    fields = [
        Attribute("id"),
        Attribute("title"),
        Attribute("quantity", type="integer", null=False),
    ]
    connections = [
        SingularConnection("order"),
    ]


class MailingAddress(ShopifyModel):
    gql_type = "MailingAddress"
    fields = [
        Attribute("id"),
        Attribute("city"),
    ]


class Image(ShopifyModel):
    gql_type = "Image"
    fields = []


class ProductVariant(ShopifyModel):
    gql_type = "ProductVariant"
    fields = [
        Attribute("id"),
        Attribute("sku"),
        Attribute(
            "tracked",
            path="tracked.tracked",
            type="boolean",
            raw_graphql="inventoryItem { tracked }",
        ),
        MetafieldAttribute("specs", namespace="custom", key="specs", type="json"),
    ]


class Product(ShopifyModel):
    gql_type = "Product"
    fields = [
        Attribute("id"),
        Attribute("title"),
        Attribute("tags", type="string"),
    ]
    connections = [
        Connection("variants", class_name="ProductVariant", default_arguments={"first": 10}),
        Connection("images", default_arguments={"first": 3}, eager_load=True),
        Connection(
            "featured_variants",
            class_name="ProductVariant",
            query_name="variants",
            default_arguments={"first": 1},
        ),
        MetaobjectConnection("provider", namespace="custom", key="provider"),
    ]


class Provider(MetaobjectModel):
    metaobject_type = "provider"
    fields = [
        MetaobjectField("description"),
        MetaobjectField("rating", type="integer"),
        MetaobjectField("specs", key="tech-specs", type="json"),
    ]
