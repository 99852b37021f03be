"""Query tree construction and rendering."""

import pytest

from shopify_gql_orm.attributes import Attribute, MetafieldAttribute
from shopify_gql_orm.config import configure
from shopify_gql_orm.context import LoaderContext
from shopify_gql_orm.exceptions import ConfigurationError
from shopify_gql_orm.loaders import AdminApiLoader
from shopify_gql_orm.nodes import Field, Variable, format_arguments
from shopify_gql_orm.query_builder import QueryBuilder

from shop_models import Customer, Order, Product, ProductVariant

EXAMPLE_ATTRIBUTES = {
    "id": Attribute("id"),
    "email": Attribute("email", path="defaultEmailAddress.emailAddress"),
}


def context_for(attributes, gql_type="Customer", model_class=None, includes=()):
    return LoaderContext(gql_type, AdminApiLoader, attributes, model_class, includes)


def fragment_text(context):
    return QueryBuilder(context).build_fragment().render(compact=True)


def test_single_record_query_example():
    query = QueryBuilder.single_record_query(context_for(EXAMPLE_ATTRIBUTES))
    assert query == (
        "fragment CustomerFragment on Customer { defaultEmailAddress { emailAddress } id } "
        "query GetCustomer($id: ID!) { customer(id: $id) { ...CustomerFragment } }"
    )


def test_pretty_rendering():
    configure(compact_queries=False)
    query = QueryBuilder.single_record_query(context_for(EXAMPLE_ATTRIBUTES))
    assert query == (
        "fragment CustomerFragment on Customer {\n"
        "  defaultEmailAddress {\n"
        "    emailAddress\n"
        "  }\n"
        "  id\n"
        "}\n"
        "\n"
        "query GetCustomer($id: ID!) {\n"
        "  customer(id: $id) {\n"
        "    ...CustomerFragment\n"
        "  }\n"
        "}\n"
    )


def test_compact_and_pretty_differ_only_in_whitespace():
    context = context_for(Customer.attributes_for_loader(AdminApiLoader), model_class=Customer,
                          includes=["orders", "default_address"])
    compact = QueryBuilder.single_record_query(context, compact=True)
    pretty = QueryBuilder.single_record_query(context, compact=False)
    assert compact != pretty
    assert " ".join(pretty.split()) == compact


def test_dotted_paths_merge_into_one_selection():
    context = context_for(Order.attributes_for_loader(AdminApiLoader), gql_type="Order")
    fragment = fragment_text(context)
    assert fragment == (
        "fragment OrderFragment on Order { "
        "totalPriceSet { shopMoney { amount currencyCode } } id name }"
    )
    assert fragment.count("totalPriceSet") == 1
    assert fragment.count("shopMoney") == 1


def test_descending_through_a_leaf_keeps_the_object_selection():
    attributes = {
        "plan": Attribute("plan", path="shop.plan"),
        "plan_name": Attribute("plan_name", path="shop.plan.displayName"),
    }
    fragment = fragment_text(context_for(attributes, gql_type="App"))
    assert fragment == "fragment AppFragment on App { shop { plan { displayName } } }"


def test_simple_and_nested_selections_of_one_field_coexist():
    attributes = {
        "address": Attribute("address", path="billingAddress"),
        "address_city": Attribute("address_city", path="billingAddress.city"),
        "address_zip": Attribute("address_zip", path="billingAddress.zip"),
    }
    fragment = fragment_text(context_for(attributes, gql_type="Order"))
    assert "billingAddress { city zip }" in fragment
    assert "address: billingAddress" in fragment


def test_alias_only_when_name_differs_from_field():
    attributes = {
        "email": Attribute("email"),
        "first_name": Attribute("first_name"),
        "phone_number": Attribute("phone_number", path="phone"),
    }
    fragment = fragment_text(context_for(attributes))
    assert "{ email first_name: firstName phone_number: phone }" in fragment


@pytest.mark.parametrize("declared, value_field", [("json", "jsonValue"), ("string", "value"), ("integer", "value")])
def test_metafield_value_field(declared, value_field):
    attributes = {"points": MetafieldAttribute("points", namespace="loyalty", key="points", type=declared)}
    fragment = fragment_text(context_for(attributes))
    assert (
        'pointsMetafield: metafield(namespace: "loyalty", key: "points") '
        f"{{ {value_field} }}"
    ) in fragment


def test_node_order_tree_simple_metafield_raw():
    fragment = fragment_text(
        context_for(ProductVariant.attributes_for_loader(AdminApiLoader), gql_type="ProductVariant")
    )
    assert fragment == (
        "fragment ProductVariantFragment on ProductVariant { id sku "
        'specsMetafield: metafield(namespace: "custom", key: "specs") { jsonValue } '
        "tracked: inventoryItem { tracked } }"
    )


def test_nested_attributes_come_before_simple_ones():
    attributes = {
        "id": Attribute("id"),
        "total": Attribute("total", path="totalPriceSet.shopMoney.amount"),
        "tracked": Attribute("tracked", raw_graphql="x { y }"),
        "points": MetafieldAttribute("points", namespace="a", key="b"),
    }
    fragment = fragment_text(context_for(attributes, gql_type="Order"))
    positions = [
        fragment.index("totalPriceSet"),
        fragment.index(" id "),
        fragment.index("pointsMetafield"),
        fragment.index("tracked: x"),
    ]
    assert positions == sorted(positions)


def test_fragment_without_attributes_raises():
    with pytest.raises(ConfigurationError):
        QueryBuilder(context_for({})).build_fragment()


def test_plural_connection_renders_edges_with_inline_arguments():
    context = context_for(
        Customer.attributes_for_loader(AdminApiLoader), model_class=Customer, includes=["orders"]
    )
    fragment = fragment_text(context)
    assert (
        "orders(first: 5, sortKey: CREATED_AT) { edges { node { "
        "totalPriceSet { shopMoney { amount currencyCode } } id name } } }"
    ) in fragment


def test_singular_connection_is_aliased_when_names_differ():
    context = context_for(
        Customer.attributes_for_loader(AdminApiLoader), model_class=Customer, includes="default_address"
    )
    assert "default_address: defaultAddress { id city }" in fragment_text(context)


def test_nested_includes_recurse():
    context = context_for(
        Customer.attributes_for_loader(AdminApiLoader),
        model_class=Customer,
        includes=[{"orders": ["line_items"]}],
    )
    fragment = fragment_text(context)
    assert (
        "line_items: lineItems(first: 10) { edges { node { id title quantity } } }"
    ) in fragment
    assert fragment.index("orders(") < fragment.index("lineItems(")


def test_connection_alias_and_id_fallback():
    context = context_for(
        Product.attributes_for_loader(AdminApiLoader),
        gql_type="Product",
        model_class=Product,
        includes=["images", "featured_variants"],
    )
    fragment = fragment_text(context)
    assert "images(first: 3) { edges { node { id } } }" in fragment
    assert "featured_variants: variants(first: 1) { edges { node {" in fragment


def test_unknown_include_names_are_skipped():
    context = context_for(
        Customer.attributes_for_loader(AdminApiLoader), model_class=Customer, includes=["wishlist"]
    )
    assert "wishlist" not in fragment_text(context)


def test_current_viewer_query():
    query = QueryBuilder.current_viewer_query(context_for(EXAMPLE_ATTRIBUTES))
    assert query.endswith("query GetCurrentCustomer { customer { ...CustomerFragment } }")


def test_collection_query():
    query = QueryBuilder.collection_query(
        context_for(EXAMPLE_ATTRIBUTES), "customers", {"query": "email:'a@b.com'", "first": 10}
    )
    assert query.endswith(
        "query GetCustomers { customers(query: \"email:'a@b.com'\", first: 10) "
        "{ nodes { ...CustomerFragment } } }"
    )


def test_collection_query_drops_empty_search():
    query = QueryBuilder.collection_query(
        context_for(EXAMPLE_ATTRIBUTES), "customers", {"query": None, "first": 10}
    )
    assert "customers(first: 10) { nodes" in query


def test_paginated_collection_query_adds_page_info():
    query = QueryBuilder.paginated_collection_query(
        context_for(EXAMPLE_ATTRIBUTES), "customers", {"first": 2, "after": "abc"}
    )
    assert query.endswith(
        'query GetCustomers { customers(first: 2, after: "abc") { '
        "pageInfo { hasNextPage hasPreviousPage startCursor endCursor } "
        "nodes { ...CustomerFragment } } }"
    )


def test_root_connection_query():
    query = QueryBuilder.connection_query(
        context_for(Order.attributes_for_loader(AdminApiLoader), gql_type="Order"),
        "orders",
        {"first": 5, "reverse": True},
    )
    assert query.startswith("fragment OrderFragment on Order {")
    assert query.endswith(
        "query { orders(first: 5, reverse: true) { "
        "pageInfo { hasNextPage hasPreviousPage startCursor endCursor } "
        "edges { node { ...OrderFragment } } } }"
    )


def test_nested_connection_query():
    query = QueryBuilder.connection_query(
        context_for(Order.attributes_for_loader(AdminApiLoader), gql_type="Order"),
        "orders",
        {"first": 5},
        parent_query="customer",
    )
    assert query.endswith(
        "query($id: ID!) { customer(id: $id) { orders(first: 5) { "
        "pageInfo { hasNextPage hasPreviousPage startCursor endCursor } "
        "edges { node { ...OrderFragment } } } } }"
    )


def test_singular_nested_connection_query():
    query = QueryBuilder.connection_query(
        context_for(EXAMPLE_ATTRIBUTES),
        "customer",
        None,
        parent_query="order",
        singular=True,
    )
    assert query.endswith(
        "query($id: ID!) { order(id: $id) { customer { ...CustomerFragment } } }"
    )


def test_fragment_defined_once():
    query = QueryBuilder.paginated_collection_query(
        context_for(EXAMPLE_ATTRIBUTES), "customers", {"first": 2}
    )
    assert query.count("fragment CustomerFragment") == 1
    assert query.count("...CustomerFragment") == 1


@pytest.mark.parametrize(
    "arguments, expected",
    [
        ({"first": 5}, "(first: 5)"),
        ({"sort_key": "CREATED_AT"}, "(sortKey: CREATED_AT)"),
        ({"reverse": False}, "(reverse: false)"),
        ({"namespace": "custom", "key": "size"}, '(namespace: "custom", key: "size")'),
        ({"query": "tag:x", "before": "c1"}, '(query: "tag:x", before: "c1")'),
        ({"id": Variable("id")}, "(id: $id)"),
        ({"after": None, "first": 1}, "(first: 1)"),
        ({"after": None}, ""),
        ({}, ""),
    ],
)
def test_argument_formatting(arguments, expected):
    assert format_arguments(arguments) == expected


def test_field_node_rendering():
    node = Field("a", alias="b", arguments={"first": 1}, children=[Field("c"), Field("d")])
    assert node.render(compact=True) == "b: a(first: 1) { c d }"
    assert node.render(compact=False) == "b: a(first: 1) {\n  c\n  d\n}"
