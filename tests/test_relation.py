"""Relations: chaining, paging and finders."""

import pytest

from shopify_gql_orm.config import configure
from shopify_gql_orm.exceptions import InvalidAttributeError, RecordNotFound, UnknownConnectionError
from shopify_gql_orm.relation import Relation

from shop_models import Customer, Order, Product


def customers_page(ids, has_next=False, end_cursor=None):
    return {
        "data": {
            "customers": {
                "pageInfo": {
                    "hasNextPage": has_next,
                    "hasPreviousPage": False,
                    "startCursor": None,
                    "endCursor": end_cursor,
                },
                "nodes": [{"id": f"gid://shopify/Customer/{customer_id}"} for customer_id in ids],
            }
        }
    }


def test_relation_is_lazy(admin_transport):
    transport = admin_transport(customers_page([1]))
    relation = Customer.where(email="a@b.com")
    assert isinstance(relation, Relation)
    assert not transport.calls


def test_where_with_dict(admin_transport):
    transport = admin_transport(customers_page([1]))
    customers = Customer.where({"email": "a@b.com"}).to_list()

    assert "customers(query: \"email:'a@b.com'\", first: 250) { pageInfo {" in transport.queries[0]
    assert customers == [Customer(id="gid://shopify/Customer/1")]


def test_where_with_bound_parameters(admin_transport):
    transport = admin_transport(customers_page([]))
    Customer.where("email:? AND state:?", "a@b.com", "ENABLED").to_list()
    assert "customers(query: \"email:'a@b.com' AND state:'ENABLED'\"" in transport.queries[0]


def test_where_cannot_be_chained():
    relation = Customer.where(email="a@b.com")
    with pytest.raises(ValueError, match="Chaining multiple where clauses is not supported"):
        relation.where(first_name="Ada")
    assert relation.where() is relation


def test_find(admin_transport):
    transport = admin_transport({"data": {"customer": {"id": "gid://shopify/Customer/7", "first_name": "Ada"}}})
    customer = Customer.find(7)
    assert customer.first_name == "Ada"
    assert transport.calls[0][1] == {"id": "gid://shopify/Customer/7"}


def test_find_missing_record(admin_transport):
    admin_transport({"data": {"customer": None}})
    with pytest.raises(RecordNotFound, match="Couldn't find Customer with id=99"):
        Customer.find(99)


def test_find_with_includes(admin_transport):
    transport = admin_transport(
        {
            "data": {
                "customer": {
                    "id": "gid://shopify/Customer/7",
                    "orders": {"edges": [{"node": {"id": "gid://shopify/Order/1", "name": "#1"}}]},
                }
            }
        }
    )
    customer = Customer.includes("orders").find(7)

    assert "orders(first: 5, sortKey: CREATED_AT) { edges { node {" in transport.queries[0]
    assert customer.connection_loaded("orders")
    assert customer.orders[0].name == "#1"
    assert customer.orders[0].customer is customer
    assert len(transport.calls) == 1


def test_includes_rejects_unknown_connections():
    with pytest.raises(UnknownConnectionError, match="Invalid connection for Customer: wishlist"):
        Customer.includes("wishlist")


def test_select(admin_transport):
    transport = admin_transport(customers_page([1]))
    Customer.select("email").to_list()
    fragment = transport.queries[0].split("fragment CustomerFragment on Customer")[1]
    assert "defaultEmailAddress { emailAddress }" in fragment
    assert "firstName" not in fragment
    assert "first_name" not in fragment


def test_select_rejects_unknown_attributes():
    with pytest.raises(InvalidAttributeError, match="Invalid attributes for Customer: nickname"):
        Customer.select("nickname")


def test_limit_and_page_size(admin_transport):
    transport = admin_transport(
        customers_page([1, 2], has_next=True, end_cursor="c1"),
        customers_page([3, 4], has_next=True, end_cursor="c2"),
    )
    customers = Customer.all().limit(3).in_pages(of=2).to_list()

    assert len(customers) == 3
    assert len(transport.calls) == 2
    assert "customers(first: 2)" in transport.queries[0]
    assert 'customers(first: 1, after: "c1")' in transport.queries[1]


def test_paging_stops_without_next_page(admin_transport):
    transport = admin_transport(
        customers_page([1], has_next=True, end_cursor="c1"),
        customers_page([2]),
    )
    assert len(Customer.all().to_list()) == 2
    assert len(transport.calls) == 2


def test_in_pages_is_capped(admin_transport):
    transport = admin_transport(customers_page([]))
    configure(max_objects_per_paginated_query=50)
    Customer.all().in_pages(of=100).to_list()
    assert "customers(first: 50)" in transport.queries[0]


def test_first(admin_transport):
    transport = admin_transport(customers_page([1], has_next=True, end_cursor="c1"))
    assert Customer.first() == Customer(id="gid://shopify/Customer/1")
    assert "customers(first: 1)" in transport.queries[0]
    assert len(transport.calls) == 1


def test_first_with_count(admin_transport):
    transport = admin_transport(customers_page([1, 2]))
    assert len(Customer.first(2)) == 2
    assert "customers(first: 2)" in transport.queries[0]


def test_exists_and_count(admin_transport):
    admin_transport(customers_page([]))
    assert not Customer.where(email="nobody@b.com").exists()
    assert Customer.all().count() == 0


def test_find_by(admin_transport):
    transport = admin_transport(customers_page([5]))
    assert Customer.find_by(email="a@b.com").id == "gid://shopify/Customer/5"
    assert "customers(query: \"email:'a@b.com'\", first: 1)" in transport.queries[0]


def test_records_keep_the_relation_loader(admin_transport):
    admin_transport(customers_page([1]))
    relation = Customer.includes("orders")
    customer = relation.first()
    assert customer.loader.included_connections == ["orders"]


def test_eager_loaded_connections_are_always_included(admin_transport):
    transport = admin_transport(
        {
            "data": {
                "products": {
                    "pageInfo": {"hasNextPage": False},
                    "nodes": [{"id": "gid://shopify/Product/1", "images": {"edges": []}}],
                }
            }
        }
    )
    product = Product.first()
    assert "images(first: 3) { edges { node { id } } }" in transport.queries[0]
    assert product.connection_loaded("images")
    assert product.images == []


def test_order_query_name(admin_transport):
    transport = admin_transport(
        {"data": {"orders": {"pageInfo": {"hasNextPage": False}, "nodes": []}}}
    )
    assert Order.all().to_list() == []
    assert "orders(first: 250)" in transport.queries[0]


def test_first_zero_returns_nothing(admin_transport):
    transport = admin_transport(customers_page([1]))
    assert Customer.all().first(0) == []
    assert not transport.calls


def test_limit_zero_skips_the_query(admin_transport):
    transport = admin_transport(customers_page([1]))
    assert Customer.all().limit(0).to_list() == []
    assert not transport.calls


def test_where_rejects_mixed_positional_and_keyword_conditions():
    with pytest.raises(ValueError, match="not both"):
        Customer.where("email:?", "a@b.com", state="ENABLED")
    with pytest.raises(ValueError, match="not both"):
        Customer.where({"email": "a@b.com"}, state="ENABLED")
