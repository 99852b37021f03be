"""Shared fixtures."""

import pytest

from shopify_gql_orm.config import configure, reset_configuration


class FakeTransport:
    """Callable transport returning canned responses and recording calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, query, variables):
        self.calls.append((query, variables))
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0] if self.responses else {}

    @property
    def queries(self):
        return [query for query, _ in self.calls]


@pytest.fixture(autouse=True)
def fresh_configuration():
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def admin_transport():
    """Install a FakeTransport as the admin API client."""

    def install(*responses):
        transport = FakeTransport(*responses)
        configure(admin_api_client=transport)
        return transport

    return install


@pytest.fixture
def customer_transport():
    """Install a client factory handing out one FakeTransport for every token."""

    def install(*responses):
        transport = FakeTransport(*responses)
        transport.tokens = []

        def factory(token):
            transport.tokens.append(token)
            return transport

        configure(customer_account_client_factory=factory)
        return transport

    return install
