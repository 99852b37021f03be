"""Shopify Authentication."""

from requests.auth import AuthBase


class ShopifyAccessTokenAuth(AuthBase):
    """Admin API access token, sent as ``X-Shopify-Access-Token``."""

    def __init__(self, access_token: str) -> None:
        self.access_token = access_token

    def __call__(self, request):
        request.headers["X-Shopify-Access-Token"] = self.access_token
        return request


class CustomerAccessTokenAuth(AuthBase):
    """Customer Account API token, sent as the raw ``Authorization`` header."""

    def __init__(self, access_token: str) -> None:
        self.access_token = access_token

    def __call__(self, request):
        request.headers["Authorization"] = self.access_token
        return request
