"""HTTP transports for the Admin and Customer Account GraphQL APIs."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

import requests
import simplejson
from singer_sdk.exceptions import FatalAPIError, RetriableAPIError

from shopify_gql_orm.auth import CustomerAccessTokenAuth, ShopifyAccessTokenAuth
from shopify_gql_orm.config import LOGGER_NAME

DEFAULT_API_VERSION = "2024-10"
RETRIABLE_ERROR_CODES = ("THROTTLED", "MAX_COST_EXCEEDED")


class ShopifyGraphQLClient:
    """Base transport: POST a query, validate the response, return its JSON."""

    extra_retry_statuses = [HTTPStatus.TOO_MANY_REQUESTS]

    def __init__(
        self,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout
        self._requests_session = session
        self.logger = logging.getLogger(LOGGER_NAME)

    @property
    def url(self) -> str:
        raise NotImplementedError

    @property
    def auth(self) -> requests.auth.AuthBase:
        raise NotImplementedError

    @property
    def requests_session(self) -> requests.Session:
        if self._requests_session is None:
            self._requests_session = requests.Session()
        return self._requests_session

    @property
    def http_headers(self) -> dict:
        """Return the http headers needed.

        Returns:
            A dictionary of HTTP headers.
        """
        headers = {}
        headers["Content-Type"] = "application/json"
        headers["Accept"] = "application/json"
        return headers

    def response_error_message(self, response: requests.Response) -> str:
        if HTTPStatus.BAD_REQUEST <= response.status_code < HTTPStatus.INTERNAL_SERVER_ERROR:
            error_type = "Client"
        else:
            error_type = "Server"
        return (
            f"{response.status_code} {error_type} Error: "
            f"{response.reason} for path: {self.url}"
        )

    def validate_response(self, response: requests.Response) -> None:
        """Validate HTTP response."""

        if (
            response.status_code in self.extra_retry_statuses
            or HTTPStatus.INTERNAL_SERVER_ERROR
            <= response.status_code
            <= max(HTTPStatus)
        ):
            msg = self.response_error_message(response)
            raise RetriableAPIError(msg, response)

        if (
            HTTPStatus.BAD_REQUEST
            <= response.status_code
            < HTTPStatus.INTERNAL_SERVER_ERROR
        ):
            msg = self.response_error_message(response)
            raise FatalAPIError(msg)

        json_resp = response.json()

        if errors := json_resp.get("errors"):
            codes = [error.get("extensions", {}).get("code") for error in errors]
            messages = "; ".join(error.get("message", "") for error in errors)
            if any(code in RETRIABLE_ERROR_CODES for code in codes):
                raise RetriableAPIError(messages, response)
            if json_resp.get("data") is None:
                raise FatalAPIError(messages)
            # Partial response: data is usable, the failing fields are null.
            self.logger.warning(f"GraphQL errors in partial response: {messages}")

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> dict:
        """Run query and return the full response body (data and extensions)."""
        request_data = {"query": query, "variables": variables or {}}
        self.logger.debug(f"Attempting query:\n{query}")
        response = self.requests_session.post(
            self.url,
            data=simplejson.dumps(request_data),
            headers=self.http_headers,
            auth=self.auth,
            timeout=self.timeout,
        )
        self.validate_response(response)
        return response.json()

    def __call__(self, query: str, variables: Optional[Dict[str, Any]] = None) -> dict:
        return self.execute(query, variables)


class AdminApiClient(ShopifyGraphQLClient):
    """Admin API transport for ``<store>.myshopify.com``.

    Example:
        configure(admin_api_client=AdminApiClient("my-store", "shpat_..."))
    """

    def __init__(self, store: str, access_token: str, api_version: str = DEFAULT_API_VERSION, **kwargs) -> None:
        super().__init__(access_token, api_version, **kwargs)
        self.store = store

    @property
    def url(self) -> str:
        return f"https://{self.store}.myshopify.com/admin/api/{self.api_version}/graphql.json"

    @property
    def auth(self) -> ShopifyAccessTokenAuth:
        return ShopifyAccessTokenAuth(self.access_token)


class CustomerAccountApiClient(ShopifyGraphQLClient):
    """Customer Account API transport, authenticated as a single customer."""

    def __init__(self, shop_id, access_token: str, api_version: str = DEFAULT_API_VERSION, **kwargs) -> None:
        super().__init__(access_token, api_version, **kwargs)
        self.shop_id = shop_id

    @property
    def url(self) -> str:
        return f"https://shopify.com/{self.shop_id}/account/customer/api/{self.api_version}/graphql"

    @property
    def auth(self) -> CustomerAccessTokenAuth:
        return CustomerAccessTokenAuth(self.access_token)
