"""Base HTTP client with throttle retry."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
import logging


logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base API error."""
    pass


class RateLimitError(APIError):
    """Rate limit exceeded."""
    pass


class NotFoundError(APIError):
    """Resource not found."""
    pass


class AuthenticationError(APIError):
    """Authentication failed."""
    pass


class GraphQLError(APIError):
    """Top-level GraphQL errors in an otherwise successful response."""

    def __init__(self, errors: Any):
        self.errors = errors
        super().__init__(f"GraphQL errors: {errors}")


class UserErrorsError(APIError):
    """Mutation returned userErrors."""

    def __init__(self, operation: str, user_errors: list):
        self.operation = operation
        self.user_errors = user_errors
        super().__init__(f"{operation} errors: {user_errors}")


class BaseClient(ABC):
    """Base HTTP client issuing one request at a time."""

    user_agent = "Shopify-Stock-Sync/1.0.0"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(30.0),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Base URL for the API."""
        pass

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        return {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    def _handle_response_errors(self, response: httpx.Response) -> None:
        """Handle common HTTP errors."""
        if response.status_code in (401, 403):
            raise AuthenticationError(f"Authentication failed ({response.status_code}) - check the access token")
        elif response.status_code == 404:
            raise NotFoundError(f"Resource not found: {response.request.url}")
        elif response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            if retry_after:
                raise RateLimitError(f"Rate limit exceeded. Retry after {retry_after} seconds")
            raise RateLimitError("Rate limit exceeded")
        elif response.status_code >= 500:
            raise APIError(f"Server error: {response.status_code} - {response.text}")
        elif not response.is_success:
            raise APIError(f"API error: {response.status_code} - {response.text}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((RateLimitError, httpx.TimeoutException)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Send a request, raising on error status codes."""
        response = await self.client.request(
            method=method,
            url=url,
            headers=headers if headers is not None else self._get_headers(),
            params=params,
            json=json_data,
        )
        self._handle_response_errors(response)
        return response

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make a request against base_url and decode the JSON body."""
        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}" if endpoint else self.base_url

        try:
            response = await self._send(method, url, params=params, json_data=json_data)
        except httpx.TimeoutException:
            raise APIError("Request timed out")
        except httpx.TransportError as e:
            raise APIError(f"Connection failed: {e}")

        try:
            return response.json()
        except ValueError:
            raise APIError(f"Invalid JSON (HTTP {response.status_code}): {response.text[:200]}")

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a GET request."""
        return await self._make_request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json_data: Optional[Dict[str, Any]] = None) -> Any:
        """Make a POST request."""
        return await self._make_request("POST", endpoint, json_data=json_data)
