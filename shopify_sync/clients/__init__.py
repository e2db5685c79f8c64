"""HTTP clients for Shopify, ready2order and the vendor site."""

from .shopify import ShopifyClient
from .ready2order import Ready2OrderClient
from .vendor import VendorClient
from .base import (
    APIError,
    RateLimitError,
    NotFoundError,
    AuthenticationError,
    GraphQLError,
    UserErrorsError,
)

__all__ = [
    "ShopifyClient",
    "Ready2OrderClient",
    "VendorClient",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "AuthenticationError",
    "GraphQLError",
    "UserErrorsError",
]
