"""Listings API access: transport, endpoints and request bodies."""

from listings_mcp.api.client import (
    ApiClient,
    ApiError,
    RequestFailed,
    TransportError,
    get_client,
)
from listings_mcp.api.endpoint import Endpoint, RequestOutcome
from listings_mcp.api.lifetime import Lifetime
from listings_mcp.api.multipart import MultipartForm, build_listing_form

__all__ = [
    "ApiClient",
    "ApiError",
    "RequestFailed",
    "TransportError",
    "get_client",
    "Endpoint",
    "RequestOutcome",
    "Lifetime",
    "MultipartForm",
    "build_listing_form",
]
