"""URL construction for the listings API."""

from listings_mcp.config import ListingsConfig

LOGIN_PATH = "/api/login"
REGISTER_PATH = "/api/register"
LOGOUT_PATH = "/logout"
LISTINGS_PATH = "/api/listings"
CREATE_LISTING_PATH = "/api/listings/create"


def listing_path(listing_id: str) -> str:
    """Path of a single listing, used for update and delete."""
    return f"{LISTINGS_PATH}/{listing_id}"


def resolve_url(path: str, config: ListingsConfig) -> str:
    """Turn an endpoint path into an absolute URL.

    Absolute URLs pass through. Relative paths go to the development backend
    in development builds and to the serving origin otherwise.

    Examples:
        "/api/listings" (production)  -> "http://localhost:8000/api/listings"
        "/api/listings" (development) -> "https://...onrender.com/api/listings"
    """
    if path.startswith(("http://", "https://")):
        return path
    base = config.dev_api_url if config.is_development else config.base_url
    if not path.startswith("/"):
        path = "/" + path
    return base.rstrip("/") + path
